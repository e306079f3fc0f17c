"""
Hall endpoints for API v1.

Public listings of patrons (backers) and heroes (contributors), plus
the admin-only routes that read and edit any user record.  Despite the
names, ``/heroes/{hero_id}`` works for every user, not only heroes.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from guild_hall_api.app.core.security import get_current_user
from guild_hall_api.app.schemas.hall import HeroRead, HeroUpdate, PatronRead
from guild_hall_api.app.services.hall_service import HallService


router = APIRouter()

# Keeps ``page * patrons_per_page`` inside SQLite's 64-bit OFFSET.
MAX_PATRON_PAGE = 1_000_000


@router.get("/patrons", response_model=List[PatronRead])
async def get_patrons(
    page: int = Query(0, ge=0, le=MAX_PATRON_PAGE, description="Result page, 50 patrons per page"),
    current_user: dict = Depends(get_current_user),
) -> List[PatronRead]:
    return await HallService.get_patrons(page)


@router.get("/heroes", response_model=List[PatronRead])
async def get_heroes(current_user: dict = Depends(get_current_user)) -> List[PatronRead]:
    return await HallService.get_heroes()


@router.get("/heroes/{hero_id}", response_model=HeroRead)
async def get_hero(hero_id: str, current_user: dict = Depends(get_current_user)) -> HeroRead:
    """Get any user record (admin only)."""
    return await HallService.get_hero(hero_id, current_user)


@router.put("/heroes/{hero_id}", response_model=HeroRead)
async def update_hero(
    hero_id: str,
    patch: HeroUpdate,
    current_user: dict = Depends(get_current_user),
) -> HeroRead:
    """Update any user record (admin only).

    Raising ``contributor.level`` grants gems for every tier crossed and
    tier 6+ grants the contributor pet.
    """
    return await HallService.update_hero(hero_id, patch, current_user)
