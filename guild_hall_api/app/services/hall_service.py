"""
Service layer for the hall of patrons and heroes.

Listing patrons and heroes is open to every authenticated user.  The
single-hero endpoints are admin tooling that can read and patch any
user record: balance, contributor tier (with the matching gem grant),
ad purchase flag, one whitelisted item path and the blocked flag.
"""

import logging
from typing import Dict, List

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import GuildHallError, NotAuthorizedError
from ..schemas.hall import HeroAuth, HeroRead, HeroUpdate, PatronRead
from . import item_catalog, store


logger = logging.getLogger(__name__)

# Gems granted for reaching each contributor tier.  Tier 8 = moderator,
# tier 9 = staff; neither earns gems.
GEMS_PER_TIER: Dict[int, int] = {1: 3, 2: 3, 3: 3, 4: 4, 5: 4, 6: 4, 7: 4, 8: 0, 9: 0}

# Tier from which the contributor pet is granted.
CONTRIBUTOR_PET_TIER = 6


def tier_grant(old_tier: int, new_tier: int, table: Dict[int, int] = GEMS_PER_TIER) -> float:
    """Balance earned by moving from ``old_tier`` up to ``new_tier``.

    Each tier crossed counts once, walking down from ``new_tier``; the
    table is in gems and balance is in quarter gems.
    """
    amount = 0.0
    tier = new_tier
    while tier > old_tier:
        amount += table.get(tier, 0) / 4
        tier -= 1
    return amount


def _project_patron(row) -> PatronRead:
    return PatronRead(
        id=row["id"],
        name=row["name"],
        contributor=store.loads_json(row["contributor"], None),
        backer=store.loads_json(row["backer"], None),
    )


def _project_hero(hero: store.UserRecord) -> HeroRead:
    return HeroRead(
        id=hero.id,
        name=hero.name,
        balance=hero.balance,
        contributor=hero.contributor or {},
        purchased=hero.purchased,
        items=hero.items,
        auth=HeroAuth(blocked=hero.auth_blocked),
    )


def _require_admin(cursor, user_id: str) -> store.UserRecord:
    admin = store.fetch_user(cursor, user_id)
    if admin is None or not admin.is_admin:
        raise NotAuthorizedError("You don't have admin access")
    return admin


class HallService:
    """Service for the patrons/heroes hall and hero administration."""

    @classmethod
    async def get_patrons(cls, page: int = 0) -> List[PatronRead]:
        """Return one page of backers, highest tier first."""
        per_page = settings.patrons_per_page
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT id, name, contributor, backer FROM users "
                "WHERE CAST(json_extract(backer, '$.tier') AS INTEGER) > 0 "
                "ORDER BY CAST(json_extract(backer, '$.tier') AS INTEGER) DESC, id "
                "LIMIT ? OFFSET ?",
                (per_page, page * per_page),
            ).fetchall()
        return [_project_patron(row) for row in rows]

    @classmethod
    async def get_heroes(cls) -> List[PatronRead]:
        """Return every contributor, highest level first."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT id, name, contributor, backer FROM users "
                "WHERE CAST(json_extract(contributor, '$.level') AS INTEGER) > 0 "
                "ORDER BY CAST(json_extract(contributor, '$.level') AS INTEGER) DESC, id"
            ).fetchall()
        return [_project_patron(row) for row in rows]

    @classmethod
    async def get_hero(cls, hero_id: str, current_user: dict) -> HeroRead:
        with get_cursor() as cursor:
            _require_admin(cursor, current_user["user_id"])
            hero = store.require_user(cursor, hero_id)
        return _project_hero(hero)

    @classmethod
    async def update_hero(cls, hero_id: str, patch: HeroUpdate, current_user: dict) -> HeroRead:
        """Apply an admin patch to any user record.

        Steps run in a fixed order: balance overwrite, tier gem grant,
        contributor merge, ad purchase flag, contributor pet, item path,
        blocked flag.  The grant is added on top of an overwritten
        balance.
        """
        with get_cursor() as cursor:
            admin = _require_admin(cursor, current_user["user_id"])
            hero = store.require_user(cursor, hero_id)

            if patch.balance:
                hero.balance = patch.balance

            new_tier = patch.contributor.get("level") if patch.contributor else None
            old_tier = hero.contributor_level
            if isinstance(new_tier, int) and not isinstance(new_tier, bool) and new_tier > old_tier:
                hero.flags["contributor"] = True
                hero.balance += tier_grant(old_tier, new_tier)

            if patch.contributor:
                hero.contributor = {**(hero.contributor or {}), **patch.contributor}

            if patch.purchased and patch.purchased.ads:
                hero.purchased["ads"] = patch.purchased.ads

            if hero.contributor_level >= CONTRIBUTOR_PET_TIER:
                hero.items.setdefault("pets", {})[item_catalog.CONTRIBUTOR_PET] = 5

            if patch.item_path and patch.item_val and item_catalog.is_settable(patch.item_path):
                item_catalog.set_item_path(hero.items, patch.item_path, patch.item_val)

            if patch.auth is not None and isinstance(patch.auth.blocked, bool):
                hero.auth_blocked = patch.auth.blocked

            store.save_user(cursor, hero)
        logger.info("Admin %s updated hero %s", admin.id, hero.id)
        try:
            from .audit_service import AuditService
            await AuditService.log(
                user_id=admin.id,
                action="update",
                object_type="hero",
                object_id=hero.id,
                details=patch.model_dump(exclude_unset=True, by_alias=True),
            )
        except GuildHallError as exc:
            logger.warning("Audit log for hero %s failed: %s", hero.id, exc)
        return _project_hero(hero)
