"""
Member endpoints for API v1.

Shows the member card of any user, as opened from a party or guild
member list.
"""

from fastapi import APIRouter, Depends

from guild_hall_api.app.core.security import get_current_user
from guild_hall_api.app.schemas.user import MemberRead
from guild_hall_api.app.services.user_service import UserService


router = APIRouter()


@router.get("/{user_id}", response_model=MemberRead)
async def get_member(user_id: str, current_user: dict = Depends(get_current_user)) -> MemberRead:
    return await UserService.get_member(user_id)
