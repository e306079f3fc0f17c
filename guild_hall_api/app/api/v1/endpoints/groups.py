"""
Group endpoints for API v1.

Membership (list, get, create, update, join, leave, invite, remove
member) and group chat.  Every route requires an authenticated user;
leader-only and privacy rules are enforced by the services, which
raise errors rendered by the global handlers.
"""

from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Query, status

from guild_hall_api.app.core.security import get_current_user
from guild_hall_api.app.schemas.chat import ChatMessageCreate
from guild_hall_api.app.schemas.group import (
    GroupCreate,
    GroupRead,
    GroupSummary,
    GroupUpdate,
    LeaveResult,
)
from guild_hall_api.app.services.chat_service import ChatService
from guild_hall_api.app.services.group_service import LIST_CATEGORIES, GroupService


router = APIRouter()


@router.get("/", response_model=Union[Dict[str, List[GroupSummary]], List[GroupSummary]])
async def list_groups(
    type: Optional[str] = Query(None, description="Comma-separated categories: party, guilds, public, tavern"),
    current_user: dict = Depends(get_current_user),
) -> Union[Dict[str, List[GroupSummary]], List[GroupSummary]]:
    """List the groups visible to the current user.

    Without ``type`` all categories are returned as a map.  When
    ``type`` is given, the requested categories are concatenated into
    a single list in the requested order.
    """
    if not type:
        return await GroupService.list_groups(current_user, LIST_CATEGORIES)
    requested = [t.strip() for t in type.split(",") if t.strip()]
    results = await GroupService.list_groups(current_user, requested)
    flat: List[GroupSummary] = []
    for category in results:
        flat.extend(results[category])
    return flat


@router.get("/{group_id}", response_model=GroupRead)
async def get_group(group_id: str, current_user: dict = Depends(get_current_user)) -> GroupRead:
    """Get one group.  ``party`` stands for the caller's own party."""
    return await GroupService.get_group(group_id, current_user)


@router.post("/", response_model=GroupRead)
async def create_group(data: GroupCreate, current_user: dict = Depends(get_current_user)) -> GroupRead:
    """Found a party (free) or a guild (costs one gem)."""
    return await GroupService.create_group(data, current_user)


@router.put("/{group_id}", response_model=GroupRead)
async def update_group(
    group_id: str,
    data: GroupUpdate,
    current_user: dict = Depends(get_current_user),
) -> GroupRead:
    return await GroupService.update_group(group_id, data, current_user)


@router.post("/{group_id}/chat", response_model=GroupRead)
async def post_chat(
    group_id: str,
    data: ChatMessageCreate,
    current_user: dict = Depends(get_current_user),
) -> GroupRead:
    return await ChatService.post_message(group_id, data, current_user)


@router.delete("/{group_id}/chat/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat_message(
    group_id: str,
    message_id: str,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete a chat message (author or admin only)."""
    await ChatService.delete_message(group_id, message_id, current_user)
    return None


@router.post("/{group_id}/join", response_model=GroupRead)
async def join_group(group_id: str, current_user: dict = Depends(get_current_user)) -> GroupRead:
    return await GroupService.join_group(group_id, current_user)


@router.post("/{group_id}/leave", response_model=LeaveResult)
async def leave_group(group_id: str, current_user: dict = Depends(get_current_user)) -> LeaveResult:
    return await GroupService.leave_group(group_id, current_user)


@router.post("/{group_id}/invite", response_model=GroupRead)
async def invite_to_group(
    group_id: str,
    uuid: str = Query(..., description="Id of the user to invite"),
    current_user: dict = Depends(get_current_user),
) -> GroupRead:
    return await GroupService.invite(group_id, uuid, current_user)


@router.post("/{group_id}/removeMember", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    group_id: str,
    uuid: str = Query(..., description="Id of the member or invitee to remove"),
    current_user: dict = Depends(get_current_user),
) -> None:
    """Исключить участника или отозвать приглашение.

    Доступно только лидеру группы.  Возвращает 204 при успехе и 400,
    если пользователь не является ни участником, ни приглашённым.
    """
    await GroupService.remove_member(group_id, uuid, current_user)
    return None
