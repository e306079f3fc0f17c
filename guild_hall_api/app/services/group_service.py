"""
Business logic for group membership.

The ``GroupService`` lists the groups visible to a user and runs the
membership workflow: founding groups, joining, leaving, inviting and
removing members, and leader-only updates.  Each operation runs in a
single store transaction: rule checks happen first, then the writes,
so a refused request leaves both the user and the group untouched.

Every response for a party is passed through the self-exclusion
projection in ``store.populate_group``; the caller never sees
themselves in their own party's member list.
"""

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Sequence

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import (
    BadRequestError,
    GuildHallError,
    NotAuthorizedError,
    NotFoundError,
    PaymentRequiredError,
)
from ..schemas.group import (
    GroupCreate,
    GroupRead,
    GroupSummary,
    GroupType,
    GroupUpdate,
    LeaveResult,
    Privacy,
)
from . import store


logger = logging.getLogger(__name__)

# Alias accepted by ``get_group`` for "the party I am in".
PARTY_ALIAS = "party"

LIST_CATEGORIES = ("party", "guilds", "public", "tavern")

_SUMMARY_SELECT = (
    "SELECT g.id, g.name, g.description, "
    "(SELECT COUNT(*) FROM group_members c WHERE c.group_id = g.id) AS member_count"
)


def _summaries(rows, with_membership: bool = False) -> List[GroupSummary]:
    return [
        GroupSummary(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            member_count=row["member_count"],
            is_member=bool(row["is_member"]) if with_membership else None,
        )
        for row in rows
    ]


def _list_party(user_id: str) -> List[GroupSummary]:
    with get_cursor() as cursor:
        rows = cursor.execute(
            f"{_SUMMARY_SELECT} FROM groups g JOIN group_members m ON m.group_id = g.id "
            "WHERE g.type = ? AND m.user_id = ?",
            (GroupType.PARTY.value, user_id),
        ).fetchall()
    return _summaries(rows)


def _list_guilds(user_id: str) -> List[GroupSummary]:
    with get_cursor() as cursor:
        rows = cursor.execute(
            f"{_SUMMARY_SELECT} FROM groups g JOIN group_members m ON m.group_id = g.id "
            "WHERE g.type IN (?, ?) AND m.user_id = ? ORDER BY member_count DESC, g.name",
            (GroupType.GUILD.value, GroupType.PUBLIC_GUILD.value, user_id),
        ).fetchall()
    return _summaries(rows)


def _list_public(user_id: str) -> List[GroupSummary]:
    # Member lists of public groups are never sent; ``is_member`` is
    # enough for the client to render the join/leave button.
    with get_cursor() as cursor:
        rows = cursor.execute(
            f"{_SUMMARY_SELECT}, EXISTS (SELECT 1 FROM group_members m "
            "WHERE m.group_id = g.id AND m.user_id = ?) AS is_member "
            "FROM groups g WHERE g.privacy = ? AND g.type != ? ORDER BY member_count DESC, g.name",
            (user_id, Privacy.PUBLIC.value, GroupType.PARTY.value),
        ).fetchall()
    return _summaries(rows, with_membership=True)


def _list_tavern(user_id: str) -> List[GroupSummary]:
    with get_cursor() as cursor:
        rows = cursor.execute(
            f"{_SUMMARY_SELECT} FROM groups g WHERE g.id = ?",
            (settings.tavern_id,),
        ).fetchall()
    return _summaries(rows)


_LIST_FETCHERS: Dict[str, Callable[[str], List[GroupSummary]]] = {
    "party": _list_party,
    "guilds": _list_guilds,
    "public": _list_public,
    "tavern": _list_tavern,
}


async def _audit(user_id: str, action: str, group_id: str, details: Dict[str, Any]) -> None:
    """Record a membership change; failures are logged and ignored."""
    from .audit_service import AuditService

    try:
        await AuditService.log(
            user_id=user_id,
            action=action,
            object_type="group",
            object_id=group_id,
            details=details,
        )
    except GuildHallError as exc:
        logger.warning("Audit log for %s on group %s failed: %s", action, group_id, exc)


class GroupService:
    """Сервис для работы с группами: партии, гильдии и таверна."""

    @classmethod
    async def list_groups(cls, current_user: dict, types: Sequence[str] = LIST_CATEGORIES) -> Dict[str, List[GroupSummary]]:
        """Return the requested categories of groups visible to the user.

        Unknown category names are ignored and duplicates collapsed.  The
        category queries are independent, so they run concurrently and
        are joined before returning.  A category with no match maps to
        an empty list.
        """
        requested: List[str] = []
        for name in types:
            if name in _LIST_FETCHERS and name not in requested:
                requested.append(name)
        user_id = current_user["user_id"]
        results = await asyncio.gather(
            *(asyncio.to_thread(_LIST_FETCHERS[name], user_id) for name in requested)
        )
        return dict(zip(requested, results))

    @classmethod
    async def get_group(cls, group_id: str, current_user: dict) -> GroupRead:
        """Fetch one group, fully populated.

        ``group_id == "party"`` resolves to the caller's current party.
        Parties and private guilds are only visible to their members and
        invitees.
        """
        user_id = current_user["user_id"]
        with get_cursor() as cursor:
            if group_id == PARTY_ALIAS:
                party_id = store.find_party_id(cursor, user_id)
                if party_id is None:
                    raise NotFoundError("You are not in a party")
                group = store.require_group(cursor, party_id)
            else:
                group = store.require_group(cursor, group_id)
                store.require_access(cursor, group, user_id)
            return store.populate_group(cursor, group, user_id)

    @classmethod
    async def create_group(cls, data: GroupCreate, current_user: dict) -> GroupRead:
        """Found a party or a guild led by the caller.

        A guild costs ``settings.guild_creation_cost``: the amount is
        debited from the founder and seeds the guild's pool.  A party is
        free, but the caller must not already be in one.
        """
        with get_cursor() as cursor:
            user = store.require_user(cursor, current_user["user_id"])
            group = store.GroupRecord(
                id=str(uuid.uuid4()),
                name=data.name,
                type=data.type.value,
                privacy=data.privacy.value,
                description=data.description,
                leader=user.id,
                leader_message=data.leader_message,
                logo=data.logo,
                websites=list(data.websites),
            )
            if data.type == GroupType.PUBLIC_GUILD:
                group.privacy = Privacy.PUBLIC.value
            if group.is_guild:
                cost = settings.guild_creation_cost
                if user.balance < cost:
                    raise PaymentRequiredError("Not enough gems!")
                user.balance -= cost
                group.balance = cost
                store.save_user(cursor, user)
            else:
                if store.find_party_id(cursor, user.id):
                    raise BadRequestError("You are already in a party")
                group.privacy = Privacy.PRIVATE.value
            store.insert_group(cursor, group)
            cursor.execute(
                "INSERT INTO group_members (group_id, user_id) VALUES (?, ?)",
                (group.id, user.id),
            )
            result = store.populate_group(cursor, group, user.id)
        logger.info("User %s created %s %s", user.id, group.type, group.id)
        await _audit(user.id, "create", group.id, {"type": group.type, "name": group.name})
        return result

    @classmethod
    async def update_group(cls, group_id: str, data: GroupUpdate, current_user: dict) -> GroupRead:
        """Apply leader-only metadata changes and return the populated group."""
        user_id = current_user["user_id"]
        changes = data.model_dump(exclude_unset=True)
        with get_cursor() as cursor:
            group = store.require_group(cursor, group_id)
            if group.leader != user_id:
                raise NotAuthorizedError("Only the group leader can update the group!")
            if "leader" in changes:
                new_leader = changes["leader"]
                if not new_leader or not store.is_member(cursor, group.id, new_leader):
                    raise BadRequestError("The new leader must be a member of the group")
            for key, value in changes.items():
                if value is None and key in ("name", "leader"):
                    continue
                if key == "websites" and value is None:
                    value = []
                setattr(group, key, value)
            store.save_group(cursor, group)
            result = store.populate_group(cursor, group, user_id)
        logger.info("Group %s updated by %s: %s", group_id, user_id, sorted(changes))
        return result

    @classmethod
    async def join_group(cls, group_id: str, current_user: dict) -> GroupRead:
        """Add the caller to the group and consume any matching invitation."""
        with get_cursor() as cursor:
            user = store.require_user(cursor, current_user["user_id"])
            group = store.require_group(cursor, group_id)
            if group.is_party:
                current_party = store.find_party_id(cursor, user.id)
                if current_party and current_party != group.id:
                    raise BadRequestError("You are already in a party")
                pending = user.invitations.get("party")
                if pending and pending.get("id") == group.id:
                    user.invitations["party"] = None
                    store.save_user(cursor, user)
            elif group.is_guild:
                guild_invites = user.invitations.get("guilds") or []
                remaining = [inv for inv in guild_invites if inv.get("id") != group.id]
                if len(remaining) != len(guild_invites):
                    user.invitations["guilds"] = remaining
                    store.save_user(cursor, user)
            # The primary key makes a second join a no-op.
            cursor.execute(
                "INSERT OR IGNORE INTO group_members (group_id, user_id) VALUES (?, ?)",
                (group.id, user.id),
            )
            cursor.execute(
                "DELETE FROM group_invites WHERE group_id = ? AND user_id = ?",
                (group.id, user.id),
            )
            result = store.populate_group(cursor, group, user.id)
        logger.info("User %s joined group %s", user.id, group.id)
        return result

    @classmethod
    async def leave_group(cls, group_id: str, current_user: dict) -> LeaveResult:
        """Remove the caller from the group; a no-op for non-members."""
        user_id = current_user["user_id"]
        with get_cursor() as cursor:
            group = store.require_group(cursor, group_id)
            cursor.execute(
                "DELETE FROM group_members WHERE group_id = ? AND user_id = ?",
                (group.id, user_id),
            )
            removed = cursor.rowcount
        if removed:
            logger.info("User %s left group %s", user_id, group.id)
        return LeaveResult(id=group.id)

    @classmethod
    async def invite(cls, group_id: str, invitee_id: str, current_user: dict) -> GroupRead:
        """Invite a user to a guild or a party.

        Raises
        ------
        NotFoundError
            If the group or the invitee does not exist.
        NotAuthorizedError
            If the inviter may not see a party or private guild.
        BadRequestError
            Guild: the invitee is already a member or already invited.
            Party: the invitee already has a pending party invitation or
            is already in a party.  The tavern takes no invitations.
        """
        inviter_id = current_user["user_id"]
        with get_cursor() as cursor:
            group = store.require_group(cursor, group_id)
            store.require_access(cursor, group, inviter_id)
            invitee = store.require_user(cursor, invitee_id)
            invitation = {"id": group.id, "name": group.name}
            if group.is_guild:
                if store.is_member(cursor, group.id, invitee.id):
                    raise BadRequestError("User already in that group")
                guild_invites = invitee.invitations.setdefault("guilds", [])
                if any(inv.get("id") == group.id for inv in guild_invites):
                    raise BadRequestError("User already invited to that group")
                guild_invites.append(invitation)
            elif group.is_party:
                if invitee.invitations.get("party"):
                    raise BadRequestError("User already pending invitation.")
                if store.find_party_id(cursor, invitee.id):
                    raise BadRequestError("User already in a party.")
                invitee.invitations["party"] = invitation
            else:
                raise BadRequestError("This group does not take invitations")
            store.save_user(cursor, invitee)
            cursor.execute(
                "INSERT OR IGNORE INTO group_invites (group_id, user_id) VALUES (?, ?)",
                (group.id, invitee.id),
            )
            result = store.populate_group(cursor, group, inviter_id)
        logger.info("User %s invited %s to group %s", inviter_id, invitee.id, group.id)
        await _audit(inviter_id, "invite", group.id, {"invitee": invitee.id})
        return result

    @classmethod
    async def remove_member(cls, group_id: str, target_id: str, current_user: dict) -> None:
        """Remove a member or cancel a pending invitation (leader only)."""
        user_id = current_user["user_id"]
        with get_cursor() as cursor:
            group = store.require_group(cursor, group_id)
            if group.leader != user_id:
                raise NotAuthorizedError("Only group leader can remove a member!")
            if store.is_member(cursor, group.id, target_id):
                cursor.execute(
                    "DELETE FROM group_members WHERE group_id = ? AND user_id = ?",
                    (group.id, target_id),
                )
                action = "remove_member"
            elif store.is_invited(cursor, group.id, target_id):
                invitee = store.fetch_user(cursor, target_id)
                if invitee is not None:
                    if group.is_guild:
                        invitee.invitations["guilds"] = [
                            inv for inv in invitee.invitations.get("guilds") or [] if inv.get("id") != group.id
                        ]
                    else:
                        pending = invitee.invitations.get("party")
                        if pending and pending.get("id") == group.id:
                            invitee.invitations["party"] = None
                    store.save_user(cursor, invitee)
                cursor.execute(
                    "DELETE FROM group_invites WHERE group_id = ? AND user_id = ?",
                    (group.id, target_id),
                )
                action = "cancel_invite"
            else:
                raise BadRequestError("User not found among group's members!")
        logger.info("Leader %s removed %s from group %s (%s)", user_id, target_id, group.id, action)
        await _audit(user_id, action, group.id, {"target": target_id})
