"""
Record helpers shared by the services.

Users and groups are separate aggregates related only by id.  This
module maps database rows to ``UserRecord``/``GroupRecord`` objects,
writes them back, and performs the explicit "population" step that
turns a group plus its membership rows into a ``GroupRead`` DTO.

All helpers take an open cursor so a service can run several of them
inside one transaction (see ``core.db.get_cursor``).
"""

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.errors import NotAuthorizedError, NotFoundError
from ..schemas.chat import ChatMessageRead
from ..schemas.group import GUILD_TYPES, GroupRead, GroupType, Privacy
from ..schemas.user import MemberRead


def loads_json(value: Optional[str], default: Any) -> Any:
    if not value:
        return default
    return json.loads(value)


def dumps_json(value: Any) -> Optional[str]:
    return json.dumps(value) if value is not None else None


@dataclass
class UserRecord:
    id: str
    email: str
    name: str
    balance: float = 0.0
    password: Optional[str] = None
    invitations: Dict[str, Any] = field(default_factory=lambda: {"party": None, "guilds": []})
    party: Dict[str, Any] = field(default_factory=dict)
    contributor: Optional[Dict[str, Any]] = None
    backer: Optional[Dict[str, Any]] = None
    flags: Dict[str, Any] = field(default_factory=dict)
    purchased: Dict[str, Any] = field(default_factory=dict)
    items: Dict[str, Any] = field(default_factory=dict)
    auth_blocked: bool = False

    @property
    def is_admin(self) -> bool:
        return bool(self.contributor and self.contributor.get("admin"))

    @property
    def contributor_level(self) -> int:
        level = self.contributor.get("level") if self.contributor else None
        if isinstance(level, bool) or not isinstance(level, int):
            return 0
        return level


@dataclass
class GroupRecord:
    id: str
    name: str
    type: str
    privacy: str = "private"
    description: Optional[str] = None
    leader: Optional[str] = None
    leader_message: Optional[str] = None
    logo: Optional[str] = None
    websites: List[str] = field(default_factory=list)
    balance: float = 0.0

    @property
    def is_party(self) -> bool:
        return self.type == GroupType.PARTY.value

    @property
    def is_guild(self) -> bool:
        return self.type in GUILD_TYPES


def user_from_row(row: sqlite3.Row) -> UserRecord:
    invitations = loads_json(row["invitations"], {})
    invitations.setdefault("party", None)
    invitations.setdefault("guilds", [])
    return UserRecord(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        balance=row["balance"],
        password=row["password"],
        invitations=invitations,
        party=loads_json(row["party"], {}),
        contributor=loads_json(row["contributor"], None),
        backer=loads_json(row["backer"], None),
        flags=loads_json(row["flags"], {}),
        purchased=loads_json(row["purchased"], {}),
        items=loads_json(row["items"], {}),
        auth_blocked=bool(row["auth_blocked"]),
    )


def group_from_row(row: sqlite3.Row) -> GroupRecord:
    return GroupRecord(
        id=row["id"],
        name=row["name"],
        type=row["type"],
        privacy=row["privacy"],
        description=row["description"],
        leader=row["leader"],
        leader_message=row["leader_message"],
        logo=row["logo"],
        websites=loads_json(row["websites"], []),
        balance=row["balance"],
    )


def fetch_user(cursor: sqlite3.Cursor, user_id: Optional[str]) -> Optional[UserRecord]:
    if not user_id:
        return None
    row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return user_from_row(row) if row else None


def require_user(cursor: sqlite3.Cursor, user_id: Optional[str]) -> UserRecord:
    user = fetch_user(cursor, user_id)
    if user is None:
        raise NotFoundError(f'User with id "{user_id}" not found')
    return user


def insert_user(cursor: sqlite3.Cursor, user: UserRecord) -> None:
    cursor.execute(
        "INSERT INTO users (id, email, password, name, balance, invitations, party, contributor, "
        "backer, flags, purchased, items, auth_blocked) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            user.id,
            user.email,
            user.password,
            user.name,
            user.balance,
            json.dumps(user.invitations),
            json.dumps(user.party),
            dumps_json(user.contributor),
            dumps_json(user.backer),
            json.dumps(user.flags),
            json.dumps(user.purchased),
            json.dumps(user.items),
            1 if user.auth_blocked else 0,
        ),
    )


def save_user(cursor: sqlite3.Cursor, user: UserRecord) -> None:
    """Write every mutable field of ``user`` back to its row."""
    cursor.execute(
        "UPDATE users SET name = ?, balance = ?, invitations = ?, party = ?, contributor = ?, "
        "backer = ?, flags = ?, purchased = ?, items = ?, auth_blocked = ?, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (
            user.name,
            user.balance,
            json.dumps(user.invitations),
            json.dumps(user.party),
            dumps_json(user.contributor),
            dumps_json(user.backer),
            json.dumps(user.flags),
            json.dumps(user.purchased),
            json.dumps(user.items),
            1 if user.auth_blocked else 0,
            user.id,
        ),
    )


def fetch_group(cursor: sqlite3.Cursor, group_id: str) -> Optional[GroupRecord]:
    row = cursor.execute("SELECT * FROM groups WHERE id = ?", (group_id,)).fetchone()
    return group_from_row(row) if row else None


def require_group(cursor: sqlite3.Cursor, group_id: str) -> GroupRecord:
    group = fetch_group(cursor, group_id)
    if group is None:
        raise NotFoundError(f'Group with id "{group_id}" not found')
    return group


def insert_group(cursor: sqlite3.Cursor, group: GroupRecord) -> None:
    cursor.execute(
        "INSERT INTO groups (id, name, description, type, privacy, leader, leader_message, logo, "
        "websites, balance) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            group.id,
            group.name,
            group.description,
            group.type,
            group.privacy,
            group.leader,
            group.leader_message,
            group.logo,
            json.dumps(group.websites),
            group.balance,
        ),
    )


def save_group(cursor: sqlite3.Cursor, group: GroupRecord) -> None:
    cursor.execute(
        "UPDATE groups SET name = ?, description = ?, privacy = ?, leader = ?, leader_message = ?, "
        "logo = ?, websites = ?, balance = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (
            group.name,
            group.description,
            group.privacy,
            group.leader,
            group.leader_message,
            group.logo,
            json.dumps(group.websites),
            group.balance,
            group.id,
        ),
    )


def is_member(cursor: sqlite3.Cursor, group_id: str, user_id: str) -> bool:
    row = cursor.execute(
        "SELECT 1 FROM group_members WHERE group_id = ? AND user_id = ?",
        (group_id, user_id),
    ).fetchone()
    return row is not None


def is_invited(cursor: sqlite3.Cursor, group_id: str, user_id: str) -> bool:
    row = cursor.execute(
        "SELECT 1 FROM group_invites WHERE group_id = ? AND user_id = ?",
        (group_id, user_id),
    ).fetchone()
    return row is not None


def require_access(cursor: sqlite3.Cursor, group: GroupRecord, user_id: str) -> None:
    """Reject callers who may not see ``group``.

    Parties and private guilds are only open to their members and
    invitees; public guilds and the tavern are open to everyone.
    """
    restricted = group.is_party or (group.is_guild and group.privacy == Privacy.PRIVATE.value)
    if restricted and not (is_member(cursor, group.id, user_id) or is_invited(cursor, group.id, user_id)):
        raise NotAuthorizedError("You don't have access to this group")


def find_party_id(cursor: sqlite3.Cursor, user_id: str) -> Optional[str]:
    """Return the id of the party ``user_id`` belongs to, if any."""
    row = cursor.execute(
        "SELECT g.id FROM groups g JOIN group_members m ON m.group_id = g.id "
        "WHERE g.type = ? AND m.user_id = ?",
        (GroupType.PARTY.value, user_id),
    ).fetchone()
    return row["id"] if row else None


def count_members(cursor: sqlite3.Cursor, group_id: str) -> int:
    row = cursor.execute(
        "SELECT COUNT(*) AS count FROM group_members WHERE group_id = ?", (group_id,)
    ).fetchone()
    return row["count"]


def member_projection(user: UserRecord, detailed: bool = False) -> MemberRead:
    """Project a user for embedding in a group response.

    ``detailed`` selects the party projection (contributor, backer and
    equipped items); otherwise only the id and profile name are kept.
    """
    if not detailed:
        return MemberRead(id=user.id, name=user.name)
    return MemberRead(
        id=user.id,
        name=user.name,
        contributor=user.contributor,
        backer=user.backer,
        items=user.items,
    )


def _joined_users(cursor: sqlite3.Cursor, table: str, group_id: str) -> List[UserRecord]:
    rows = cursor.execute(
        f"SELECT u.* FROM {table} j JOIN users u ON u.id = j.user_id "
        "WHERE j.group_id = ? ORDER BY j.rowid",
        (group_id,),
    ).fetchall()
    return [user_from_row(row) for row in rows]


def chat_history(cursor: sqlite3.Cursor, group_id: str) -> List[ChatMessageRead]:
    """Return the retained chat of a group, newest first."""
    rows = cursor.execute(
        "SELECT id, author_id, author_name, contributor, npc, text, timestamp FROM chat_messages "
        "WHERE group_id = ? ORDER BY seq DESC LIMIT ?",
        (group_id, settings.chat_history_limit),
    ).fetchall()
    return [
        ChatMessageRead(
            id=row["id"],
            author_id=row["author_id"],
            author_name=row["author_name"],
            contributor=loads_json(row["contributor"], None),
            npc=row["npc"],
            text=row["text"],
            timestamp=row["timestamp"],
        )
        for row in rows
    ]


def exclude_self(group: GroupRead, viewer_id: str) -> GroupRead:
    """Drop the viewer from the member list of their own party."""
    if group.type != GroupType.PARTY:
        return group
    group.members = [m for m in group.members if m.id != viewer_id]
    return group


def populate_group(cursor: sqlite3.Cursor, group: GroupRecord, viewer_id: str) -> GroupRead:
    """Assemble the full response shape of ``group`` for ``viewer_id``.

    Members and invitees are joined in from the users table; parties
    get the detailed projection and the viewer removed from the member
    list.
    """
    detailed = group.is_party
    members = _joined_users(cursor, "group_members", group.id)
    invites = _joined_users(cursor, "group_invites", group.id)
    populated = GroupRead(
        id=group.id,
        name=group.name,
        description=group.description,
        type=group.type,
        privacy=group.privacy,
        leader=group.leader,
        leader_message=group.leader_message,
        logo=group.logo,
        websites=group.websites,
        balance=group.balance,
        member_count=len(members),
        members=[member_projection(u, detailed) for u in members],
        invites=[member_projection(u, detailed) for u in invites],
        chat=chat_history(cursor, group.id),
    )
    return exclude_self(populated, viewer_id)
