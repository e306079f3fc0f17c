"""
Business logic for users.

Registration, password login, the caller's own profile and the public
member card shown when clicking on a party or guild member.  New
users start with an empty balance and no pending invitations.
"""

import logging
import sqlite3
import uuid
from typing import Optional

from ..core.db import get_cursor
from ..core.errors import BadRequestError, NotAuthorizedError
from ..core.security import create_access_token, hash_password, verify_password
from ..schemas.user import Invitations, MemberRead, Token, UserCreate, UserLogin, UserRead
from . import store


logger = logging.getLogger(__name__)


def _to_read(user: store.UserRecord) -> UserRead:
    return UserRead(
        id=user.id,
        email=user.email,
        name=user.name,
        balance=user.balance,
        invitations=Invitations(**user.invitations),
        contributor=user.contributor,
        backer=user.backer,
        last_message_seen=user.party.get("lastMessageSeen"),
    )


class UserService:
    """Сервис для работы с пользователями."""

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Register a new user.

        Raises ``BadRequestError`` when the e‑mail is already taken.
        """
        email = data.email.strip().lower()
        user = store.UserRecord(
            id=str(uuid.uuid4()),
            email=email,
            name=data.name,
            password=hash_password(data.password),
        )
        with get_cursor() as cursor:
            if cursor.execute("SELECT 1 FROM users WHERE email = ?", (email,)).fetchone():
                raise BadRequestError(f"E-mail {email} is already registered")
            try:
                store.insert_user(cursor, user)
            except sqlite3.IntegrityError as exc:
                raise BadRequestError(f"E-mail {email} is already registered") from exc
        logger.info("Registered user %s", user.id)
        return _to_read(user)

    @classmethod
    async def authenticate(cls, data: UserLogin) -> Optional[store.UserRecord]:
        """Return the user matching the credentials, or ``None``."""
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT * FROM users WHERE email = ?", (data.email.strip().lower(),)
            ).fetchone()
        if not row:
            return None
        user = store.user_from_row(row)
        if not verify_password(data.password, user.password):
            return None
        return user

    @classmethod
    async def login(cls, data: UserLogin) -> Token:
        user = await cls.authenticate(data)
        if user is None:
            raise NotAuthorizedError("Invalid credentials")
        if user.auth_blocked:
            raise NotAuthorizedError("User account blocked")
        return Token(access_token=create_access_token({"sub": user.id}))

    @classmethod
    async def get_me(cls, current_user: dict) -> UserRead:
        with get_cursor() as cursor:
            user = store.require_user(cursor, current_user["user_id"])
        return _to_read(user)

    @classmethod
    async def get_member(cls, user_id: str) -> MemberRead:
        """Public member card of any user."""
        with get_cursor() as cursor:
            user = store.require_user(cursor, user_id)
        return store.member_projection(user, detailed=True)
