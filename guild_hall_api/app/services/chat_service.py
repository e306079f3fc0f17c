"""
Service layer for group chat.

Messages are stored newest-first per group and the history is capped
at ``settings.chat_history_limit`` entries; posting a message drops
the oldest ones beyond the cap in the same transaction.

Posting to one's own party also moves the poster's
``party.lastMessageSeen`` pointer.  That write is a separate,
best-effort step: it runs after the chat transaction has committed and
a failure is only logged.
"""

import json
import logging
import time
import uuid

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import GuildHallError, NotAuthorizedError, NotFoundError
from ..schemas.chat import ChatMessageCreate
from ..schemas.group import GroupRead
from . import store


logger = logging.getLogger(__name__)


class ChatService:
    """Service for posting and deleting group chat messages."""

    @classmethod
    async def post_message(cls, group_id: str, data: ChatMessageCreate, current_user: dict) -> GroupRead:
        """Post a message and return the populated group."""
        with get_cursor() as cursor:
            user = store.require_user(cursor, current_user["user_id"])
            group = store.require_group(cursor, group_id)
            store.require_access(cursor, group, user.id)
            message_id = str(uuid.uuid4())
            npc = user.backer.get("npc") if user.backer else None
            cursor.execute(
                "INSERT INTO chat_messages (id, group_id, author_id, author_name, contributor, npc, text, timestamp) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    message_id,
                    group.id,
                    user.id,
                    user.name,
                    json.dumps(user.contributor) if user.contributor else None,
                    npc,
                    data.message,
                    int(time.time() * 1000),
                ),
            )
            cursor.execute(
                "DELETE FROM chat_messages WHERE group_id = ? AND seq NOT IN ("
                "SELECT seq FROM chat_messages WHERE group_id = ? ORDER BY seq DESC LIMIT ?)",
                (group.id, group.id, settings.chat_history_limit),
            )
            result = store.populate_group(cursor, group, user.id)
        logger.debug("User %s posted message %s to group %s", user.id, message_id, group.id)
        if group.is_party:
            cls.mark_seen(user.id, message_id)
        return result

    @classmethod
    def mark_seen(cls, user_id: str, message_id: str) -> None:
        """Move the user's party ``lastMessageSeen`` pointer.

        Not part of the posting contract: errors are logged and the
        chat response is returned regardless.
        """
        try:
            with get_cursor() as cursor:
                user = store.fetch_user(cursor, user_id)
                if user is None:
                    return
                user.party["lastMessageSeen"] = message_id
                store.save_user(cursor, user)
        except GuildHallError as exc:
            logger.warning("Could not update lastMessageSeen for user %s: %s", user_id, exc)

    @classmethod
    async def delete_message(cls, group_id: str, message_id: str, current_user: dict) -> None:
        """Удалить сообщение из чата группы.

        Удалить сообщение может только его автор или администратор
        (``contributor.admin``).  Если сообщение не найдено, возбуждается
        ``NotFoundError``.
        """
        with get_cursor() as cursor:
            user = store.require_user(cursor, current_user["user_id"])
            group = store.require_group(cursor, group_id)
            row = cursor.execute(
                "SELECT author_id FROM chat_messages WHERE id = ? AND group_id = ?",
                (message_id, group.id),
            ).fetchone()
            if not row:
                raise NotFoundError("Message not found!")
            if row["author_id"] != user.id and not user.is_admin:
                raise NotAuthorizedError("Not authorized to delete this message!")
            cursor.execute("DELETE FROM chat_messages WHERE id = ?", (message_id,))
        logger.info("User %s deleted chat message %s in group %s", user.id, message_id, group.id)
