"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a transactional cursor (``get_cursor``) and
applying migrations on application start (``init_db``).

Users are stored as one row each; nested user documents (invitations,
contributor and backer records, items, flags) live in JSON text
columns.  Group membership and pending invites are join tables whose
primary keys make them sets, so removing a member is a single atomic
``DELETE``.  Chat messages are kept in their own table ordered by an
insertion sequence.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings
from .errors import InternalStoreError


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # guild_hall_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name and
    has foreign key enforcement switched on.
    """
    try:
        conn = sqlite3.connect(get_database_path())
    except sqlite3.Error as exc:
        raise InternalStoreError(f"Could not open database: {exc}") from exc
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside one transaction.

    Commits when the block finishes, rolls back when it raises and
    always closes the connection.  ``sqlite3`` errors are re-raised as
    ``InternalStoreError``; domain errors propagate unchanged.
    """
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise InternalStoreError(f"Database operation failed: {exc}") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations in order.
    Finally makes sure the tavern group exists.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: users, groups and membership sets
        (
            1,
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                password TEXT,
                name TEXT NOT NULL,
                balance REAL NOT NULL DEFAULT 0,
                invitations TEXT NOT NULL DEFAULT '{"party": null, "guilds": []}',
                party TEXT NOT NULL DEFAULT '{}',
                contributor TEXT,
                backer TEXT,
                flags TEXT NOT NULL DEFAULT '{}',
                purchased TEXT NOT NULL DEFAULT '{}',
                items TEXT NOT NULL DEFAULT '{}',
                auth_blocked INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS groups (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                type TEXT NOT NULL,
                privacy TEXT NOT NULL DEFAULT 'private',
                leader TEXT,
                leader_message TEXT,
                logo TEXT,
                websites TEXT NOT NULL DEFAULT '[]',
                balance REAL NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS group_members (
                group_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                joined_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (group_id, user_id),
                FOREIGN KEY(group_id) REFERENCES groups(id),
                FOREIGN KEY(user_id) REFERENCES users(id)
            );

            CREATE TABLE IF NOT EXISTS group_invites (
                group_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (group_id, user_id),
                FOREIGN KEY(group_id) REFERENCES groups(id),
                FOREIGN KEY(user_id) REFERENCES users(id)
            );

            CREATE INDEX IF NOT EXISTS idx_group_members_user_id ON group_members(user_id);
            CREATE INDEX IF NOT EXISTS idx_group_invites_user_id ON group_invites(user_id);
            """,
        ),
        # Migration 2: chat history
        (
            2,
            """
            -- ``seq`` gives a strict posting order even when two messages
            -- share a millisecond timestamp.
            CREATE TABLE IF NOT EXISTS chat_messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                group_id TEXT NOT NULL,
                author_id TEXT NOT NULL,
                author_name TEXT,
                contributor TEXT,
                npc TEXT,
                text TEXT NOT NULL,
                timestamp INTEGER NOT NULL,
                FOREIGN KEY(group_id) REFERENCES groups(id)
            );

            CREATE INDEX IF NOT EXISTS idx_chat_messages_group_id ON chat_messages(group_id, seq);
            """,
        ),
        # Migration 3: audit trail
        (
            3,
            """
            CREATE TABLE IF NOT EXISTS audit_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                action TEXT NOT NULL,
                object_type TEXT,
                object_id TEXT,
                timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                details TEXT
            );
            """,
        ),
    ]

    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

        # The tavern is the one public group every user can read.
        cursor.execute(
            "INSERT OR IGNORE INTO groups (id, name, description, type, privacy) "
            "VALUES (?, 'Tavern', 'The global public chat', 'tavern', 'public')",
            (settings.tavern_id,),
        )
