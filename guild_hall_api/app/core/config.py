"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment you should override these via environment
variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Guild Hall API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path or connection string for the SQLite database.  If a relative
    # path is provided, it will be resolved relative to the project root
    # by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "guild_hall.db")

    # Identifier of the single global public group.  The tavern row is
    # seeded by ``init_db`` under this id.
    tavern_id: str = os.getenv("TAVERN_ID", "habitrpg")

    # Number of chat messages retained per group; older messages are
    # dropped when a new one is posted.
    chat_history_limit: int = int(os.getenv("CHAT_HISTORY_LIMIT", "200"))

    patrons_per_page: int = int(os.getenv("PATRONS_PER_PAGE", "50"))

    # Balance debited from the creator (and seeded into the guild pool)
    # when a guild is founded.  Parties are free.
    guild_creation_cost: float = float(os.getenv("GUILD_CREATION_COST", "1"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
