"""
Logging setup for the Guild Hall API.

Only the ``guild_hall_api`` logger hierarchy is configured; uvicorn and
other libraries keep their own handlers.  Every module logs through
``logging.getLogger(__name__)`` and so inherits these handlers.
"""

import logging
from pathlib import Path
from typing import Optional

APP_LOGGER = "guild_hall_api"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the app logger.

    Handlers are added on the first call only; later calls just update
    the level, so ``create_app`` may run more than once.
    """
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    # Records stop here; the root logger may belong to the host process.
    logger.propagate = False
    return logger
