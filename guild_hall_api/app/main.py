"""
Main entrypoint for the Guild Hall API.

This module assembles the FastAPI application, sets up logging, error
handlers and includes versioned routers.  The ``create_app`` function
builds and configures the app, which is then instantiated at module
import time as ``app``, so it can be served directly::

    uvicorn guild_hall_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.error_handlers import register_error_handlers
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Apply migrations at startup.  This creates the database file if it
    # does not exist and seeds the tavern.
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first, so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()
