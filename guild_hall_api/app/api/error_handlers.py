"""
Global exception handlers.

``GuildHallError`` subclasses are rendered as
``{"error": {"kind": ..., "message": ...}}`` with their own status,
request validation failures become 400 ``BadRequest`` with per-field
details, and anything else is a 500 that never leaks internals.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import GuildHallError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(GuildHallError)
    async def guild_hall_error_handler(request: Request, exc: GuildHallError):
        if exc.http_status >= 500:
            logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message)
        else:
            logger.warning("%s on %s: %s", exc.kind, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "kind": "BadRequest",
                    "message": "Invalid request data",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in err["loc"]),
                            "message": err["msg"],
                        }
                        for err in exc.errors()
                    ],
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"kind": "InternalError", "message": "An unexpected error occurred"}},
        )
