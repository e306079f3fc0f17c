"""
Error hierarchy for the Guild Hall API.

Services raise these exceptions instead of ``HTTPException`` so the
same rules can be exercised without a request.  Each error carries a
``kind`` (the taxonomy name returned to clients) and the HTTP status
used by the global handler registered in ``api.error_handlers``.
Domain errors are raised before anything is written, so the enclosing
store transaction is rolled back untouched.
"""

from typing import Dict, Optional


class GuildHallError(Exception):
    """Base exception for all API errors."""

    kind = "InternalError"
    http_status = 500

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        http_status: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.headers = headers
        if kind is not None:
            self.kind = kind
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the structured error payload sent to clients."""
        return {"error": {"kind": self.kind, "message": self.message}}


class NotFoundError(GuildHallError):
    """Referenced user, group or chat message does not exist."""

    kind = "NotFound"
    http_status = 404


class NotAuthorizedError(GuildHallError):
    """Privilege or ownership check failed."""

    kind = "NotAuthorized"
    http_status = 401


class PaymentRequiredError(GuildHallError):
    """Caller cannot afford the operation.

    Reported with 401 like the other refusals so existing clients keep
    treating it as a permission problem.
    """

    kind = "PaymentRequired"
    http_status = 401


class BadRequestError(GuildHallError):
    """Malformed input or a request that breaks a membership rule."""

    kind = "BadRequest"
    http_status = 400


class InternalStoreError(GuildHallError):
    """The data store failed; never retried."""

    kind = "InternalStoreError"
    http_status = 500
