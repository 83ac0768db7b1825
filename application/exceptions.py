"""Domain errors surfaced to API callers.

Each error carries a stable ``code`` the UI switches on and the HTTP status
the API layer answers with. ``to_payload`` builds the JSON body.
"""

from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from application.models import QuotaStatus


class ErrorCode(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_GENERATION_FAILED = "UPSTREAM_GENERATION_FAILED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class IdeaApiError(Exception):
    """Base class for errors with a public error code."""

    code: ErrorCode = ErrorCode.STORE_UNAVAILABLE
    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code.value}


class AuthRequiredError(IdeaApiError):
    code = ErrorCode.AUTH_REQUIRED
    status_code = 401
    default_message = "Authentication required"


class AuthInvalidError(IdeaApiError):
    code = ErrorCode.AUTH_INVALID
    status_code = 401
    default_message = "Invalid or expired session"


class RateLimitedError(IdeaApiError):
    """Quota exhausted. Carries the quota so callers can render a countdown."""

    code = ErrorCode.RATE_LIMITED
    status_code = 429
    default_message = "Rate limit exceeded"

    def __init__(self, quota: "QuotaStatus", message: Optional[str] = None) -> None:
        super().__init__(
            message
            or f"Rate limit exceeded. You can use this {quota.limit} times per day."
        )
        self.quota = quota

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["remaining"] = 0
        payload["limit"] = self.quota.limit
        payload["resetAt"] = (
            self.quota.reset_at.isoformat() if self.quota.reset_at else None
        )
        return payload


class GenerationError(IdeaApiError):
    """The generative text backend failed or returned unusable output."""

    code = ErrorCode.UPSTREAM_GENERATION_FAILED
    status_code = 502
    default_message = "AI service error. Please try again."


class StoreUnavailableError(IdeaApiError):
    code = ErrorCode.STORE_UNAVAILABLE
    status_code = 503
    default_message = "Database not available"
