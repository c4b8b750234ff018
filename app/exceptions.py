# =============================================================================
# app/exceptions.py - Client Exception Types
# =============================================================================
# Every failure the client core can surface is one of these types.
# Following the principle: "Errors should tell HOW to fix, not just WHAT failed."
#
# - TransportError: the backend could not be reached at all
# - ApiError: the backend answered with a non-2xx status
# - NormalizationError: a 2xx body matched none of the accepted shapes
# - TokenStoreError: the access token could not be persisted or read
# =============================================================================

from enum import Enum
from typing import Any

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class NexoError(Exception):
    """
    Base exception for the NEXO client.

    All custom exceptions inherit from this class.
    Provides structured error data with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "NEXO_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.details = details or {}

    @property
    def user_message(self) -> str:
        """Text suitable for an error banner."""
        return self.message or GENERIC_ERROR_MESSAGE

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a plain dict (for logs and snapshots)."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Network Exceptions
# =============================================================================

class TransportError(NexoError):
    """Raised when no HTTP response was received (DNS, refused, timeout)."""

    def __init__(self, url: str, error: str):
        super().__init__(
            message="Unable to reach the server. Check your connection and try again.",
            code="TRANSPORT_ERROR",
            suggestion="Verify NEXO_API_BASE_URL and network connectivity",
            details={"url": url, "error": error}
        )


class ApiError(NexoError):
    """
    Raised when the backend answers with a status outside 200-299.

    The backend emits a NestJS-style envelope:
        {"statusCode": 400, "message": "..." | ["...", "..."], "error": "Bad Request"}

    Only the first message is shown to the user.
    """

    def __init__(
        self,
        status_code: int | None,
        messages: list[str] | str | None = None,
        error_type: str | None = None,
    ):
        if isinstance(messages, str):
            messages = [messages]
        self.status_code = status_code
        self.messages = list(messages or [])
        self.error_type = error_type
        super().__init__(
            message=self.messages[0] if self.messages else GENERIC_ERROR_MESSAGE,
            code="API_ERROR",
            details={
                "status_code": status_code,
                "messages": self.messages,
                "error": error_type,
            }
        )

    @classmethod
    def for_status(cls, status_code: int) -> "ApiError":
        """Fallback error used when the error body doesn't parse."""
        return cls(status_code, f"Request failed ({status_code}).")

    @classmethod
    def not_authenticated(cls) -> "ApiError":
        return cls(401, "Not authenticated. Please log in.")


# =============================================================================
# Decoding Exceptions
# =============================================================================

class NormalizationErrorKind(str, Enum):
    """Why a 2xx body could not be turned into a canonical model."""
    MISSING_REQUIRED_FIELD = "missing_required_field"
    UNRECOGNIZED_SHAPE = "unrecognized_shape"


class NormalizationError(NexoError):
    """Raised when a 2xx response body matches no accepted shape."""

    def __init__(
        self,
        kind: NormalizationErrorKind,
        response_kind: str,
        field: str | None = None,
    ):
        self.kind = kind
        self.response_kind = response_kind
        self.field = field

        if kind is NormalizationErrorKind.MISSING_REQUIRED_FIELD:
            detail = f"{response_kind}: required field '{field}' is missing"
        else:
            detail = f"{response_kind}: unexpected response format"

        super().__init__(
            message="Unexpected response format. Please update the app.",
            code=kind.value.upper(),
            suggestion="The backend response shape changed; check the normalizer strategies",
            details={"response_kind": response_kind, "field": field, "detail": detail}
        )

    @classmethod
    def missing(cls, response_kind: str, field: str) -> "NormalizationError":
        return cls(NormalizationErrorKind.MISSING_REQUIRED_FIELD, response_kind, field)

    @classmethod
    def unrecognized(cls, response_kind: str) -> "NormalizationError":
        return cls(NormalizationErrorKind.UNRECOGNIZED_SHAPE, response_kind)


# =============================================================================
# Persistence Exceptions
# =============================================================================

class TokenStoreError(NexoError):
    """Raised when the token store cannot save, load or remove the token."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message="Could not access saved credentials.",
            code="TOKEN_STORE_ERROR",
            suggestion="Check permissions on the token store location",
            details={"operation": operation, "error": error}
        )


# =============================================================================
# Helpers
# =============================================================================

def user_message_for(exc: BaseException) -> str:
    """
    Map any exception to the text shown in the error banner.

    NexoError subclasses carry their own user message; anything else
    falls back to its string form, or the generic message when empty.
    """
    if isinstance(exc, NexoError):
        return exc.user_message
    return str(exc) or GENERIC_ERROR_MESSAGE
