"""
Exception classes for the Discord web client.

All exceptions inherit from DiscordClientError and carry a code, a
message and optional details. The five network-mapped errors share the
ApiError base so callers can catch "anything the API said no to" at once.
"""

from typing import Optional

from .enums import ApiErrorCode


class DiscordClientError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class MissingCredentialError(DiscordClientError):
    """Raised when an operation needs a credential and none is stored."""

    def __init__(self, message: str = "No credential available", details: Optional[dict] = None) -> None:
        super().__init__(ApiErrorCode.MISSING_CREDENTIAL.value, message, details)


class InvalidInputError(DiscordClientError):
    """Raised for blank identifiers, blank content or a malformed selection."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ApiErrorCode.INVALID_INPUT.value, message, details)


class PersistenceError(DiscordClientError):
    """Raised when the credential slot cannot be read or written."""

    pass


class ApiError(DiscordClientError):
    """Base for every failure reported by, or on the way to, the external API."""

    def __init__(
        self,
        code: str,
        message: str,
        http_status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.http_status_code = http_status_code
        super().__init__(code, message, details)


class UnauthorizedError(ApiError):
    """Raised when the API rejects the credential (HTTP 401/403)."""

    def __init__(self, message: str, http_status_code: int = 401, details: Optional[dict] = None) -> None:
        super().__init__(ApiErrorCode.UNAUTHORIZED.value, message, http_status_code, details)


class NotFoundError(ApiError):
    """Raised on HTTP 404."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ApiErrorCode.NOT_FOUND.value, message, 404, details)


class RateLimitedError(ApiError):
    """Raised on HTTP 429. ``retry_after`` is in seconds when the API supplied it."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(ApiErrorCode.RATE_LIMITED.value, message, 429, details)


class ServerError(ApiError):
    """Raised on 5xx, unexpected status codes and unparseable bodies."""

    def __init__(
        self,
        message: str,
        http_status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(ApiErrorCode.SERVER_ERROR.value, message, http_status_code, details)


class NetworkError(ApiError):
    """Raised on transport-level failures, timeouts included."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ApiErrorCode.NETWORK_ERROR.value, message, None, details)
