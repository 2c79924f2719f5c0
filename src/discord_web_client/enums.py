"""
Enumeration types for the Discord web client.

These enums provide type-safe constants for channel kinds, session states,
log levels and error codes throughout the client.
"""

from enum import Enum


class ChannelKind(Enum):
    """Channel kinds the client models. Every other API type is dropped."""

    TEXT = "text"
    VOICE = "voice"


class SessionStatus(Enum):
    """
    Authentication state of the current session.

    A rejected credential has no state of its own: it is UNAUTHENTICATED
    with a ``reason`` on SessionState.
    """

    UNAUTHENTICATED = "unauthenticated"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ApiErrorCode(Enum):
    """Error codes carried by DiscordClientError.code."""

    MISSING_CREDENTIAL = "missing_credential"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
