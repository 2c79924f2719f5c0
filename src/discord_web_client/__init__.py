"""
Discord Web Client - token-authenticated Discord browsing and posting core.

This package provides the session and data-loading layer of a Discord client:
credential storage, a typed REST gateway with a normalized error taxonomy,
session validation, guild/channel/message selection with stale-response
discarding, and message composition.
"""

__version__ = "0.1.0"
__author__ = "Discord Web Client Team"

from discord_web_client.exceptions import (
    DiscordClientError,
    MissingCredentialError,
    InvalidInputError,
    PersistenceError,
    ApiError,
    UnauthorizedError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    NetworkError,
)
from discord_web_client.enums import (
    ApiErrorCode,
    ChannelKind,
    LogLevel,
    SessionStatus,
)
from discord_web_client.config import (
    ApiConfig,
    StorageConfig,
    LoggingConfig,
    ClientConfig,
    load_config_from_env,
)
from discord_web_client.models import (
    User,
    Guild,
    Channel,
    Message,
    VoiceRegion,
    Selection,
    SessionState,
    TransientError,
    ErrorBanner,
    classify_channels,
)
from discord_web_client.audit_logger import (
    AuditLogger,
    LogEntry,
)
from discord_web_client.credential_store import (
    CredentialStore,
    KeyValueStorage,
    InMemoryStorage,
    JsonFileStorage,
)
from discord_web_client.api_gateway import (
    DiscordAPIGateway,
    StoredCredentialGateway,
)
from discord_web_client.session import (
    SessionBootstrapper,
)
from discord_web_client.orchestrator import (
    SelectionOrchestrator,
)
from discord_web_client.composer import (
    MessageComposer,
)
from discord_web_client.client import (
    ChatClient,
)
from discord_web_client.i18n import (
    get_message,
    describe_error,
    login_error_message,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)

__all__ = [
    # Exceptions
    "DiscordClientError",
    "MissingCredentialError",
    "InvalidInputError",
    "PersistenceError",
    "ApiError",
    "UnauthorizedError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "NetworkError",
    # Enums
    "ApiErrorCode",
    "ChannelKind",
    "LogLevel",
    "SessionStatus",
    # Configuration
    "ApiConfig",
    "StorageConfig",
    "LoggingConfig",
    "ClientConfig",
    "load_config_from_env",
    # Models
    "User",
    "Guild",
    "Channel",
    "Message",
    "VoiceRegion",
    "Selection",
    "SessionState",
    "TransientError",
    "ErrorBanner",
    "classify_channels",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Credential Store
    "CredentialStore",
    "KeyValueStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    # API Gateway
    "DiscordAPIGateway",
    "StoredCredentialGateway",
    # Session
    "SessionBootstrapper",
    # Orchestrator
    "SelectionOrchestrator",
    # Composer
    "MessageComposer",
    # Client
    "ChatClient",
    # I18n
    "get_message",
    "describe_error",
    "login_error_message",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
]
