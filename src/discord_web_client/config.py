"""
Configuration dataclasses for the Discord web client.

This module defines the configuration structures used throughout the client:
API endpoint settings, credential storage, logging, and the combined client
configuration. ``load_config_from_env`` builds a ClientConfig from the
process environment, reading a ``.env`` file first when one exists.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_API_URL = "https://discord.com/api/v10"
DEFAULT_CDN_URL = "https://cdn.discordapp.com"
DEFAULT_STORAGE_KEY = "discord_token"


def default_credential_file() -> Path:
    return Path.home() / ".discord_web_client" / "storage.json"


@dataclass
class ApiConfig:
    """External API settings."""

    base_url: str = DEFAULT_API_URL
    cdn_url: str = DEFAULT_CDN_URL
    timeout: float = 10.0
    message_limit: int = 50
    auth_scheme: Optional[str] = None  # e.g. 'Bearer' for OAuth access tokens


@dataclass
class StorageConfig:
    """Where the credential slot lives."""

    credential_file: Path = field(default_factory=default_credential_file)
    storage_key: str = DEFAULT_STORAGE_KEY


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class ClientConfig:
    """Main client configuration combining all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'de'
    login_redirect_delay: float = 2.0


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env(dotenv_path: Optional[Path] = None) -> ClientConfig:
    """
    Build a ClientConfig from environment variables.

    Values already present in the environment win over the ``.env`` file.
    Malformed numeric values fall back to their defaults.

    Args:
        dotenv_path: Optional explicit path of the .env file

    Returns:
        ClientConfig populated from the environment
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)

    language = (os.getenv("LANGUAGE", "en") or "en").lower()
    if language not in ("de", "en"):
        language = "en"

    credential_file = os.getenv("CREDENTIAL_FILE", "").strip()
    auth_scheme = os.getenv("DISCORD_AUTH_SCHEME", "").strip() or None

    return ClientConfig(
        api=ApiConfig(
            base_url=os.getenv("DISCORD_API_URL", DEFAULT_API_URL).rstrip("/"),
            cdn_url=os.getenv("DISCORD_CDN_URL", DEFAULT_CDN_URL).rstrip("/"),
            timeout=_float_env("HTTP_TIMEOUT", 10.0),
            message_limit=_int_env("MESSAGE_LIMIT", 50),
            auth_scheme=auth_scheme,
        ),
        storage=StorageConfig(
            credential_file=Path(credential_file) if credential_file else default_credential_file(),
        ),
        logging=LoggingConfig(
            level=(os.getenv("LOG_LEVEL", "info") or "info").lower(),
            output_format=(os.getenv("LOG_FORMAT", "text") or "text").lower(),
        ),
        language=language,
        login_redirect_delay=_float_env("LOGIN_REDIRECT_DELAY", 2.0),
    )
