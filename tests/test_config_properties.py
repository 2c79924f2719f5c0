"""
Property-based tests for configuration loading.

Covers environment parsing, .env precedence, fallback on malformed values,
and the JSON config file helpers used by the CLI.
"""

import os
from pathlib import Path

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from discord_web_client.cli import load_config_from_file, save_config_to_file
from discord_web_client.config import (
    DEFAULT_API_URL,
    DEFAULT_STORAGE_KEY,
    ApiConfig,
    ClientConfig,
    LoggingConfig,
    load_config_from_env,
)


ENV_VARS = [
    "DISCORD_API_URL", "DISCORD_CDN_URL", "HTTP_TIMEOUT", "MESSAGE_LIMIT",
    "DISCORD_AUTH_SCHEME", "CREDENTIAL_FILE", "LANGUAGE", "LOG_LEVEL",
    "LOG_FORMAT", "LOGIN_REDIRECT_DELAY",
]


def clear_env(monkeypatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """An empty environment yields the documented defaults."""

    def test_defaults(self, monkeypatch, tmp_path: Path) -> None:
        clear_env(monkeypatch)

        config = load_config_from_env(tmp_path / "missing.env")

        assert config.api.base_url == DEFAULT_API_URL
        assert config.api.timeout == 10.0
        assert config.api.message_limit == 50
        assert config.api.auth_scheme is None
        assert config.storage.storage_key == DEFAULT_STORAGE_KEY
        assert config.storage.credential_file.name == "storage.json"
        assert config.logging.level == "info"
        assert config.language == "en"
        assert config.login_redirect_delay == 2.0


class TestEnvironmentParsing:
    """Values from the environment land in the right fields."""

    @given(
        limit=st.integers(min_value=1, max_value=100),
        timeout=st.floats(min_value=0.1, max_value=120, allow_nan=False),
        delay=st.floats(min_value=0, max_value=10, allow_nan=False),
    )
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_numeric_values(self, monkeypatch, tmp_path, limit, timeout, delay) -> None:
        clear_env(monkeypatch)
        monkeypatch.setenv("MESSAGE_LIMIT", str(limit))
        monkeypatch.setenv("HTTP_TIMEOUT", repr(timeout))
        monkeypatch.setenv("LOGIN_REDIRECT_DELAY", repr(delay))

        config = load_config_from_env(tmp_path / "missing.env")

        assert config.api.message_limit == limit
        assert config.api.timeout == timeout
        assert config.login_redirect_delay == delay

    @given(garbage=st.sampled_from(["abc", "", "1.5.2", "ten"]))
    @settings(max_examples=10, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_malformed_numbers_fall_back(self, monkeypatch, tmp_path, garbage) -> None:
        clear_env(monkeypatch)
        monkeypatch.setenv("MESSAGE_LIMIT", garbage)
        monkeypatch.setenv("LOGIN_REDIRECT_DELAY", garbage)

        config = load_config_from_env(tmp_path / "missing.env")

        assert config.api.message_limit == 50
        assert config.login_redirect_delay == 2.0

    def test_urls_and_storage(self, monkeypatch, tmp_path: Path) -> None:
        clear_env(monkeypatch)
        monkeypatch.setenv("DISCORD_API_URL", "https://discord.test/api/v10/")
        monkeypatch.setenv("DISCORD_AUTH_SCHEME", "Bearer")
        monkeypatch.setenv("CREDENTIAL_FILE", str(tmp_path / "cred.json"))

        config = load_config_from_env(tmp_path / "missing.env")

        assert config.api.base_url == "https://discord.test/api/v10"
        assert config.api.auth_scheme == "Bearer"
        assert config.storage.credential_file == tmp_path / "cred.json"

    @given(language=st.sampled_from(["de", "DE", "en", "fr", "xx"]))
    @settings(max_examples=10, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_language_normalized(self, monkeypatch, tmp_path, language) -> None:
        clear_env(monkeypatch)
        monkeypatch.setenv("LANGUAGE", language)

        config = load_config_from_env(tmp_path / "missing.env")

        assert config.language == (language.lower() if language.lower() in ("de", "en") else "en")


class TestDotenv:
    """The .env file fills gaps but never overrides the real environment."""

    def test_dotenv_loaded(self, monkeypatch, tmp_path: Path) -> None:
        clear_env(monkeypatch)
        env_file = tmp_path / ".env"
        env_file.write_text("MESSAGE_LIMIT=20\nLOG_LEVEL=DEBUG\n", encoding="utf-8")

        config = load_config_from_env(env_file)

        assert config.api.message_limit == 20
        assert config.logging.level == "debug"
        for name in ("MESSAGE_LIMIT", "LOG_LEVEL"):
            os.environ.pop(name, None)

    def test_environment_wins(self, monkeypatch, tmp_path: Path) -> None:
        clear_env(monkeypatch)
        monkeypatch.setenv("MESSAGE_LIMIT", "30")
        env_file = tmp_path / ".env"
        env_file.write_text("MESSAGE_LIMIT=20\n", encoding="utf-8")

        config = load_config_from_env(env_file)

        assert config.api.message_limit == 30


class TestConfigFile:
    """JSON config files written by the CLI load back."""

    @given(
        limit=st.integers(min_value=1, max_value=100),
        language=st.sampled_from(["en", "de"]),
        level=st.sampled_from(["debug", "info", "warn", "error"]),
    )
    @settings(max_examples=30, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_save_then_load(self, tmp_path, limit, language, level) -> None:
        path = tmp_path / "config.json"
        config = ClientConfig(
            api=ApiConfig(base_url="https://discord.test/api/v10", message_limit=limit),
            logging=LoggingConfig(level=level, output_format="json"),
            language=language,
            login_redirect_delay=0.5,
        )

        save_config_to_file(config, path)
        loaded = load_config_from_file(path)

        assert loaded.api.base_url == "https://discord.test/api/v10"
        assert loaded.api.message_limit == limit
        assert loaded.logging.level == level
        assert loaded.logging.output_format == "json"
        assert loaded.language == language
        assert loaded.login_redirect_delay == 0.5
        assert loaded.storage.credential_file == config.storage.credential_file

    def test_missing_file_is_none(self, tmp_path: Path) -> None:
        assert load_config_from_file(tmp_path / "nope.json") is None

    def test_corrupt_file_is_none(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")
        assert load_config_from_file(path) is None
