"""
Property-based tests for the Audit Logger module.

Checks output formats, level filtering and that credentials never reach
a log line.
"""

import json
from io import StringIO

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from discord_web_client.audit_logger import LEVEL_ORDER, AuditLogger, LogEntry
from discord_web_client.config import LoggingConfig
from discord_web_client.enums import LogLevel
from discord_web_client.exceptions import UnauthorizedError


# Strategies for generating valid test data

@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=30,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate single-line log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Z'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=120,
    ))


@st.composite
def non_sensitive_key_strategy(draw) -> str:
    """Generate keys that contain no sensitive pattern."""
    key = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"),
        min_size=1,
        max_size=20,
    ))
    assume(not any(pattern in key for pattern in AuditLogger.SENSITIVE_KEYS))
    return key


sensitive_key_strategy = st.sampled_from([
    "token", "Authorization", "discord_token", "access_token",
    "password", "client_secret", "credential",
])

token_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-"),
    min_size=20,
    max_size=72,
)


class TestSensitiveDataMasking:
    """Credentials are masked at any nesting depth."""

    @given(key=sensitive_key_strategy, secret=token_strategy)
    @settings(max_examples=100)
    def test_top_level_masked(self, key: str, secret: str) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="both", output_stream=stream)

        entry = logger.log(LogLevel.INFO, "Test", "request", {key: secret})

        assert entry.data[key] == AuditLogger.MASK_VALUE
        assert secret not in stream.getvalue()

    @given(key=sensitive_key_strategy, secret=token_strategy)
    @settings(max_examples=50)
    def test_nested_and_listed_masked(self, key: str, secret: str) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        logger.log(LogLevel.INFO, "Test", "request", {
            "headers": {key: secret},
            "attempts": [{key: secret}, "plain"],
        })

        assert secret not in stream.getvalue()

    @given(key=non_sensitive_key_strategy(), value=st.text(max_size=40))
    @settings(max_examples=100)
    def test_other_keys_kept(self, key: str, value: str) -> None:
        logger = AuditLogger(output_stream=StringIO())
        entry = logger.log(LogLevel.INFO, "Test", "message", {key: value})
        assert entry.data[key] == value

    def test_author_fields_are_not_masked(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        entry = logger.log(LogLevel.INFO, "Test", "message", {"author_name": "Alice"})
        assert entry.data["author_name"] == "Alice"

    def test_input_not_mutated(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        data = {"token": "abc", "nested": {"token": "def"}}
        logger.log(LogLevel.INFO, "Test", "message", data)
        assert data == {"token": "abc", "nested": {"token": "def"}}


class TestOutputFormats:
    """JSON lines parse back; text lines carry level and component."""

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
    )
    @settings(max_examples=100)
    def test_json_line_round_trips(self, level: LogLevel, component: str, message: str) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream, min_level=LogLevel.DEBUG)

        logger.log(level, component, message, {"guild_id": "g1"})

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == {"guild_id": "g1"}

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
    )
    @settings(max_examples=50)
    def test_text_line_layout(self, level: LogLevel, component: str, message: str) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream, min_level=LogLevel.DEBUG)

        entry = logger.log(level, component, message)
        line = stream.getvalue().strip()

        assert line.startswith(f"[{entry.timestamp}] {level.value.upper()} [{component}]")
        assert message.strip() in line

    def test_both_writes_two_lines(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="both", output_stream=stream)
        logger.log(LogLevel.INFO, "Test", "hello")
        assert len(stream.getvalue().strip().splitlines()) == 2

    def test_invalid_format_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")


class TestLevelFilter:
    """Entries below the minimum level are dropped entirely."""

    @given(
        min_level=st.sampled_from(list(LogLevel)),
        level=st.sampled_from(list(LogLevel)),
    )
    @settings(max_examples=50)
    def test_filter(self, min_level: LogLevel, level: LogLevel) -> None:
        stream = StringIO()
        logger = AuditLogger(output_stream=stream, min_level=min_level)

        entry = logger.log(level, "Test", "message")

        if LEVEL_ORDER[level] >= LEVEL_ORDER[min_level]:
            assert isinstance(entry, LogEntry)
            assert len(logger.entries) == 1
        else:
            assert entry is None
            assert logger.entries == []
            assert stream.getvalue() == ""

    def test_from_config(self) -> None:
        logger = AuditLogger.from_config(
            LoggingConfig(level="warn", output_format="json"), output_stream=StringIO()
        )
        assert logger.min_level is LogLevel.WARN
        assert logger.output_format == "json"

    def test_from_config_unknown_level_is_info(self) -> None:
        logger = AuditLogger.from_config(LoggingConfig(level="loud"), output_stream=StringIO())
        assert logger.min_level is LogLevel.INFO


class TestErrorLogging:
    """log_error carries error type, code and request context."""

    def test_error_context(self) -> None:
        logger = AuditLogger(output_stream=StringIO())

        entry = logger.log_error(
            "DiscordAPIGateway",
            "Request failed",
            error=UnauthorizedError("401: Unauthorized"),
            request_path="/users/@me",
            response_status_code=401,
            additional_data={"method": "GET"},
        )

        assert entry.level is LogLevel.ERROR
        assert entry.data["error_type"] == "UnauthorizedError"
        assert entry.data["error_code"] == "unauthorized"
        assert entry.data["request_path"] == "/users/@me"
        assert entry.data["response_status_code"] == 401
        assert entry.data["method"] == "GET"

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        logger.log(LogLevel.INFO, "Test", "one")
        logger.clear_entries()
        assert logger.entries == []
