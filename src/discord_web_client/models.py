"""
Data models for the Discord web client.

This module defines the UI-facing records built from API payloads (users,
guilds, channels, messages, voice regions), the selection and session
state, and the transient error banner. Parsing is tolerant: only the fields
the client uses are read, everything else in a payload is ignored.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from .config import DEFAULT_CDN_URL
from .enums import ChannelKind, SessionStatus

# Discord channel type codes
CHANNEL_TYPE_KINDS: dict[int, ChannelKind] = {
    0: ChannelKind.TEXT,
    2: ChannelKind.VOICE,
}


@dataclass(frozen=True)
class User:
    """The authenticated user."""

    id: str
    username: str
    discriminator: str = "0"
    avatar: Optional[str] = None
    email: Optional[str] = None
    global_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "User":
        return cls(
            id=str(data["id"]),
            username=data.get("username", ""),
            discriminator=data.get("discriminator") or "0",
            avatar=data.get("avatar"),
            email=data.get("email"),
            global_name=data.get("global_name"),
        )

    @property
    def display_name(self) -> str:
        return self.global_name or self.username

    def avatar_url(self, cdn_url: str = DEFAULT_CDN_URL) -> str:
        """CDN avatar URL, or the default avatar when none is set."""
        if self.avatar:
            ext = "gif" if self.avatar.startswith("a_") else "png"
            return f"{cdn_url}/avatars/{self.id}/{self.avatar}.{ext}"
        try:
            index = int(self.id) % 5
        except ValueError:
            index = 0
        return f"{cdn_url}/embed/avatars/{index}.png"


@dataclass(frozen=True)
class Guild:
    """A server the user belongs to."""

    id: str
    display_name: str
    icon_ref: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Guild":
        return cls(
            id=str(data["id"]),
            display_name=data.get("name", ""),
            icon_ref=data.get("icon"),
        )

    @property
    def initial(self) -> str:
        """First character of the name, shown when there is no icon."""
        return self.display_name[:1]

    def icon_url(self, cdn_url: str = DEFAULT_CDN_URL) -> Optional[str]:
        if not self.icon_ref:
            return None
        return f"{cdn_url}/icons/{self.id}/{self.icon_ref}.png"


@dataclass(frozen=True)
class Channel:
    """A text or voice channel of one guild."""

    id: str
    name: str
    kind: ChannelKind

    @property
    def is_text(self) -> bool:
        return self.kind is ChannelKind.TEXT

    @property
    def is_voice(self) -> bool:
        return self.kind is ChannelKind.VOICE


@dataclass(frozen=True)
class Message:
    """A single message of a text channel."""

    id: str
    author_name: str
    content: str
    timestamp: str
    channel_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict, fallback_author: str = "") -> "Message":
        author = data.get("author") or {}
        return cls(
            id=str(data["id"]),
            author_name=author.get("username") or fallback_author,
            content=data.get("content") or "",
            timestamp=data.get("timestamp") or "",
            channel_id=data.get("channel_id"),
        )


@dataclass(frozen=True)
class VoiceRegion:
    """A voice server region descriptor."""

    id: str
    name: str
    optimal: bool = False
    deprecated: bool = False
    custom: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "VoiceRegion":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            optimal=bool(data.get("optimal", False)),
            deprecated=bool(data.get("deprecated", False)),
            custom=bool(data.get("custom", False)),
        )


def channel_from_api(data: Any) -> Optional[Channel]:
    """
    Build a Channel from an API payload.

    Returns None for anything that is not a text or voice channel.
    """
    if isinstance(data, Channel):
        return data
    if not isinstance(data, dict):
        return None
    kind = CHANNEL_TYPE_KINDS.get(data.get("type"))
    if kind is None or data.get("id") is None:
        return None
    return Channel(id=str(data["id"]), name=data.get("name", ""), kind=kind)


def classify_channels(raw_channels: Iterable[Any]) -> list[Channel]:
    """
    Keep text and voice channels in API order, dropping every other kind.

    Accepts raw payload dicts or already-classified Channels, so applying it
    to its own output returns the same list.
    """
    channels = []
    for raw in raw_channels:
        channel = channel_from_api(raw)
        if channel is not None:
            channels.append(channel)
    return channels


@dataclass(frozen=True)
class Selection:
    """Active guild and channel, both optional."""

    active_guild_id: Optional[str] = None
    active_channel_id: Optional[str] = None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session. ``user`` is set only when authenticated."""

    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    user: Optional[User] = None
    reason: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


@dataclass
class TransientError:
    """A non-fatal error shown to the user until dismissed."""

    operation: str
    code: str
    message: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class ErrorBanner:
    """Holds the single dismissible error currently on display."""

    def __init__(self) -> None:
        self._current: Optional[TransientError] = None

    @property
    def current(self) -> Optional[TransientError]:
        return self._current

    def show(self, operation: str, error: Exception) -> TransientError:
        code = getattr(error, "code", type(error).__name__)
        message = getattr(error, "message", str(error))
        self._current = TransientError(operation=operation, code=code, message=message)
        return self._current

    def dismiss(self) -> None:
        self._current = None
