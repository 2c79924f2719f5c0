"""
Dependent-Fetch Orchestrator for the Discord web client.

Owns the selection (active guild and channel) and the data that hangs off it:
the guild's channels and the channel's messages. Each selection change clears
everything below it and fetches the next tier.

Responses are applied in selection order, not arrival order. Every fetch is
tagged with a per-tier token taken when the selection was made; a response
whose token (or originating id) no longer matches the live selection when it
resolves is discarded.
"""

from typing import Optional

from .api_gateway import StoredCredentialGateway
from .audit_logger import AuditLogger
from .enums import LogLevel
from .exceptions import ApiError, DiscordClientError, InvalidInputError
from .models import (
    Channel,
    ErrorBanner,
    Message,
    Selection,
    VoiceRegion,
    classify_channels,
)
from .session import SessionBootstrapper


class SelectionOrchestrator:
    """
    Selection state machine driving guild -> channels -> messages fetches.

    Errors from fetches are non-fatal: they are put on the error banner and
    the session is left alone.
    """

    def __init__(
        self,
        gateway: StoredCredentialGateway,
        error_banner: Optional[ErrorBanner] = None,
        session: Optional[SessionBootstrapper] = None,
        message_limit: Optional[int] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            gateway: Gateway adapter resolving the stored credential
            error_banner: Banner for non-fatal errors
            session: Session, read for the user id when joining voice
            message_limit: Page size for message fetches (gateway default if None)
            logger: Optional audit logger
        """
        self._gateway = gateway
        self._banner = error_banner or ErrorBanner()
        self._session = session
        self._message_limit = message_limit
        self._logger = logger

        self._active_guild_id: Optional[str] = None
        self._active_channel_id: Optional[str] = None
        self._channels: list[Channel] = []
        self._messages: list[Message] = []
        self._channels_loading = False
        self._messages_loading = False

        self._guild_token = 0
        self._channel_token = 0

    # Read-only views

    @property
    def selection(self) -> Selection:
        return Selection(
            active_guild_id=self._active_guild_id,
            active_channel_id=self._active_channel_id,
        )

    @property
    def channels(self) -> list[Channel]:
        return list(self._channels)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def channels_loading(self) -> bool:
        return self._channels_loading

    @property
    def messages_loading(self) -> bool:
        return self._messages_loading

    @property
    def error_banner(self) -> ErrorBanner:
        return self._banner

    @property
    def active_channel(self) -> Optional[Channel]:
        return self._find_channel(self._active_channel_id)

    def _find_channel(self, channel_id: Optional[str]) -> Optional[Channel]:
        if channel_id is None:
            return None
        for channel in self._channels:
            if channel.id == channel_id:
                return channel
        return None

    # Selection

    async def select_guild(self, guild_id: str) -> None:
        """
        Make ``guild_id`` the active guild and load its channels.

        Raises:
            InvalidInputError: If guild_id is blank
        """
        if guild_id is None or not str(guild_id).strip():
            raise InvalidInputError("Guild ID is required")

        self._guild_token += 1
        self._channel_token += 1
        token = self._guild_token

        self._active_guild_id = guild_id
        self._active_channel_id = None
        self._channels = []
        self._messages = []
        self._messages_loading = False
        self._channels_loading = True

        self._log(LogLevel.DEBUG, "Loading channels", {"guild_id": guild_id})

        try:
            raw_channels = await self._gateway.list_channels(guild_id)
        except DiscordClientError as e:
            if self._is_current_guild(token, guild_id):
                self._channels_loading = False
                self._banner.show("list_channels", e)
                self._log_error("Channel list could not be loaded", e, {"guild_id": guild_id})
            else:
                self._log_stale("list_channels", guild_id)
            return

        if not self._is_current_guild(token, guild_id):
            self._log_stale("list_channels", guild_id)
            return

        self._channels = classify_channels(raw_channels)
        self._channels_loading = False
        self._log(
            LogLevel.INFO,
            "Channels loaded",
            {"guild_id": guild_id, "channel_count": len(self._channels)},
        )

    async def select_channel(self, channel_id: str) -> None:
        """
        Make ``channel_id`` the active channel; load messages if it is text.

        Raises:
            InvalidInputError: If the channel is not in the current channel set
        """
        channel = self._find_channel(channel_id)
        if channel is None:
            raise InvalidInputError(
                "Channel is not part of the active guild",
                details={"channel_id": channel_id, "guild_id": self._active_guild_id},
            )

        self._channel_token += 1
        token = self._channel_token

        self._active_channel_id = channel.id
        self._messages = []
        self._messages_loading = False

        if not channel.is_text:
            self._log(LogLevel.DEBUG, "Voice channel selected", {"channel_id": channel.id})
            return

        self._messages_loading = True
        try:
            fetched = await self._gateway.list_messages(channel.id, limit=self._message_limit)
        except DiscordClientError as e:
            if self._is_current_channel(token, channel.id):
                self._messages_loading = False
                self._banner.show("list_messages", e)
                self._log_error("Messages could not be loaded", e, {"channel_id": channel.id})
            else:
                self._log_stale("list_messages", channel.id)
            return

        if not self._is_current_channel(token, channel.id):
            self._log_stale("list_messages", channel.id)
            return

        # API order is newest first; the transcript reads oldest first.
        # Messages sent while the page was loading stay at the end.
        fetched_ids = {m.id for m in fetched}
        sent_meanwhile = [m for m in self._messages if m.id not in fetched_ids]
        self._messages = list(reversed(fetched)) + sent_meanwhile
        self._messages_loading = False
        self._log(
            LogLevel.INFO,
            "Messages loaded",
            {"channel_id": channel.id, "message_count": len(self._messages)},
        )

    def append_message(self, channel_id: str, message: Message) -> bool:
        """
        Append a message sent to ``channel_id`` if that channel is still active.

        Returns:
            True if the message was appended
        """
        if channel_id != self._active_channel_id:
            return False
        self._messages.append(message)
        return True

    def reset(self) -> None:
        """Clear selection and all dependent sets; pending responses become stale."""
        self._guild_token += 1
        self._channel_token += 1
        self._active_guild_id = None
        self._active_channel_id = None
        self._channels = []
        self._messages = []
        self._channels_loading = False
        self._messages_loading = False

    # Voice metadata

    async def join_voice(self, channel_id: str) -> bool:
        """
        Move the current user into a voice channel of the active guild.

        Returns:
            True on success; failures are put on the error banner

        Raises:
            InvalidInputError: If the channel is not a voice channel of the
                active guild, or no user is authenticated
        """
        channel = self._find_channel(channel_id)
        if channel is None or not channel.is_voice:
            raise InvalidInputError(
                "Not a voice channel of the active guild",
                details={"channel_id": channel_id},
            )
        user = self._session.user if self._session else None
        if user is None:
            raise InvalidInputError("No authenticated user")

        try:
            await self._gateway.join_voice_channel(self._active_guild_id, channel.id, user.id)
        except DiscordClientError as e:
            self._banner.show("join_voice", e)
            self._log_error("Joining voice channel failed", e, {"channel_id": channel.id})
            return False

        self._log(LogLevel.INFO, "Joined voice channel", {"channel_id": channel.id})
        return True

    async def voice_regions(self) -> list[VoiceRegion]:
        """List voice regions; an empty list on failure (see error banner)."""
        try:
            return await self._gateway.list_voice_regions()
        except DiscordClientError as e:
            self._banner.show("list_voice_regions", e)
            self._log_error("Voice regions could not be loaded", e, {})
            return []

    # Helpers

    def _is_current_guild(self, token: int, guild_id: str) -> bool:
        return token == self._guild_token and guild_id == self._active_guild_id

    def _is_current_channel(self, token: int, channel_id: str) -> bool:
        return token == self._channel_token and channel_id == self._active_channel_id

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "SelectionOrchestrator", message, data)

    def _log_error(self, message: str, error: Exception, data: dict) -> None:
        if self._logger:
            status = error.http_status_code if isinstance(error, ApiError) else None
            self._logger.log_error(
                "SelectionOrchestrator",
                message,
                error=error,
                response_status_code=status,
                additional_data=data,
            )

    def _log_stale(self, operation: str, ref_id: str) -> None:
        self._log(LogLevel.DEBUG, "Discarded stale response", {"operation": operation, "id": ref_id})
