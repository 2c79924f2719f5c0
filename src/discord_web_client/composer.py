"""
Message Composer for the Discord web client.

Validates outgoing text against the active channel, posts it, and appends
the server's copy to the transcript without re-fetching the channel.
"""

from typing import Optional

from .api_gateway import StoredCredentialGateway
from .audit_logger import AuditLogger
from .enums import LogLevel
from .exceptions import DiscordClientError, InvalidInputError
from .models import Message
from .orchestrator import SelectionOrchestrator
from .session import SessionBootstrapper


class MessageComposer:
    """Holds the draft and sends it to the active text channel."""

    def __init__(
        self,
        gateway: StoredCredentialGateway,
        orchestrator: SelectionOrchestrator,
        session: Optional[SessionBootstrapper] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._gateway = gateway
        self._orchestrator = orchestrator
        self._session = session
        self._logger = logger
        self.draft = ""

    async def send(self, text: Optional[str] = None) -> Optional[Message]:
        """
        Send ``text`` (or the current draft) to the active channel.

        The draft is cleared only on success, so a failed send can be retried
        without retyping.

        Returns:
            The appended message, or None if the API call failed

        Raises:
            InvalidInputError: Blank text, no active channel, or a voice channel
        """
        if text is not None:
            self.draft = text
        content = self.draft

        if not content or not content.strip():
            raise InvalidInputError("Message content is required")

        channel = self._orchestrator.active_channel
        if channel is None:
            raise InvalidInputError("No channel selected")
        if not channel.is_text:
            raise InvalidInputError(
                "Messages can only be sent to text channels",
                details={"channel_id": channel.id},
            )

        try:
            sent = await self._gateway.send_message(channel.id, content)
        except DiscordClientError as e:
            self._orchestrator.error_banner.show("send_message", e)
            if self._logger:
                self._logger.log_error(
                    "MessageComposer",
                    "Sending message failed",
                    error=e,
                    additional_data={"channel_id": channel.id},
                )
            return None

        message = Message(
            id=sent.id,
            author_name=sent.author_name or self._fallback_author(),
            content=sent.content,
            timestamp=sent.timestamp,
            channel_id=channel.id,
        )
        self._orchestrator.append_message(channel.id, message)
        self.draft = ""

        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                "MessageComposer",
                "Message sent",
                {"channel_id": channel.id, "message_id": message.id},
            )
        return message

    def _fallback_author(self) -> str:
        user = self._session.user if self._session else None
        return user.username if user else ""
