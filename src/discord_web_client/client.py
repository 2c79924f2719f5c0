"""
ChatClient: the data-and-action surface handed to a UI.

Wires the Credential Store, API Gateway, Session Bootstrapper, Selection
Orchestrator and Message Composer together around one shared error banner.
"""

from typing import Optional

import httpx

from .api_gateway import DiscordAPIGateway, StoredCredentialGateway
from .audit_logger import AuditLogger
from .config import ClientConfig
from .credential_store import CredentialStore, JsonFileStorage, KeyValueStorage
from .composer import MessageComposer
from .enums import LogLevel, SessionStatus
from .models import (
    Channel,
    ErrorBanner,
    Guild,
    Message,
    Selection,
    SessionState,
    TransientError,
    User,
    VoiceRegion,
)
from .orchestrator import SelectionOrchestrator
from .session import SessionBootstrapper


class ChatClient:
    """
    Facade over the client components.

    Without an explicit storage port the credential is kept in the JSON file
    named by ``config.storage.credential_file``.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        storage: Optional[KeyValueStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._logger = logger

        if storage is None:
            storage = JsonFileStorage(self._config.storage.credential_file)
        self._store = CredentialStore(storage, key=self._config.storage.storage_key)

        self._banner = ErrorBanner()
        self._gateway = DiscordAPIGateway(self._config.api, transport=transport, logger=logger)
        self._stored_gateway = StoredCredentialGateway(self._gateway, self._store)

        self._session = SessionBootstrapper(
            self._store, self._gateway, error_banner=self._banner, logger=logger
        )
        self._orchestrator = SelectionOrchestrator(
            self._stored_gateway,
            error_banner=self._banner,
            session=self._session,
            message_limit=self._config.api.message_limit,
            logger=logger,
        )
        self._composer = MessageComposer(
            self._stored_gateway, self._orchestrator, session=self._session, logger=logger
        )

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._gateway.close()

    # State

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def credential_store(self) -> CredentialStore:
        return self._store

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def session(self) -> SessionState:
        return self._session.state

    @property
    def user(self) -> Optional[User]:
        return self._session.user

    @property
    def guilds(self) -> list[Guild]:
        return self._session.guilds

    @property
    def channels(self) -> list[Channel]:
        return self._orchestrator.channels

    @property
    def channels_loading(self) -> bool:
        return self._orchestrator.channels_loading

    @property
    def messages(self) -> list[Message]:
        return self._orchestrator.messages

    @property
    def messages_loading(self) -> bool:
        return self._orchestrator.messages_loading

    @property
    def selection(self) -> Selection:
        return self._orchestrator.selection

    @property
    def error(self) -> Optional[TransientError]:
        return self._banner.current

    @property
    def draft(self) -> str:
        return self._composer.draft

    @draft.setter
    def draft(self, value: str) -> None:
        self._composer.draft = value

    @property
    def login_redirect_delay(self) -> float:
        return self._config.login_redirect_delay

    # Actions

    async def start(self) -> SessionState:
        state = await self._session.bootstrap()
        if not state.is_authenticated and state.status is not SessionStatus.VALIDATING:
            self._clear_browsing_state()
        return state

    async def login(self, token: str) -> SessionState:
        """Log in with a new token; nothing loaded for an earlier session survives."""
        self._clear_browsing_state()
        return await self._session.login(token)

    async def refresh_guilds(self) -> list[Guild]:
        return await self._session.refresh_guilds()

    async def select_guild(self, guild_id: str) -> None:
        await self._orchestrator.select_guild(guild_id)

    async def select_channel(self, channel_id: str) -> None:
        await self._orchestrator.select_channel(channel_id)

    async def send(self, text: Optional[str] = None) -> Optional[Message]:
        return await self._composer.send(text)

    async def join_voice(self, channel_id: str) -> bool:
        return await self._orchestrator.join_voice(channel_id)

    async def voice_regions(self) -> list[VoiceRegion]:
        return await self._orchestrator.voice_regions()

    def dismiss_error(self) -> None:
        self._banner.dismiss()

    def logout(self) -> None:
        """Forget the credential and every piece of session-derived state."""
        self._store.clear()
        self._session.reset()
        self._clear_browsing_state()
        if self._logger:
            self._logger.log(LogLevel.INFO, "ChatClient", "Logged out", {})

    def _clear_browsing_state(self) -> None:
        self._orchestrator.reset()
        self._composer.draft = ""
        self._banner.dismiss()
