"""
Session Bootstrapper for the Discord web client.

Establishes the authentication state on start-up:

    unauthenticated -> validating -> authenticated(user) | unauthenticated

A stored credential is validated with one current-user round trip. The
guild list is then fetched best-effort: a guild failure is shown on the
error banner but never reverts the session.
"""

from typing import Optional

from .api_gateway import DiscordAPIGateway
from .audit_logger import AuditLogger
from .credential_store import CredentialStore
from .enums import LogLevel, SessionStatus
from .exceptions import ApiError, InvalidInputError, MissingCredentialError
from .models import ErrorBanner, Guild, SessionState, User


class SessionBootstrapper:
    """
    Owns the session state. Every other component reads it.

    Only this class clears the Credential Store, and only when validating
    the stored credential fails.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        gateway: DiscordAPIGateway,
        error_banner: Optional[ErrorBanner] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the bootstrapper.

        Args:
            credential_store: Where the credential lives
            gateway: API gateway; called with an explicit credential
            error_banner: Banner for non-fatal errors (guild list failures)
            logger: Optional audit logger
        """
        self._store = credential_store
        self._gateway = gateway
        self._banner = error_banner or ErrorBanner()
        self._logger = logger
        self._state = SessionState()
        self._guilds: list[Guild] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def guilds(self) -> list[Guild]:
        return list(self._guilds)

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    async def bootstrap(self) -> SessionState:
        """
        Validate the stored credential and load the guild list.

        A call made while a validation is already in flight returns the
        current (validating) state without issuing another request.
        """
        if self._state.status is SessionStatus.VALIDATING:
            return self._state

        credential = self._store.get()
        if credential is None:
            self._guilds = []
            self._state = SessionState(status=SessionStatus.UNAUTHENTICATED)
            self._log_info("No stored credential", {})
            return self._state

        self._state = SessionState(status=SessionStatus.VALIDATING)
        self._log_info("Validating stored credential", {})

        try:
            try:
                user = await self._gateway.get_current_user(credential)
            except (MissingCredentialError, ApiError) as e:
                self._guilds = []
                self._state = SessionState(
                    status=SessionStatus.UNAUTHENTICATED,
                    reason=f"session.{e.code}",
                )
                self._store.clear()
                self._log_warn("Credential validation failed; credential cleared", {"error_code": e.code})
                return self._state

            await self._load_guilds(credential)
            self._state = SessionState(status=SessionStatus.AUTHENTICATED, user=user)
        finally:
            # Cancelled or failed unexpectedly: nothing is in flight any more.
            if self._state.status is SessionStatus.VALIDATING:
                self._guilds = []
                self._state = SessionState(status=SessionStatus.UNAUTHENTICATED)

        self._log_info(
            "Session authenticated",
            {"user_id": user.id, "guild_count": len(self._guilds)},
        )
        return self._state

    async def login(self, token: str) -> SessionState:
        """
        Validate a pasted token, store it, and bootstrap the session.

        Raises:
            InvalidInputError: If the token is blank
            ApiError: If the API rejects the token; nothing is stored
        """
        if token is None or not token.strip():
            raise InvalidInputError("Please enter your Discord token")

        await self._gateway.get_current_user(token)
        self._store.set(token)
        self._log_info("Token accepted and stored", {})
        return await self.bootstrap()

    async def refresh_guilds(self) -> list[Guild]:
        """Re-fetch the guild list. Failures go to the error banner."""
        credential = self._store.get()
        if credential is None:
            self._banner.show("list_guilds", MissingCredentialError())
            return self.guilds
        await self._load_guilds(credential)
        return self.guilds

    async def _load_guilds(self, credential: str) -> None:
        try:
            raw_guilds = await self._gateway.list_guilds(credential)
        except ApiError as e:
            self._guilds = []
            self._banner.show("list_guilds", e)
            self._log_warn("Guild list could not be loaded", {"error_code": e.code})
            return

        seen: set[str] = set()
        guilds = []
        for raw in raw_guilds:
            if not isinstance(raw, dict) or raw.get("id") is None:
                continue
            guild = Guild.from_api(raw)
            if guild.id not in seen:
                seen.add(guild.id)
                guilds.append(guild)
        self._guilds = guilds

    def reset(self) -> None:
        """Drop back to unauthenticated without touching the store."""
        self._guilds = []
        self._state = SessionState(status=SessionStatus.UNAUTHENTICATED)

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, "SessionBootstrapper", message, data)

    def _log_warn(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.WARN, "SessionBootstrapper", message, data)
