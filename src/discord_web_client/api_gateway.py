"""
API Gateway for the Discord REST API.

This module provides a thin async client over the seven endpoints the web
client uses, and normalizes every failure into the client's error taxonomy:

- Missing credential or blank identifiers fail before any network call
- 401/403 -> UnauthorizedError, 404 -> NotFoundError, 429 -> RateLimitedError
- 5xx, other unexpected statuses and unparseable bodies -> ServerError
- Transport failures and timeouts -> NetworkError

The gateway takes an explicit credential on every call and never reads or
mutates the Credential Store. StoredCredentialGateway is the adapter that
performs that lookup.
"""

import time
from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .config import ApiConfig
from .credential_store import CredentialStore
from .enums import LogLevel
from .exceptions import (
    InvalidInputError,
    MissingCredentialError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from .models import Message, User, VoiceRegion


MAX_MESSAGE_LIMIT = 100


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{name} is required", details={"field": name})
    return str(value)


class DiscordAPIGateway:
    """
    Async client for the Discord REST API.

    Returns raw payloads for list endpoints that the caller classifies
    (guilds, channels) and parsed models for the rest.
    """

    def __init__(
        self,
        config: Optional[ApiConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            config: API settings; defaults to the public Discord v10 API
            transport: Optional httpx transport (tests pass a MockTransport)
            logger: Optional audit logger
        """
        self._config = config or ApiConfig()
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "DiscordAPIGateway":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def config(self) -> ApiConfig:
        return self._config

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.timeout),
                transport=self._transport,
            )
        return self._client

    def _headers(self, credential: Optional[str]) -> dict[str, str]:
        if credential is None or not credential.strip():
            raise MissingCredentialError("Authentication required")
        scheme = self._config.auth_scheme
        return {
            "Authorization": f"{scheme} {credential}" if scheme else credential,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        credential: Optional[str],
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> Any:
        headers = self._headers(credential)
        client = self._ensure_client()
        start_time = time.perf_counter()

        try:
            response = await client.request(
                method, path, headers=headers, params=params, json=json_body
            )
        except httpx.TimeoutException as e:
            error = NetworkError(
                f"Request timed out after {self._config.timeout}s",
                details={"path": path, "reason": type(e).__name__},
            )
            self._log_failure(method, path, error)
            raise error from None
        except httpx.HTTPError as e:
            error = NetworkError(
                f"Connection error: {e}",
                details={"path": path, "reason": type(e).__name__},
            )
            self._log_failure(method, path, error)
            raise error from None

        self._log(
            LogLevel.DEBUG,
            f"{method} {path} -> {response.status_code}",
            {
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 1),
            },
        )

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                error = ServerError(
                    "Failed to parse API response",
                    http_status_code=response.status_code,
                    details={"path": path},
                )
                self._log_failure(method, path, error)
                raise error from None

        error = self._map_status(response, path)
        self._log_failure(method, path, error)
        raise error

    def _map_status(self, response: httpx.Response, path: str):
        status = response.status_code
        details = {"path": path}
        api_message = self._api_message(response)
        if api_message:
            details["api_message"] = api_message

        if status in (401, 403):
            return UnauthorizedError(
                "Credential rejected by the API",
                http_status_code=status,
                details=details,
            )
        if status == 404:
            return NotFoundError("Resource not found", details=details)
        if status == 429:
            return RateLimitedError(
                "Rate limited by the API",
                retry_after=self._retry_after(response),
                details=details,
            )
        if status >= 500:
            return ServerError(
                f"API server error: {status}",
                http_status_code=status,
                details=details,
            )
        return ServerError(
            f"Unexpected HTTP status: {status}",
            http_status_code=status,
            details=details,
        )

    @staticmethod
    def _api_message(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return None

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "retry_after" in body:
            try:
                return float(body["retry_after"])
            except (TypeError, ValueError):
                pass
        header = response.headers.get("Retry-After")
        if header is not None:
            try:
                return float(header)
            except ValueError:
                return None
        return None

    # Operations

    async def get_current_user(self, credential: Optional[str]) -> User:
        data = await self._request("GET", "/users/@me", credential)
        return self._parse(lambda: User.from_api(data), "/users/@me")

    async def list_guilds(self, credential: Optional[str]) -> list[dict]:
        data = await self._request("GET", "/users/@me/guilds", credential)
        return self._expect_list(data, "/users/@me/guilds")

    async def list_channels(self, guild_id: str, credential: Optional[str]) -> list[dict]:
        guild_id = _require(guild_id, "guild_id")
        path = f"/guilds/{guild_id}/channels"
        data = await self._request("GET", path, credential)
        return self._expect_list(data, path)

    async def list_messages(
        self,
        channel_id: str,
        credential: Optional[str],
        limit: Optional[int] = None,
    ) -> list[Message]:
        """Fetch one page of messages, newest first as the API returns them."""
        channel_id = _require(channel_id, "channel_id")
        if limit is None:
            limit = self._config.message_limit
        if not isinstance(limit, int) or not 1 <= limit <= MAX_MESSAGE_LIMIT:
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_MESSAGE_LIMIT}",
                details={"limit": limit},
            )
        path = f"/channels/{channel_id}/messages"
        data = await self._request("GET", path, credential, params={"limit": limit})
        return self._parse(
            lambda: [Message.from_api(m) for m in self._expect_list(data, path)],
            path,
        )

    async def send_message(
        self,
        channel_id: str,
        content: str,
        credential: Optional[str],
    ) -> Message:
        channel_id = _require(channel_id, "channel_id")
        if content is None or not content.strip():
            raise InvalidInputError("Message content is required", details={"field": "content"})
        path = f"/channels/{channel_id}/messages"
        data = await self._request("POST", path, credential, json_body={"content": content})
        return self._parse(lambda: Message.from_api(data), path)

    async def list_voice_regions(self, credential: Optional[str]) -> list[VoiceRegion]:
        data = await self._request("GET", "/voice/regions", credential)
        return self._parse(
            lambda: [VoiceRegion.from_api(r) for r in self._expect_list(data, "/voice/regions")],
            "/voice/regions",
        )

    async def join_voice_channel(
        self,
        guild_id: str,
        channel_id: str,
        user_id: str,
        credential: Optional[str],
    ) -> Optional[dict]:
        guild_id = _require(guild_id, "guild_id")
        channel_id = _require(channel_id, "channel_id")
        user_id = _require(user_id, "user_id")
        path = f"/guilds/{guild_id}/members/{user_id}"
        return await self._request(
            "PATCH", path, credential, json_body={"channel_id": channel_id}
        )

    def _expect_list(self, data: Any, path: str) -> list:
        if not isinstance(data, list):
            raise ServerError("Expected a list in API response", details={"path": path})
        return data

    def _parse(self, build, path: str):
        try:
            return build()
        except (KeyError, TypeError, AttributeError) as e:
            raise ServerError(
                f"Malformed API payload: {e}",
                details={"path": path},
            ) from None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "DiscordAPIGateway", message, data)

    def _log_failure(self, method: str, path: str, error) -> None:
        if self._logger:
            self._logger.log(
                LogLevel.WARN,
                "DiscordAPIGateway",
                f"{method} {path} failed: {error.code}",
                {
                    "error_code": error.code,
                    "http_status_code": getattr(error, "http_status_code", None),
                },
            )


class StoredCredentialGateway:
    """
    Gateway adapter that resolves the credential from the Credential Store.

    Every call reads the store at call time, so a logout between two calls
    makes the second one fail with MissingCredentialError.
    """

    def __init__(self, gateway: DiscordAPIGateway, credential_store: CredentialStore) -> None:
        self._gateway = gateway
        self._store = credential_store

    @property
    def gateway(self) -> DiscordAPIGateway:
        return self._gateway

    def _credential(self) -> str:
        credential = self._store.get()
        if credential is None:
            raise MissingCredentialError("Authentication required")
        return credential

    async def get_current_user(self) -> User:
        return await self._gateway.get_current_user(self._credential())

    async def list_guilds(self) -> list[dict]:
        return await self._gateway.list_guilds(self._credential())

    async def list_channels(self, guild_id: str) -> list[dict]:
        _require(guild_id, "guild_id")
        return await self._gateway.list_channels(guild_id, self._credential())

    async def list_messages(self, channel_id: str, limit: Optional[int] = None) -> list[Message]:
        _require(channel_id, "channel_id")
        return await self._gateway.list_messages(channel_id, self._credential(), limit=limit)

    async def send_message(self, channel_id: str, content: str) -> Message:
        _require(channel_id, "channel_id")
        return await self._gateway.send_message(channel_id, content, self._credential())

    async def list_voice_regions(self) -> list[VoiceRegion]:
        return await self._gateway.list_voice_regions(self._credential())

    async def join_voice_channel(self, guild_id: str, channel_id: str, user_id: str) -> Optional[dict]:
        return await self._gateway.join_voice_channel(
            guild_id, channel_id, user_id, self._credential()
        )
