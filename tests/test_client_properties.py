"""
End-to-end tests for ChatClient over a mocked Discord API.
"""

import asyncio
import json

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from discord_web_client.client import ChatClient
from discord_web_client.config import ApiConfig, ClientConfig
from discord_web_client.credential_store import InMemoryStorage
from discord_web_client.enums import SessionStatus


def run_async(coro):
    """Helper to run async code in tests."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class FakeDiscordServer:
    """A tiny in-memory Discord with one user, one guild and three channels."""

    def __init__(self, token: str = "tok1", history: int = 2):
        self.token = token
        self.messages = {
            "c1": [
                {
                    "id": f"m{i}",
                    "author": {"id": "u2", "username": "Bob"},
                    "content": f"hello {i}",
                    "timestamp": f"2024-01-01T00:00:0{i}+00:00",
                    "channel_id": "c1",
                }
                for i in range(history, 0, -1)
            ],
        }
        self.voice_state: dict[str, str] = {}
        self.requests: list[tuple[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.replace("/api/v10", "")
        self.requests.append((request.method, path))
        if request.headers.get("Authorization") != self.token:
            return httpx.Response(401, json={"message": "401: Unauthorized", "code": 0})

        if path == "/users/@me":
            return httpx.Response(200, json={"id": "u1", "username": "Alice", "discriminator": "0"})
        if path == "/users/@me/guilds":
            return httpx.Response(200, json=[{"id": "g1", "name": "Home", "icon": None}])
        if path == "/guilds/g1/channels":
            return httpx.Response(200, json=[
                {"id": "c1", "name": "general", "type": 0},
                {"id": "c2", "name": "Lounge", "type": 2},
                {"id": "c3", "name": "Info", "type": 4},
            ])
        if path == "/channels/c1/messages" and request.method == "GET":
            limit = int(request.url.params.get("limit", "50"))
            return httpx.Response(200, json=self.messages["c1"][:limit])
        if path == "/channels/c1/messages" and request.method == "POST":
            body = json.loads(request.content)
            message = {
                "id": f"m{len(self.messages['c1']) + 1}",
                "author": {"id": "u1", "username": "Alice"},
                "content": body["content"],
                "timestamp": "2024-01-01T00:01:00+00:00",
                "channel_id": "c1",
            }
            self.messages["c1"].insert(0, message)
            return httpx.Response(200, json=message)
        if path == "/guilds/g1/members/u1" and request.method == "PATCH":
            self.voice_state["u1"] = json.loads(request.content)["channel_id"]
            return httpx.Response(204)
        if path == "/voice/regions":
            return httpx.Response(200, json=[
                {"id": "rotterdam", "name": "Rotterdam", "optimal": True},
            ])
        return httpx.Response(404, json={"message": "Unknown", "code": 10003})


def make_client(server: FakeDiscordServer, storage: InMemoryStorage, limit: int = 50) -> ChatClient:
    config = ClientConfig(api=ApiConfig(base_url="https://discord.test/api/v10", message_limit=limit))
    return ChatClient(config=config, storage=storage, transport=httpx.MockTransport(server))


class TestBrowseAndPost:
    """The full login, browse and post flow."""

    def test_concrete_scenario(self) -> None:
        server = FakeDiscordServer()
        storage = InMemoryStorage({"discord_token": "tok1"})

        async def scenario():
            async with make_client(server, storage) as client:
                state = await client.start()
                assert state.status is SessionStatus.AUTHENTICATED
                assert client.user.id == "u1"
                assert [g.id for g in client.guilds] == ["g1"]

                await client.select_guild("g1")
                assert [(c.id, c.kind.value) for c in client.channels] == [
                    ("c1", "text"),
                    ("c2", "voice"),
                ]

                await client.select_channel("c1")
                assert [m.id for m in client.messages] == ["m1", "m2"]

                sent = await client.send("hi there")
                assert sent.author_name == "Alice"
                assert [m.id for m in client.messages] == ["m1", "m2", "m3"]
                assert client.draft == ""

                await client.select_channel("c2")
                assert client.messages == []
                assert await client.join_voice("c2") is True

                regions = await client.voice_regions()
                assert [r.id for r in regions] == ["rotterdam"]
                assert client.error is None

        run_async(scenario())

        assert server.voice_state == {"u1": "c2"}
        assert ("GET", "/channels/c2/messages") not in server.requests

    @given(limit=st.integers(min_value=1, max_value=5))
    @settings(max_examples=10)
    def test_message_limit_applied(self, limit: int) -> None:
        server = FakeDiscordServer(history=8)
        storage = InMemoryStorage({"discord_token": "tok1"})

        async def scenario():
            async with make_client(server, storage, limit=limit) as client:
                await client.start()
                await client.select_guild("g1")
                await client.select_channel("c1")
                return client.messages

        messages = run_async(scenario())
        assert len(messages) == limit

    def test_token_login(self) -> None:
        server = FakeDiscordServer()
        storage = InMemoryStorage()

        async def scenario():
            async with make_client(server, storage) as client:
                assert (await client.start()).status is SessionStatus.UNAUTHENTICATED
                return await client.login("tok1")

        state = run_async(scenario())

        assert state.is_authenticated
        assert storage.get_item("discord_token") == "tok1"

    def test_stale_token_cleared_on_start(self) -> None:
        server = FakeDiscordServer(token="fresh")
        storage = InMemoryStorage({"discord_token": "expired"})

        async def scenario():
            async with make_client(server, storage) as client:
                return await client.start()

        state = run_async(scenario())

        assert state.status is SessionStatus.UNAUTHENTICATED
        assert storage.get_item("discord_token") is None


class TestLogout:
    """Logout leaves nothing behind."""

    def test_logout_clears_everything(self) -> None:
        server = FakeDiscordServer()
        storage = InMemoryStorage({"discord_token": "tok1"})

        async def scenario():
            async with make_client(server, storage) as client:
                await client.start()
                await client.select_guild("g1")
                await client.select_channel("c1")
                client.draft = "unsent"
                await client.select_guild("g-missing")
                assert client.error is not None

                client.logout()
                return client

        client = run_async(scenario())

        assert storage.get_item("discord_token") is None
        assert client.session.status is SessionStatus.UNAUTHENTICATED
        assert client.user is None
        assert client.guilds == []
        assert client.channels == []
        assert client.messages == []
        assert client.selection.active_guild_id is None
        assert client.selection.active_channel_id is None
        assert client.draft == ""
        assert client.error is None

    def test_error_dismiss(self) -> None:
        server = FakeDiscordServer()
        storage = InMemoryStorage({"discord_token": "tok1"})

        async def scenario():
            async with make_client(server, storage) as client:
                await client.start()
                await client.select_guild("g-missing")
                assert client.error.code == "not_found"
                assert client.error.operation == "list_channels"
                client.dismiss_error()
                return client.error

        assert run_async(scenario()) is None


class TestCredentialChange:
    """Nothing loaded for an earlier credential outlives it."""

    def test_second_login_starts_clean(self) -> None:
        server = FakeDiscordServer(token="tok1")
        storage = InMemoryStorage()

        async def scenario():
            async with make_client(server, storage) as client:
                await client.login("tok1")
                await client.select_guild("g1")
                await client.select_channel("c1")
                client.draft = "half typed"
                assert client.messages

                server.token = "tok2"
                state = await client.login("tok2")
                return client, state

        client, state = run_async(scenario())

        assert state.is_authenticated
        assert storage.get_item("discord_token") == "tok2"
        assert client.selection.active_guild_id is None
        assert client.selection.active_channel_id is None
        assert client.channels == []
        assert client.messages == []
        assert client.draft == ""
        assert client.error is None

    def test_failed_restart_clears_selection(self) -> None:
        server = FakeDiscordServer(token="tok1")
        storage = InMemoryStorage({"discord_token": "tok1"})

        async def scenario():
            async with make_client(server, storage) as client:
                await client.start()
                await client.select_guild("g1")
                await client.select_channel("c1")

                server.token = "revoked"
                state = await client.start()
                return client, state

        client, state = run_async(scenario())

        assert state.status is SessionStatus.UNAUTHENTICATED
        assert client.selection.active_guild_id is None
        assert client.channels == []
        assert client.messages == []
