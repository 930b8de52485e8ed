"""
Pytest fixtures shared across all test modules.

Every test gets its own in-memory SQLite database (StaticPool, so all
sessions share the one connection) and a mocked outbound HTTP layer: Discord,
Turnstile and the admin webhook are answered by ``FakeUpstream`` through
``httpx.MockTransport``. No network access is needed.
"""

from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.auth import SESSION_COOKIE
from app.config import Settings
from app.database import Database
from app.main import create_app
from app.services.captcha import TurnstileVerifier
from app.services.moderation import ModerationService
from app.services.session_codec import SessionUser

ADMIN_ID = "1001"
USER_ID = "2002"

DISCORD_API = "https://discord.test/api"
TURNSTILE_URL = "https://turnstile.test/siteverify"
WEBHOOK_URL = "https://discord.test/webhook"


# ---------------------------------------------------------------------------
# Fake upstream services
# ---------------------------------------------------------------------------


class FakeUpstream:
    """Answers Discord, Turnstile and webhook calls; records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.discord_user: dict = {
            "id": USER_ID,
            "username": "player",
            "global_name": "Player One",
            "avatar": "abc123",
        }
        self.token_status = 200
        self.user_status = 200
        self.captcha_success = True
        self.webhook_status = 204
        self.webhook_error: Exception | None = None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == f"{DISCORD_API}/oauth2/token":
            return httpx.Response(
                self.token_status,
                json={"access_token": "access-xyz", "token_type": "Bearer"},
            )
        if url == f"{DISCORD_API}/users/@me":
            return httpx.Response(self.user_status, json=self.discord_user)
        if url == TURNSTILE_URL:
            return httpx.Response(200, json={"success": self.captcha_success})
        if url == WEBHOOK_URL:
            if self.webhook_error is not None:
                raise self.webhook_error
            return httpx.Response(self.webhook_status)
        return httpx.Response(404)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]

    def webhook_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.calls_to(WEBHOOK_URL)]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "session_secret": "test-secret-key",
        "admin_ids": f"{ADMIN_ID}, 1002",
        "discord_client_id": "client-id",
        "discord_client_secret": "client-secret",
        "discord_redirect_uri": "http://testserver/auth/discord/callback",
        "discord_api_base": DISCORD_API,
        "turnstile_secret": "",
        "turnstile_verify_url": TURNSTILE_URL,
        "admin_webhook_url": WEBHOOK_URL,
        "admin_mention": "",
        "base_url": "https://mossai.test",
        "env_label": "test",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def client(settings: Settings, upstream: FakeUpstream):
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle))
    app = create_app(settings, http_client=http)
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Service-level fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def db():
    database = Database("sqlite+aiosqlite://")
    await database.create_all()
    yield database
    await database.dispose()


@pytest_asyncio.fixture()
async def http(upstream: FakeUpstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)) as c:
        yield c


@pytest.fixture()
def moderation(db: Database, http: httpx.AsyncClient) -> ModerationService:
    return ModerationService(db, TurnstileVerifier(http, "", TURNSTILE_URL))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def set_session_cookie(client: TestClient, token: str) -> None:
    # Same domain the cookie jar uses for cookies set by "testserver"
    client.cookies.set(SESSION_COOKIE, token, domain="testserver.local", path="/")


def login_as(client: TestClient, discord_id: str = USER_ID, username: str = "someone") -> None:
    codec = client.app.state.context.codec
    set_session_cookie(client, codec.encode(SessionUser(discord_id=discord_id, username=username)))


def submit_form(**overrides) -> dict[str, str]:
    form = {
        "server_name": "Foo",
        "url": "https://foo.example",
        "description": "A friendly server.",
        "tags": "relax, autopilot",
        "owner_name": "Bar",
        "owner_discord": "123",
        "logo_url": "",
        "tos_accept": "on",
        "cf-turnstile-response": "captcha-token",
    }
    form.update(overrides)
    return form
