from __future__ import annotations

"""Functional test bootstrap for the Response CMS.

Builds the app through `create_app` with explicitly injected collaborators:
an in-memory sheet backend, a controllable clock, a bcrypt-backed credential
store and a token service. No network access and no environment lookups.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from response_cms.config import AppConfig, AuthConfig, DeliveryConfig, ServerConfig, SheetsConfig
from response_cms.logic import events
from response_cms.logic.credentials import InMemoryCredentialStore, OperatorAccount, hash_password
from response_cms.logic.inmemory_backend import InMemoryBackend
from response_cms.logic.repository_responses import ResponseStore
from response_cms.logic.tokens import TokenService
from response_cms.main import create_app
from response_cms.models.auth import OperatorIdentity

TEST_JWT_SECRET = "functional-test-secret"
TEST_API_KEY = "functional-test-delivery-key"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


class FakeClock:
    """Deterministic clock; `advance` moves time forward by whole seconds."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)

    def __call__(self) -> datetime:
        return self.now


def make_config(*, environment: str = "development", api_key: str = TEST_API_KEY) -> AppConfig:
    return AppConfig(
        server=ServerConfig(environment=environment, cors_origins=["http://localhost:3000"]),
        auth=AuthConfig(
            admin_username=ADMIN_USERNAME,
            admin_password=ADMIN_PASSWORD,
            jwt_secret=TEST_JWT_SECRET,
            jwt_expires_in=3600,
        ),
        delivery=DeliveryConfig(api_key=api_key),
        sheets=SheetsConfig(),
    )


@pytest.fixture(autouse=True)
def clear_event_buffer():
    events.get_buffered_events(clear=True)
    yield
    events.get_buffered_events(clear=True)


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend: InMemoryBackend, clock: FakeClock) -> ResponseStore:
    return ResponseStore(backend, clock=clock)


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    # Minimum bcrypt cost keeps the suite fast
    account = OperatorAccount(
        id=1,
        username=ADMIN_USERNAME,
        password_hash=hash_password(ADMIN_PASSWORD, rounds=4),
        role="admin",
    )
    return InMemoryCredentialStore([account])


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_JWT_SECRET, expires_in=3600)


@pytest.fixture
def app(config, store, credentials, tokens):
    return create_app(config, store=store, credentials=credentials, tokens=tokens)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def operator() -> OperatorIdentity:
    return OperatorIdentity(id=1, username=ADMIN_USERNAME, role="admin")


@pytest.fixture
def auth_headers(tokens: TokenService, operator: OperatorIdentity) -> Dict[str, str]:
    return {"Authorization": f"Bearer {tokens.issue(operator)}"}


@pytest.fixture
def api_key_headers() -> Dict[str, str]:
    return {"X-API-Key": TEST_API_KEY}


@pytest.fixture
def seeded_backend() -> InMemoryBackend:
    return InMemoryBackend(
        [
            ["key", "response_text", "notes", "last_updated"],
            ["greeting_welcome", "Welcome aboard!", "shown on first contact", "2024-01-01 10:00:00"],
            ["farewell", "Say HI to the team for us", "", "2024-01-02 10:00:00"],
            ["pricing", "Plans start at $10", "Chinese market variant pending", "2024-01-03 10:00:00"],
            ["opening_hours", "We are open 9-5", "", "2024-01-04 10:00:00"],
            ["thanks", "You're welcome", "", "2024-01-05 10:00:00"],
        ]
    )
