"""Shared fixtures for auth service tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from jwtauth.auth.directory import AccountDirectory
from jwtauth.auth.gate import AuthenticationGate
from jwtauth.auth.refresh_tokens import RefreshTokenManager
from jwtauth.auth.repository import InMemoryCredentialStore
from jwtauth.core.config import Settings
from jwtauth.core.tokens import AccessTokenCodec
from jwtauth.main import create_app

TEST_SECRET = "test-secret-that-is-at-least-32-bytes-long"
ACCESS_TTL = 60
REFRESH_TTL = 3600


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 2, 14, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def register_payload() -> dict[str, str]:
    """Default register/login payload used by API tests."""
    return {"username": "alice", "password": "pw1"}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        jwtauth_jwt_secret=TEST_SECRET,
        jwtauth_access_token_expire_seconds=ACCESS_TTL,
        jwtauth_refresh_token_expire_seconds=REFRESH_TTL,
        jwtauth_sqlite_path=str(tmp_path / "auth.sqlite3"),
        jwtauth_log_json=False,
        jwtauth_log_level="WARNING",
    )


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def codec(clock: FakeClock) -> AccessTokenCodec:
    return AccessTokenCodec(
        signing_key=TEST_SECRET.encode("utf-8"),
        expires_in_seconds=ACCESS_TTL,
        clock=clock,
    )


@pytest.fixture
def directory(store: InMemoryCredentialStore, codec: AccessTokenCodec, clock: FakeClock) -> AccountDirectory:
    return AccountDirectory(store, codec, clock=clock)


@pytest.fixture
def refresh_manager(
    store: InMemoryCredentialStore,
    codec: AccessTokenCodec,
    directory: AccountDirectory,
    clock: FakeClock,
) -> RefreshTokenManager:
    return RefreshTokenManager(
        store,
        codec,
        directory,
        expires_in_seconds=REFRESH_TTL,
        clock=clock,
    )


@pytest.fixture
def gate(codec: AccessTokenCodec, directory: AccountDirectory, clock: FakeClock) -> AuthenticationGate:
    return AuthenticationGate(codec, directory, clock=clock)


@pytest.fixture
def client(settings: Settings, clock: FakeClock) -> Iterator[TestClient]:
    """HTTP client over a fresh app backed by a per-test SQLite file."""
    with TestClient(create_app(settings, clock=clock)) as test_client:
        yield test_client
