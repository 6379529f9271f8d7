"""POST /auth/login contract tests."""

from __future__ import annotations

import sqlite3

import pytest
from fastapi.testclient import TestClient

from jwtauth.auth.refresh_tokens import hash_refresh_token
from jwtauth.core.config import Settings
from jwtauth.main import create_app


def _refresh_token_count(settings: Settings) -> int:
    conn = sqlite3.connect(settings.jwtauth_sqlite_path)
    try:
        (count,) = conn.execute("SELECT COUNT(*) FROM refresh_tokens").fetchone()
    finally:
        conn.close()
    return int(count)


def test_login_returns_token_pair(
    client: TestClient,
    settings: Settings,
    register_payload: dict[str, str],
) -> None:
    """Contract: 200 {accessToken, refreshToken}; refresh stored only as digest."""
    client.post("/auth/register", json=register_payload)

    response = client.post("/auth/login", json=register_payload)

    assert response.status_code == 200
    payload = response.json()
    assert set(payload) == {"accessToken", "refreshToken"}
    assert payload["accessToken"].count(".") == 2

    conn = sqlite3.connect(settings.jwtauth_sqlite_path)
    try:
        (token_hash,) = conn.execute("SELECT token_hash FROM refresh_tokens").fetchone()
    finally:
        conn.close()
    assert token_hash == hash_refresh_token(payload["refreshToken"])


@pytest.mark.parametrize(
    "credentials",
    [
        {"username": "alice", "password": "wrong"},
        {"username": "nobody", "password": "pw1"},
    ],
)
def test_login_failure_is_uniform_401(
    client: TestClient,
    register_payload: dict[str, str],
    credentials: dict[str, str],
) -> None:
    """Contract: bad password and unknown user are indistinguishable."""
    client.post("/auth/register", json=register_payload)

    response = client.post("/auth/login", json=credentials)

    assert response.status_code == 401
    assert response.json() == {
        "code": "AUTH_INVALID_CREDENTIALS",
        "error": "invalid username or password",
        "detail": {},
    }


def test_login_disabled_account_is_401(client: TestClient, register_payload: dict[str, str]) -> None:
    client.post("/auth/register", json=register_payload)
    runtime = client.app.state.runtime
    account = runtime.directory.find_by_username("alice")
    runtime.store.set_account_enabled(account.id, False)

    response = client.post("/auth/login", json=register_payload)

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_INVALID_CREDENTIALS"


def test_login_twice_keeps_both_refresh_tokens(
    client: TestClient,
    settings: Settings,
    register_payload: dict[str, str],
) -> None:
    """Contract: default login does not revoke earlier refresh tokens."""
    client.post("/auth/register", json=register_payload)
    first = client.post("/auth/login", json=register_payload).json()
    second = client.post("/auth/login", json=register_payload).json()

    assert first["refreshToken"] != second["refreshToken"]
    assert _refresh_token_count(settings) == 2
    assert client.post("/auth/refreshToken", json={"refreshToken": first["refreshToken"]}).status_code == 200


def test_single_session_login_revokes_earlier_tokens(
    settings: Settings,
    clock,
    register_payload: dict[str, str],
) -> None:
    """Contract: with single-session on, a new login invalidates the previous refresh token."""
    single = settings.model_copy(update={"jwtauth_refresh_token_single_session": True})
    with TestClient(create_app(single, clock=clock)) as client:
        client.post("/auth/register", json=register_payload)
        first = client.post("/auth/login", json=register_payload).json()
        client.post("/auth/login", json=register_payload)

        response = client.post("/auth/refreshToken", json={"refreshToken": first["refreshToken"]})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REFRESH_NOT_FOUND"
    assert _refresh_token_count(single) == 1
