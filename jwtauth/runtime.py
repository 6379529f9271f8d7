"""Wiring of the auth components for one application instance."""

from __future__ import annotations

from dataclasses import dataclass

from jwtauth.auth.directory import AccountDirectory
from jwtauth.auth.gate import AuthenticationGate
from jwtauth.auth.refresh_tokens import RefreshTokenManager
from jwtauth.auth.repository import CredentialStore
from jwtauth.auth.repository import SqliteCredentialStore
from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.config import Settings
from jwtauth.core.tokens import AccessTokenCodec


@dataclass
class AuthRuntime:
    settings: Settings
    store: CredentialStore
    codec: AccessTokenCodec
    directory: AccountDirectory
    refresh_tokens: RefreshTokenManager
    gate: AuthenticationGate


def build_runtime(
    settings: Settings,
    *,
    clock: Clock = utc_now,
    store: CredentialStore | None = None,
) -> AuthRuntime:
    """Derive the signing key once and build every component around one store."""
    if store is None:
        sqlite_store = SqliteCredentialStore(settings.jwtauth_sqlite_path)
        sqlite_store.init_schema()
        store = sqlite_store

    codec = AccessTokenCodec(
        signing_key=settings.signing_key(),
        expires_in_seconds=settings.jwtauth_access_token_expire_seconds,
        clock=clock,
    )
    directory = AccountDirectory(store, codec, clock=clock)
    refresh_tokens = RefreshTokenManager(
        store,
        codec,
        directory,
        expires_in_seconds=settings.jwtauth_refresh_token_expire_seconds,
        rotation=settings.jwtauth_refresh_token_rotation,
        clock=clock,
    )
    return AuthRuntime(
        settings=settings,
        store=store,
        codec=codec,
        directory=directory,
        refresh_tokens=refresh_tokens,
        gate=AuthenticationGate(codec, directory, clock=clock),
    )
