"""Account directory: registration and credential checks over the store."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from jwtauth.auth.identity import Identity
from jwtauth.auth.repository import Account
from jwtauth.auth.repository import CredentialStore
from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.logging import get_logger
from jwtauth.core.outcomes import AuthenticationError
from jwtauth.core.outcomes import AuthenticationErrorKind
from jwtauth.core.outcomes import ValidationError
from jwtauth.core.outcomes import ValidationErrorKind
from jwtauth.core.password import dummy_verify
from jwtauth.core.password import hash_password
from jwtauth.core.password import verify_password
from jwtauth.core.tokens import AccessTokenCodec
from jwtauth.core.username import canonical_username
from jwtauth.core.username import check_username

log = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    account: Account
    access_token: str


class AccountDirectory:
    def __init__(
        self,
        store: CredentialStore,
        codec: AccessTokenCodec,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.codec = codec
        self._clock = clock

    def register(self, username: str, password: str) -> Account | ValidationError:
        """Create an account unless the (normalized) username is taken."""
        normalized = check_username(username)
        if isinstance(normalized, ValidationError):
            return normalized

        if self.store.find_account_by_username(normalized) is not None:
            log.info("account_register_conflict", username=normalized)
            return ValidationError(ValidationErrorKind.ALREADY_EXISTS, "username already exists")

        try:
            account = self.store.save_account(
                username=normalized,
                password_hash=hash_password(password),
                created_at=self._clock(),
            )
        except sqlite3.IntegrityError:
            # Lost the race against a concurrent registration.
            log.info("account_register_conflict", username=normalized, backstop=True)
            return ValidationError(ValidationErrorKind.ALREADY_EXISTS, "username already exists")

        log.info("account_registered", account_id=account.id, username=account.username)
        return account

    def authenticate(self, username: str, password: str) -> Account | AuthenticationError:
        """Check credentials; the failure kind stays internal."""
        account = self.store.find_account_by_username(canonical_username(username))
        if account is None:
            dummy_verify()
            return self._reject(AuthenticationErrorKind.UNKNOWN_USER, username)
        if not verify_password(password, account.password_hash):
            return self._reject(AuthenticationErrorKind.BAD_PASSWORD, username)
        if not account.enabled:
            return self._reject(AuthenticationErrorKind.ACCOUNT_DISABLED, username)
        return account

    def login(self, username: str, password: str) -> LoginResult | AuthenticationError:
        """Authenticate and mint an access token for the account."""
        result = self.authenticate(username, password)
        if isinstance(result, AuthenticationError):
            return result
        return LoginResult(account=result, access_token=self.codec.mint(result.username))

    def find_by_username(self, username: str) -> Account | None:
        return self.store.find_account_by_username(username)

    def find_by_id(self, account_id: int) -> Account | None:
        return self.store.find_account_by_id(account_id)

    def load_identity(self, username: str) -> Identity | AuthenticationError:
        """Resolve the identity behind a token subject."""
        account = self.store.find_account_by_username(username)
        if account is None:
            return AuthenticationError(AuthenticationErrorKind.UNKNOWN_USER, "unknown user")
        if not account.enabled:
            return AuthenticationError(AuthenticationErrorKind.ACCOUNT_DISABLED, "account disabled")
        return Identity(account_id=account.id, username=account.username, authorities=frozenset())

    def _reject(self, kind: AuthenticationErrorKind, username: str) -> AuthenticationError:
        log.info("login_failed", reason=kind.value, username=username)
        return AuthenticationError(kind, "invalid username or password")
