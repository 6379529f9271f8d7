"""Credential store: account and refresh-token rows behind find/save/delete.

Every operation is a single atomic statement (or one short transaction); the
core never holds a lock or connection across calls.
"""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from dataclasses import replace
from datetime import datetime
from typing import Protocol

from jwtauth.auth.schema import init_auth_schema
from jwtauth.core.clock import from_utc_iso
from jwtauth.core.clock import to_utc_iso
from jwtauth.core.db import sqlite_transaction


@dataclass(frozen=True)
class Account:
    id: int
    username: str
    password_hash: str
    enabled: bool
    created_at: datetime


@dataclass(frozen=True)
class RefreshTokenRecord:
    """Stored refresh token metadata; the token itself is kept only as a digest."""

    id: int
    account_id: int
    token_hash: str
    expiry_date: datetime
    created_at: datetime


class CredentialStore(Protocol):
    def find_account_by_username(self, username: str) -> Account | None: ...

    def find_account_by_id(self, account_id: int) -> Account | None: ...

    def save_account(
        self, *, username: str, password_hash: str, created_at: datetime, enabled: bool = True
    ) -> Account:
        """Insert an account; raises ``sqlite3.IntegrityError`` on a duplicate username."""
        ...

    def set_account_enabled(self, account_id: int, enabled: bool) -> None: ...

    def find_refresh_token(self, token_hash: str) -> RefreshTokenRecord | None: ...

    def save_refresh_token(
        self,
        *,
        account_id: int,
        token_hash: str,
        expiry_date: datetime,
        created_at: datetime,
    ) -> RefreshTokenRecord: ...

    def delete_refresh_token(self, token_id: int) -> bool: ...

    def delete_refresh_tokens_by_account_id(self, account_id: int) -> int: ...


AccountRow = tuple[int, str, str, int, str]
RefreshTokenRow = tuple[int, int, str, str, str]


def _account_from_row(row: AccountRow) -> Account:
    account_id, username, password_hash, enabled, created_at = row
    return Account(
        id=int(account_id),
        username=str(username),
        password_hash=str(password_hash),
        enabled=bool(enabled),
        created_at=from_utc_iso(str(created_at)),
    )


def _refresh_token_from_row(row: RefreshTokenRow) -> RefreshTokenRecord:
    token_id, account_id, token_hash, expiry_date, created_at = row
    return RefreshTokenRecord(
        id=int(token_id),
        account_id=int(account_id),
        token_hash=str(token_hash),
        expiry_date=from_utc_iso(str(expiry_date)),
        created_at=from_utc_iso(str(created_at)),
    )


class SqliteCredentialStore:
    """SQLite implementation; every operation runs in its own short transaction."""

    _ACCOUNT_COLUMNS = "id, username, password_hash, enabled, created_at"
    _TOKEN_COLUMNS = "id, account_id, token_hash, expiry_date, created_at"

    def __init__(self, sqlite_path: str) -> None:
        self.sqlite_path = sqlite_path

    def init_schema(self) -> None:
        init_auth_schema(self.sqlite_path)

    def _fetch_account(self, where: str, value: object) -> Account | None:
        with sqlite_transaction(self.sqlite_path) as conn:
            row = conn.execute(
                f"SELECT {self._ACCOUNT_COLUMNS} FROM accounts WHERE {where} = ?",
                (value,),
            ).fetchone()
        return None if row is None else _account_from_row(row)

    def find_account_by_username(self, username: str) -> Account | None:
        return self._fetch_account("username", username)

    def find_account_by_id(self, account_id: int) -> Account | None:
        return self._fetch_account("id", account_id)

    def save_account(
        self, *, username: str, password_hash: str, created_at: datetime, enabled: bool = True
    ) -> Account:
        with sqlite_transaction(self.sqlite_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO accounts (username, password_hash, enabled, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (username, password_hash, int(enabled), to_utc_iso(created_at)),
            )
            account_id = int(cursor.lastrowid)
        return Account(
            id=account_id,
            username=username,
            password_hash=password_hash,
            enabled=enabled,
            created_at=created_at,
        )

    def set_account_enabled(self, account_id: int, enabled: bool) -> None:
        with sqlite_transaction(self.sqlite_path) as conn:
            conn.execute(
                "UPDATE accounts SET enabled = ? WHERE id = ?",
                (int(enabled), account_id),
            )

    def find_refresh_token(self, token_hash: str) -> RefreshTokenRecord | None:
        with sqlite_transaction(self.sqlite_path) as conn:
            row = conn.execute(
                f"SELECT {self._TOKEN_COLUMNS} FROM refresh_tokens WHERE token_hash = ?",
                (token_hash,),
            ).fetchone()
        return None if row is None else _refresh_token_from_row(row)

    def save_refresh_token(
        self,
        *,
        account_id: int,
        token_hash: str,
        expiry_date: datetime,
        created_at: datetime,
    ) -> RefreshTokenRecord:
        with sqlite_transaction(self.sqlite_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO refresh_tokens (account_id, token_hash, expiry_date, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (account_id, token_hash, to_utc_iso(expiry_date), to_utc_iso(created_at)),
            )
            token_id = int(cursor.lastrowid)
        return RefreshTokenRecord(
            id=token_id,
            account_id=account_id,
            token_hash=token_hash,
            expiry_date=expiry_date,
            created_at=created_at,
        )

    def delete_refresh_token(self, token_id: int) -> bool:
        with sqlite_transaction(self.sqlite_path) as conn:
            cursor = conn.execute("DELETE FROM refresh_tokens WHERE id = ?", (token_id,))
            deleted = cursor.rowcount > 0
        return deleted

    def delete_refresh_tokens_by_account_id(self, account_id: int) -> int:
        with sqlite_transaction(self.sqlite_path) as conn:
            cursor = conn.execute(
                "DELETE FROM refresh_tokens WHERE account_id = ?",
                (account_id,),
            )
            deleted = int(cursor.rowcount)
        return deleted


class InMemoryCredentialStore:
    """Dict-backed store with the same contract, guarded by one lock."""

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._refresh_tokens: dict[str, RefreshTokenRecord] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def _next_id(self) -> int:
        self._seq += 1
        return self._seq

    def find_account_by_username(self, username: str) -> Account | None:
        with self._lock:
            for account in self._accounts.values():
                if account.username == username:
                    return account
            return None

    def find_account_by_id(self, account_id: int) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def save_account(
        self, *, username: str, password_hash: str, created_at: datetime, enabled: bool = True
    ) -> Account:
        with self._lock:
            if any(a.username == username for a in self._accounts.values()):
                raise sqlite3.IntegrityError("UNIQUE constraint failed: accounts.username")
            account = Account(
                id=self._next_id(),
                username=username,
                password_hash=password_hash,
                enabled=enabled,
                created_at=created_at,
            )
            self._accounts[account.id] = account
            return account

    def set_account_enabled(self, account_id: int, enabled: bool) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is not None:
                self._accounts[account_id] = replace(account, enabled=enabled)

    def find_refresh_token(self, token_hash: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._refresh_tokens.get(token_hash)

    def save_refresh_token(
        self,
        *,
        account_id: int,
        token_hash: str,
        expiry_date: datetime,
        created_at: datetime,
    ) -> RefreshTokenRecord:
        with self._lock:
            if account_id not in self._accounts:
                raise sqlite3.IntegrityError("FOREIGN KEY constraint failed")
            if token_hash in self._refresh_tokens:
                raise sqlite3.IntegrityError("UNIQUE constraint failed: refresh_tokens.token_hash")
            record = RefreshTokenRecord(
                id=self._next_id(),
                account_id=account_id,
                token_hash=token_hash,
                expiry_date=expiry_date,
                created_at=created_at,
            )
            self._refresh_tokens[token_hash] = record
            return record

    def delete_refresh_token(self, token_id: int) -> bool:
        with self._lock:
            for token_hash, record in self._refresh_tokens.items():
                if record.id == token_id:
                    del self._refresh_tokens[token_hash]
                    return True
            return False

    def delete_refresh_tokens_by_account_id(self, account_id: int) -> int:
        with self._lock:
            doomed = [h for h, r in self._refresh_tokens.items() if r.account_id == account_id]
            for token_hash in doomed:
                del self._refresh_tokens[token_hash]
            return len(doomed)

    def refresh_tokens_for_account(self, account_id: int) -> list[RefreshTokenRecord]:
        with self._lock:
            return [r for r in self._refresh_tokens.values() if r.account_id == account_id]
