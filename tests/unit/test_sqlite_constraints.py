"""SQLite credential store contract tests."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from pathlib import Path

import pytest

from jwtauth.auth.repository import SqliteCredentialStore
from jwtauth.core.db import sqlite_transaction

NOW = datetime(2026, 2, 14, 0, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SqliteCredentialStore:
    store = SqliteCredentialStore(str(tmp_path / "store.sqlite3"))
    store.init_schema()
    return store


def test_schema_init_is_idempotent(sqlite_store: SqliteCredentialStore) -> None:
    sqlite_store.init_schema()


def test_orphan_refresh_token_is_rejected(sqlite_store: SqliteCredentialStore) -> None:
    """Input: refresh token for a missing account -> Output: FK integrity error."""
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.save_refresh_token(
            account_id=999,
            token_hash="hash-1",
            expiry_date=NOW + timedelta(days=1),
            created_at=NOW,
        )


def test_duplicate_username_is_rejected(sqlite_store: SqliteCredentialStore) -> None:
    """Input: same username inserted twice -> Output: integrity error, one row."""
    sqlite_store.save_account(username="alice", password_hash="h", created_at=NOW)

    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.save_account(username="alice", password_hash="h2", created_at=NOW)

    with sqlite_transaction(sqlite_store.sqlite_path) as conn:
        (count,) = conn.execute("SELECT COUNT(*) FROM accounts").fetchone()
    assert count == 1


def test_account_roundtrip(sqlite_store: SqliteCredentialStore) -> None:
    """Input: saved account -> Output: same values by username and by id."""
    saved = sqlite_store.save_account(username="alice", password_hash="h", created_at=NOW)

    assert sqlite_store.find_account_by_username("alice") == saved
    assert sqlite_store.find_account_by_id(saved.id) == saved
    assert sqlite_store.find_account_by_username("bob") is None
    assert sqlite_store.find_account_by_id(saved.id + 1) is None


def test_set_account_enabled(sqlite_store: SqliteCredentialStore) -> None:
    saved = sqlite_store.save_account(username="alice", password_hash="h", created_at=NOW)

    sqlite_store.set_account_enabled(saved.id, False)

    account = sqlite_store.find_account_by_id(saved.id)
    assert account is not None
    assert account.enabled is False


def test_refresh_token_rows(sqlite_store: SqliteCredentialStore) -> None:
    """Input: tokens for two accounts -> Output: lookup by digest, delete by id and by account."""
    alice = sqlite_store.save_account(username="alice", password_hash="h", created_at=NOW)
    bob = sqlite_store.save_account(username="bob", password_hash="h", created_at=NOW)
    expiry = NOW + timedelta(days=7)
    first = sqlite_store.save_refresh_token(
        account_id=alice.id, token_hash="a1", expiry_date=expiry, created_at=NOW
    )
    sqlite_store.save_refresh_token(account_id=alice.id, token_hash="a2", expiry_date=expiry, created_at=NOW)
    sqlite_store.save_refresh_token(account_id=bob.id, token_hash="b1", expiry_date=expiry, created_at=NOW)

    assert sqlite_store.find_refresh_token("a1") == first
    assert sqlite_store.delete_refresh_token(first.id) is True
    assert sqlite_store.delete_refresh_token(first.id) is False
    assert sqlite_store.delete_refresh_tokens_by_account_id(alice.id) == 1
    assert sqlite_store.find_refresh_token("a2") is None
    assert sqlite_store.find_refresh_token("b1") is not None


def test_duplicate_token_hash_is_rejected(sqlite_store: SqliteCredentialStore) -> None:
    alice = sqlite_store.save_account(username="alice", password_hash="h", created_at=NOW)
    sqlite_store.save_refresh_token(account_id=alice.id, token_hash="t", expiry_date=NOW, created_at=NOW)

    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.save_refresh_token(account_id=alice.id, token_hash="t", expiry_date=NOW, created_at=NOW)


def test_transaction_rolls_back_on_error(sqlite_store: SqliteCredentialStore) -> None:
    """Input: insert then failure inside one transaction -> Output: insert not persisted."""
    with pytest.raises(RuntimeError):
        with sqlite_transaction(sqlite_store.sqlite_path) as conn:
            conn.execute(
                "INSERT INTO accounts (username, password_hash, enabled, created_at) VALUES (?, ?, 1, ?)",
                ("alice", "h", "2026-02-14T00:00:00Z"),
            )
            raise RuntimeError("abort")

    assert sqlite_store.find_account_by_username("alice") is None


def test_transaction_enforces_foreign_keys(sqlite_store: SqliteCredentialStore) -> None:
    with sqlite_transaction(sqlite_store.sqlite_path) as conn:
        (enabled,) = conn.execute("PRAGMA foreign_keys").fetchone()

    assert enabled == 1
