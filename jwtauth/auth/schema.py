"""Schema bootstrap for credential tables."""

from __future__ import annotations

from jwtauth.core.db import sqlite_transaction


CREATE_AUTH_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS refresh_tokens (
    id INTEGER PRIMARY KEY,
    account_id INTEGER NOT NULL,
    token_hash TEXT NOT NULL UNIQUE,
    expiry_date TEXT NOT NULL,
    created_at TEXT NOT NULL,
    FOREIGN KEY (account_id) REFERENCES accounts(id)
);

CREATE INDEX IF NOT EXISTS idx_refresh_tokens_account_id ON refresh_tokens(account_id);
"""


def init_auth_schema(sqlite_path: str) -> None:
    """Ensure credential tables/indexes exist."""
    with sqlite_transaction(sqlite_path) as conn:
        conn.executescript(CREATE_AUTH_SCHEMA_SQL)
