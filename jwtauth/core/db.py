"""SQLite unit-of-work for credential store operations."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def sqlite_transaction(path: str) -> Iterator[sqlite3.Connection]:
    """Yield a fresh connection; commit on exit, roll back on error, always close.

    Foreign keys are enforced on every connection.
    """
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA foreign_keys=ON")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
