"""SQLite connection and transaction helpers.

Connections are opened in autocommit mode (``isolation_level=None``) so that
transaction boundaries are always explicit: ``transaction()`` issues
``BEGIN IMMEDIATE`` / ``COMMIT`` / ``ROLLBACK`` itself, and falls back to a
savepoint when the connection is already inside a transaction. That lets a
reorganization primitive run on its own or nested inside a schema upgrade
with the same all-or-nothing guarantee.

Usage::

    conn = connect(path)
    with transaction(conn):
        conn.execute("INSERT INTO system (name, value) VALUES (?, ?)", ("a", "1"))
"""

from __future__ import annotations

import itertools
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_savepoint_ids = itertools.count(1)


def connect(path: Path | str, *, busy_timeout: float = 5.0) -> sqlite3.Connection:
    """Open a store file in autocommit mode, creating parent directories."""
    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(
        str(path),
        timeout=busy_timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block atomically; roll back everything on any exception."""
    if conn.in_transaction:
        name = f"sp_{next(_savepoint_ids)}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
                conn.execute(f"RELEASE SAVEPOINT {name}")
            raise
        conn.execute(f"RELEASE SAVEPOINT {name}")
        return

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def get_user_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def set_user_version(conn: sqlite3.Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    conn.execute(f"PRAGMA user_version = {int(version)}")


__all__ = ["connect", "transaction", "get_user_version", "set_user_version"]
