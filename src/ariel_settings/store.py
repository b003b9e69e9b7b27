"""
Per-identity settings store handle.

A ``SettingsStore`` wraps the open connection for one identity's store file.
It is produced by ``SchemaManager.open`` once the schema is current, and is
the normal read/write path for individual settings.

Every write is its own transaction. A lock serializes statements on the
shared connection so concurrent callers never observe a half-written row.
Writes use plain ``INSERT``: the table's ``ON CONFLICT REPLACE`` clause makes
a second write to the same name replace the first (last-write-wins).
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from ariel_settings.db import get_user_version, transaction
from ariel_settings.namespaces import Namespace, namespaces_for_identity, require_namespace


@dataclass(frozen=True)
class Setting:
    """One (namespace, name, value) triple."""

    namespace: Namespace
    name: str
    value: str | None


class SettingsStore:
    """Open store for a single identity."""

    def __init__(self, conn: sqlite3.Connection, identity_id: int, path: Path):
        self._conn = conn
        self._lock = threading.RLock()
        self.identity_id = identity_id
        self.path = path

    # -- lifecycle ---------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> SettingsStore:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"settings store for identity {self.identity_id} is closed")
        return self._conn

    @property
    def namespaces(self) -> tuple[Namespace, ...]:
        return namespaces_for_identity(self.identity_id)

    @property
    def version(self) -> int:
        with self._lock:
            return get_user_version(self.connection)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Group several writes into one atomic unit."""
        with self._lock, transaction(self.connection) as conn:
            yield conn

    # -- reads -------------------------------------------------------------

    def get(self, namespace: Namespace | str, name: str, default: str | None = None) -> str | None:
        ns = require_namespace(namespace, self.identity_id)
        with self._lock:
            row = self.connection.execute(
                f"SELECT value FROM {ns.table} WHERE name = ?", (name,)
            ).fetchone()
        if row is None or row[0] is None:
            return default
        return row[0]

    def get_int(self, namespace: Namespace | str, name: str, default: int) -> int:
        """Parse an integer setting; a missing value yields ``default``."""
        value = self.get(namespace, name)
        return int(value) if value is not None else default

    def contains(self, namespace: Namespace | str, name: str) -> bool:
        ns = require_namespace(namespace, self.identity_id)
        with self._lock:
            row = self.connection.execute(
                f"SELECT 1 FROM {ns.table} WHERE name = ?", (name,)
            ).fetchone()
        return row is not None

    def items(self, namespace: Namespace | str) -> list[Setting]:
        ns = require_namespace(namespace, self.identity_id)
        with self._lock:
            rows = self.connection.execute(
                f"SELECT name, value FROM {ns.table} ORDER BY name"
            ).fetchall()
        return [Setting(ns, row["name"], row["value"]) for row in rows]

    def count(self, namespace: Namespace | str, name: str | None = None) -> int:
        ns = require_namespace(namespace, self.identity_id)
        sql = f"SELECT COUNT(*) FROM {ns.table}"
        params: tuple = ()
        if name is not None:
            sql += " WHERE name = ?"
            params = (name,)
        with self._lock:
            return self.connection.execute(sql, params).fetchone()[0]

    # -- writes ------------------------------------------------------------

    def put(self, namespace: Namespace | str, name: str, value: str | None) -> None:
        ns = require_namespace(namespace, self.identity_id)
        with self.transaction() as conn:
            conn.execute(f"INSERT INTO {ns.table} (name, value) VALUES (?, ?)", (name, value))

    def put_many(self, namespace: Namespace | str, pairs: Iterable[tuple[str, str | None]]) -> int:
        ns = require_namespace(namespace, self.identity_id)
        rows = list(pairs)
        with self.transaction() as conn:
            conn.executemany(f"INSERT INTO {ns.table} (name, value) VALUES (?, ?)", rows)
        return len(rows)

    def delete(self, namespace: Namespace | str, name: str) -> bool:
        ns = require_namespace(namespace, self.identity_id)
        with self.transaction() as conn:
            deleted = conn.execute(f"DELETE FROM {ns.table} WHERE name = ?", (name,)).rowcount
        return deleted > 0

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"SettingsStore(identity_id={self.identity_id}, path={str(self.path)!r}, {state})"


__all__ = ["Setting", "SettingsStore"]
