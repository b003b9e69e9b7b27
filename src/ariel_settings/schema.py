"""
Settings store DDL.

Each namespace table stores flat name→value pairs::

    _id    INTEGER PRIMARY KEY AUTOINCREMENT
    name   TEXT UNIQUE ON CONFLICT REPLACE
    value  TEXT

The ``ON CONFLICT REPLACE`` clause gives every plain ``INSERT`` last-write-wins
semantics: writing an existing name deletes the old row and inserts the new
one, so a name never appears twice in a namespace. ``INSERT OR IGNORE``
overrides the clause and keeps the existing row, which is what default
seeding uses.

Earlier designs of the store also carried ``gservices``, ``bluetooth_devices``,
``bookmarks`` and ``favorites`` tables. They are no longer created, but a
wipe drops them so old files come out clean.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable

from ariel_settings.namespaces import Namespace

SETTINGS_TABLE_DDL = """
CREATE TABLE {table} (
    _id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE ON CONFLICT REPLACE,
    value TEXT
)
"""

SETTINGS_INDEX_DDL = "CREATE INDEX {index} ON {table} (name)"

LEGACY_TABLES = ("gservices", "bluetooth_devices", "bookmarks", "favorites")
LEGACY_INDEXES = ("gservicesIndex1", "bookmarksIndex1", "bookmarksIndex2")

WIPED_DB_REASON = "wiped_db_reason"


def create_namespace_table(conn: sqlite3.Connection, namespace: Namespace) -> None:
    conn.execute(SETTINGS_TABLE_DDL.format(table=namespace.table))
    conn.execute(SETTINGS_INDEX_DDL.format(index=namespace.index, table=namespace.table))


def create_tables(conn: sqlite3.Connection, namespaces: Iterable[Namespace]) -> None:
    """Create the tables and name indexes for ``namespaces``.

    Plain ``CREATE TABLE``: a stray table in a version-0 file is a schema
    integrity failure, not something to paper over.
    """
    for namespace in namespaces:
        create_namespace_table(conn, namespace)


def drop_all(conn: sqlite3.Connection) -> None:
    """Drop every settings and legacy table/index the store may contain."""
    for namespace in Namespace:
        conn.execute(f"DROP INDEX IF EXISTS {namespace.index}")
        conn.execute(f"DROP TABLE IF EXISTS {namespace.table}")
    for index in LEGACY_INDEXES:
        conn.execute(f"DROP INDEX IF EXISTS {index}")
    for table in LEGACY_TABLES:
        conn.execute(f"DROP TABLE IF EXISTS {table}")


def existing_tables(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    return {row[0] for row in rows}


def seed_settings(
    conn: sqlite3.Connection,
    namespace: Namespace,
    pairs: Iterable[tuple[str, str | None]],
) -> int:
    """Insert defaults without overwriting values already present."""
    cursor = conn.executemany(
        f"INSERT OR IGNORE INTO {namespace.table} (name, value) VALUES (?, ?)",
        list(pairs),
    )
    return max(cursor.rowcount, 0)


def record_wipe_reason(conn: sqlite3.Connection, reason: str) -> None:
    conn.execute(
        f"INSERT INTO {Namespace.SECURE.table} (name, value) VALUES (?, ?)",
        (WIPED_DB_REASON, reason),
    )


__all__ = [
    "SETTINGS_TABLE_DDL",
    "LEGACY_TABLES",
    "WIPED_DB_REASON",
    "create_tables",
    "drop_all",
    "existing_tables",
    "seed_settings",
    "record_wipe_reason",
]
