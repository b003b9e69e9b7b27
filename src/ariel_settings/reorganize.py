"""
Bulk moves of settings between namespaces.

Used by schema upgrade steps when a key changes namespace. Both primitives
run inside one transaction per call (a savepoint when the caller's upgrade
step already holds one): either the whole batch moves, or a failure anywhere
leaves both namespaces exactly as they were.

Prefix matching compares the first ``len(prefix)`` characters of each name
with the prefix exactly. It is a literal, case-sensitive prefix test:
``LIKE`` is avoided because it is case-insensitive for ASCII and treats
``%`` and ``_`` as wildcards, and ``_`` is common in setting names.

    prefix "lock_"   moves  lock_pattern, lock_sound
                     keeps  lockscreen, LOCK_sound, screen_lock_
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable

from ariel_settings.db import transaction
from ariel_settings.logging import get_logger
from ariel_settings.namespaces import Namespace

logger = get_logger(__name__)


def move_exact(
    conn: sqlite3.Connection,
    source: Namespace,
    dest: Namespace,
    names: Iterable[str],
    ignore_conflicts: bool = False,
) -> int:
    """Move the named settings from ``source`` to ``dest``.

    With ``ignore_conflicts`` a name already present in ``dest`` keeps its
    destination value; otherwise the moved value overwrites it. The source
    row is deleted either way. Names missing from ``source`` are skipped.

    Returns the number of source rows removed.
    """
    verb = "INSERT OR IGNORE" if ignore_conflicts else "INSERT"
    insert_sql = (
        f"{verb} INTO {dest.table} (name, value) "
        f"SELECT name, value FROM {source.table} WHERE name = ?"
    )
    delete_sql = f"DELETE FROM {source.table} WHERE name = ?"

    moved = 0
    with transaction(conn):
        for name in names:
            conn.execute(insert_sql, (name,))
            moved += conn.execute(delete_sql, (name,)).rowcount

    logger.info(
        "reorganize.moved_exact",
        source=source.value,
        dest=dest.value,
        moved=moved,
        ignore_conflicts=ignore_conflicts,
    )
    return moved


def move_prefixed(
    conn: sqlite3.Connection,
    source: Namespace,
    dest: Namespace,
    prefixes: Iterable[str],
) -> int:
    """Move every setting whose name starts with one of ``prefixes``.

    Moved values overwrite same-named destination rows. Returns the number of
    source rows removed.
    """
    match = "substr(name, 1, ?) = ?"
    insert_sql = (
        f"INSERT INTO {dest.table} (name, value) "
        f"SELECT name, value FROM {source.table} WHERE {match}"
    )
    delete_sql = f"DELETE FROM {source.table} WHERE {match}"

    moved = 0
    with transaction(conn):
        for prefix in prefixes:
            if not prefix:
                raise ValueError("empty prefix would move the whole namespace")
            params = (len(prefix), prefix)
            conn.execute(insert_sql, params)
            moved += conn.execute(delete_sql, params).rowcount

    logger.info(
        "reorganize.moved_prefixed",
        source=source.value,
        dest=dest.value,
        moved=moved,
    )
    return moved


__all__ = ["move_exact", "move_prefixed"]
