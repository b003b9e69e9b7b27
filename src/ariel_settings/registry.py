"""
Registry of open per-identity stores.

One ``SettingsStore`` handle per identity, opened lazily on first access and
reused afterwards. Each identity has its own re-entrant lock, held for the
whole of open/close/drop/backup, so two callers can never migrate the same
store file concurrently. Different identities never contend.

Usage::

    registry = StoreRegistry(SchemaManager(defaults=defaults))
    registry.get(0).put("global", "airplane_mode_on", "0")
    registry.remove_identity(10)     # identity deleted: close + drop
    registry.close_all()
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ariel_settings.logging import get_logger, identity_context
from ariel_settings.schema_manager import SchemaManager
from ariel_settings.store import SettingsStore

logger = get_logger(__name__)


class StoreRegistry:
    """identity id → owned store handle, with explicit lifecycle."""

    def __init__(self, manager: SchemaManager | None = None) -> None:
        self.manager = manager or SchemaManager()
        self._stores: dict[int, SettingsStore] = {}
        self._locks: dict[int, threading.RLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def locked(self, identity_id: int) -> Iterator[None]:
        """Hold the identity-scoped lock."""
        with self._guard:
            lock = self._locks.setdefault(identity_id, threading.RLock())
        with lock, identity_context(identity_id):
            yield

    def get(self, identity_id: int) -> SettingsStore:
        """Return the open store for ``identity_id``, opening it if needed."""
        with self.locked(identity_id):
            store = self._stores.get(identity_id)
            if store is None or store.closed:
                store = self.manager.open(identity_id)
                self._stores[identity_id] = store
                logger.debug("store.opened", path=str(store.path))
            return store

    def is_open(self, identity_id: int) -> bool:
        store = self._stores.get(identity_id)
        return store is not None and not store.closed

    def open_identities(self) -> list[int]:
        return sorted(i for i in list(self._stores) if self.is_open(i))

    def close(self, identity_id: int) -> None:
        with self.locked(identity_id):
            self._close_locked(identity_id)

    def close_all(self) -> None:
        for identity_id in list(self._stores):
            self.close(identity_id)

    def drop(self, identity_id: int) -> None:
        """Close and delete the identity's store (factory reset)."""
        with self.locked(identity_id):
            self._close_locked(identity_id)
            self.manager.drop_store(identity_id)

    def backup(self, identity_id: int) -> Path | None:
        """Close and move the identity's store to its one-shot backup path."""
        with self.locked(identity_id):
            self._close_locked(identity_id)
            return self.manager.backup_store(identity_id)

    def remove_identity(self, identity_id: int) -> None:
        """The identity was deleted: drop its store and forget its lock."""
        self.drop(identity_id)
        with self._guard:
            self._locks.pop(identity_id, None)

    def _close_locked(self, identity_id: int) -> None:
        store = self._stores.pop(identity_id, None)
        if store is not None:
            store.close()
            logger.debug("store.closed")

    def __enter__(self) -> StoreRegistry:
        return self

    def __exit__(self, *args) -> None:
        self.close_all()


__all__ = ["StoreRegistry"]
