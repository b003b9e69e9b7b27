"""Per-identity store locator.

The owner identity gets the unadorned store path under ``data_dir``. Every
other identity's store lives in that identity's private storage area, so it is
removed together with the identity's data. Nothing here touches the
filesystem: directory creation belongs to whoever opens the store.
"""

from __future__ import annotations

from pathlib import Path

from ariel_settings.config import StoreSettings, get_settings
from ariel_settings.namespaces import OWNER_IDENTITY

# Sidecars SQLite may leave next to a store file.
WAL_SUFFIXES = ("-wal", "-shm")


def locate(identity_id: int, settings: StoreSettings | None = None) -> Path:
    """Return the store file path for ``identity_id``."""
    settings = settings or get_settings()
    if identity_id == OWNER_IDENTITY:
        return settings.data_dir / settings.database_name
    return settings.users_dir / str(identity_id) / settings.database_name


def journal_path(store_path: Path, settings: StoreSettings | None = None) -> Path:
    settings = settings or get_settings()
    return store_path.with_name(store_path.name + settings.journal_suffix)


def backup_path(store_path: Path, settings: StoreSettings | None = None) -> Path:
    settings = settings or get_settings()
    return store_path.with_name(store_path.name + settings.backup_suffix)


def sidecar_paths(store_path: Path, settings: StoreSettings | None = None) -> list[Path]:
    """Journal and WAL files that must be deleted together with the store."""
    paths = [journal_path(store_path, settings)]
    paths.extend(store_path.with_name(store_path.name + suffix) for suffix in WAL_SUFFIXES)
    return paths


__all__ = ["locate", "journal_path", "backup_path", "sidecar_paths"]
