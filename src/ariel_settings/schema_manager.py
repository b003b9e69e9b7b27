"""
Schema manager: creation, version migration and maintenance of store files.

Manifesto:
    A settings store must never be reachable in a half-migrated state. The
    schema manager therefore performs the whole of create/upgrade/wipe, the
    default seeding and the version stamp inside one transaction. Either the
    store comes out at the target version with every table present, or the
    file is left exactly as it was and ``SchemaIntegrityError`` is raised.

Lifecycle of one store file::

    ABSENT ──open──▶ CREATING ──▶ CURRENT
                                    ▲
    (version < target) UPGRADING ───┘   (steps, then wipe-and-recreate
                                          if steps did not reach target)
    (version > target) NEWER             refused, file left untouched

Upgrade steps:
    ``steps`` maps a version to a callable that upgrades a store *from* that
    version to the next one. The step list is frozen: the store shipped its
    final key/value model at version 1 and no steps are registered by default.
    Any store the steps cannot bring to the target is wiped and recreated,
    which loses every non-default setting. That is deliberate, and it is
    recorded in ``secure.wiped_db_reason`` as ``"old/after-steps/target"`` so a
    clean-upgrade wipe can be told apart from an unexpected one.

Maintenance:
    ``drop_store`` and ``backup_store`` work on files only. Callers close any
    open handle first (``StoreRegistry`` does this under the identity lock).
    File deletion failures are logged and absorbed.

Tags:
    schema, migration, sqlite, user-version, backup, factory-reset

Doc-Types:
    - API Reference
    - Migration Guide
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path

from ariel_settings.config import StoreSettings, get_settings
from ariel_settings.db import connect, get_user_version, set_user_version, transaction
from ariel_settings.defaults import DefaultsProvider, NoDefaults
from ariel_settings.errors import (
    MigrationDataLoss,
    ResourceCleanupWarning,
    SchemaIntegrityError,
)
from ariel_settings.locator import backup_path, locate, sidecar_paths
from ariel_settings.logging import get_logger
from ariel_settings.namespaces import namespaces_for_identity
from ariel_settings.schema import create_tables, drop_all, record_wipe_reason, seed_settings
from ariel_settings.store import SettingsStore

logger = get_logger(__name__)

UpgradeStep = Callable[[sqlite3.Connection, int], None]
"""``step(conn, identity_id)``; runs inside the open transaction."""


class StoreState(str, Enum):
    """Observed state of a store file relative to the target version."""

    ABSENT = "absent"
    CREATING = "creating"
    UPGRADING = "upgrading"
    CURRENT = "current"
    NEWER = "newer"  # written by a later release; open() refuses it


class SchemaManager:
    """Owns CREATE, UPGRADE and WIPE-AND-RECREATE for per-identity stores.

    Parameters
    ----------
    settings
        Store configuration; defaults to ``get_settings()``.
    defaults
        Provider of seed values for freshly created namespace tables.
    target_version
        Version every opened store is brought to; defaults to
        ``settings.schema_version``.
    steps
        Upgrade steps keyed by the version they upgrade from.

    Example::

        manager = SchemaManager(defaults=TomlDefaults("defaults.toml"))
        store = manager.open(0)
        store.get("system", "screen_off_timeout")
    """

    def __init__(
        self,
        settings: StoreSettings | None = None,
        defaults: DefaultsProvider | None = None,
        *,
        target_version: int | None = None,
        steps: Mapping[int, UpgradeStep] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.defaults = defaults or NoDefaults()
        if target_version is None:
            target_version = self.settings.schema_version
        if target_version < 1:
            raise ValueError(f"target_version must be at least 1, got {target_version}")
        self.target_version = target_version
        self._steps = dict(steps or {})

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def path_for(self, identity_id: int) -> Path:
        return locate(identity_id, self.settings)

    def state(self, identity_id: int) -> StoreState:
        """Inspect the store file without migrating it."""
        path = self.path_for(identity_id)
        if not path.exists():
            return StoreState.ABSENT
        conn = sqlite3.connect(str(path))
        try:
            version = get_user_version(conn)
        finally:
            conn.close()
        if version == 0:
            return StoreState.ABSENT
        if version < self.target_version:
            return StoreState.UPGRADING
        if version > self.target_version:
            return StoreState.NEWER
        return StoreState.CURRENT

    def open(self, identity_id: int) -> SettingsStore:
        """Open the identity's store, creating or migrating it first.

        Raises ``SchemaIntegrityError`` if the schema cannot be brought to the
        target version; nothing is committed in that case.
        """
        path = self.path_for(identity_id)
        try:
            conn = connect(path, busy_timeout=self.settings.busy_timeout)
        except (sqlite3.Error, OSError) as exc:
            raise SchemaIntegrityError(
                "Cannot open settings store", cause=exc
            ).with_context(identity_id=identity_id, path=str(path)) from exc

        try:
            self._bring_to_target(conn, identity_id)
        except SchemaIntegrityError:
            conn.close()
            raise
        except sqlite3.Error as exc:
            conn.close()
            raise SchemaIntegrityError(
                f"Schema migration failed: {exc}", cause=exc
            ).with_context(identity_id=identity_id, path=str(path)) from exc
        except BaseException:
            conn.close()
            raise

        return SettingsStore(conn, identity_id, path)

    def upgrade(
        self,
        conn: sqlite3.Connection,
        identity_id: int,
        from_version: int,
        to_version: int,
    ) -> int:
        """Run upgrade steps from ``from_version`` towards ``to_version``.

        Returns the version the steps reached. If that is not ``to_version``
        the store is wiped and recreated.
        """
        logger.warning(
            "schema.upgrading",
            identity_id=identity_id,
            from_version=from_version,
            to_version=to_version,
        )

        upgrade_version = from_version
        while upgrade_version < to_version:
            step = self._steps.get(upgrade_version)
            if step is None:
                break
            step(conn, identity_id)
            upgrade_version += 1
            logger.info("schema.step_applied", identity_id=identity_id, version=upgrade_version)

        if upgrade_version != to_version:
            self.wipe_and_recreate(conn, identity_id, from_version, upgrade_version, to_version)
        return upgrade_version

    def wipe_and_recreate(
        self,
        conn: sqlite3.Connection,
        identity_id: int,
        old_version: int,
        upgrade_version: int,
        current_version: int,
    ) -> None:
        """Drop every table, recreate the schema and record why."""
        loss = MigrationDataLoss(old_version, upgrade_version, current_version)
        loss.with_context(identity_id=identity_id, path=str(self.path_for(identity_id)))

        with transaction(conn):
            drop_all(conn)
            self._create(conn, identity_id)
            record_wipe_reason(conn, loss.reason)

        logger.warning("schema.wiped", **loss.to_dict())

    def drop_store(self, identity_id: int) -> None:
        """Delete the store file and its sidecars. Missing files are fine."""
        path = self.path_for(identity_id)
        for target in [path, *sidecar_paths(path, self.settings)]:
            self._unlink(target, identity_id)
        logger.info("store.dropped", identity_id=identity_id, path=str(path))

    def backup_store(self, identity_id: int) -> Path | None:
        """Move the store aside to ``<store>-backup``; the first backup wins.

        Returns the backup path when a backup was made, ``None`` when there
        was no store or a backup already exists.
        """
        path = self.path_for(identity_id)
        if not path.exists():
            return None

        backup = backup_path(path, self.settings)
        if backup.exists():
            logger.debug("store.backup_exists", identity_id=identity_id, path=str(backup))
            return None

        try:
            path.rename(backup)
        except OSError as exc:
            warning = ResourceCleanupWarning("Cannot back up settings store", cause=exc)
            warning.with_context(identity_id=identity_id, path=str(path))
            logger.warning("store.backup_failed", **warning.to_dict())
            return None

        logger.info("store.backed_up", identity_id=identity_id, path=str(backup))
        return backup

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _bring_to_target(self, conn: sqlite3.Connection, identity_id: int) -> None:
        if get_user_version(conn) == self.target_version:
            return

        with transaction(conn):
            # Re-read under the write lock; another process may have migrated.
            version = get_user_version(conn)
            if version > self.target_version:
                raise SchemaIntegrityError(
                    f"Store version {version} is newer than supported version "
                    f"{self.target_version}"
                ).with_context(identity_id=identity_id, on_disk_version=version)
            if version == self.target_version:
                return

            if version == 0:
                self._create(conn, identity_id)
                logger.info(
                    "schema.created",
                    identity_id=identity_id,
                    version=self.target_version,
                )
            else:
                self.upgrade(conn, identity_id, version, self.target_version)
            set_user_version(conn, self.target_version)

    def _create(self, conn: sqlite3.Connection, identity_id: int) -> None:
        namespaces = namespaces_for_identity(identity_id)
        create_tables(conn, namespaces)
        for namespace in namespaces:
            seeded = seed_settings(conn, namespace, self.defaults.defaults_for(namespace))
            logger.debug(
                "schema.seeded",
                identity_id=identity_id,
                namespace=namespace.value,
                count=seeded,
            )

    def _unlink(self, target: Path, identity_id: int) -> None:
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            warning = ResourceCleanupWarning("Cannot delete store file", cause=exc)
            warning.with_context(identity_id=identity_id, path=str(target))
            logger.warning("store.cleanup_failed", **warning.to_dict())


__all__ = ["SchemaManager", "StoreState", "UpgradeStep"]
