"""
Backup and restore streams over a settings store.

``backup_settings`` reads every namespace of a store and passes each value
through ``BackupRestoreInterceptor.on_backup``. ``restore_settings`` consumes
a stream of (namespace, key, value) entries, asks ``on_restore`` what to do
with each, and writes ``Persist`` decisions through the store's normal insert
path.

A restore session never aborts on a single entry: unknown namespaces,
namespaces this identity does not have, rejected values and failing live
subsystems are all counted as ignored and the stream continues.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ariel_settings.errors import InvalidNamespaceError
from ariel_settings.interceptor import BackupRestoreInterceptor, Divert, Ignore, Persist
from ariel_settings.logging import get_logger
from ariel_settings.namespaces import Namespace, require_namespace
from ariel_settings.store import Setting, SettingsStore

logger = get_logger(__name__)

RestoreEntry = tuple[str | Namespace, str, str | bytes | None]


@dataclass
class RestoreReport:
    """Outcome counts of one restore session."""

    persisted: list[str] = field(default_factory=list)
    diverted: list[str] = field(default_factory=list)
    ignored: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.persisted) + len(self.diverted) + len(self.ignored)


def backup_settings(
    store: SettingsStore,
    interceptor: BackupRestoreInterceptor,
    namespaces: Iterable[Namespace | str] | None = None,
) -> list[Setting]:
    """Collect the store's settings as they should appear in a backup."""
    selected = (
        [require_namespace(ns, store.identity_id) for ns in namespaces]
        if namespaces is not None
        else list(store.namespaces)
    )

    payload: list[Setting] = []
    for namespace in selected:
        for setting in store.items(namespace):
            value = interceptor.on_backup(setting.name, setting.value)
            payload.append(Setting(namespace, setting.name, value))

    logger.info("backup.collected", identity_id=store.identity_id, count=len(payload))
    return payload


def restore_settings(
    store: SettingsStore,
    interceptor: BackupRestoreInterceptor,
    entries: Iterable[RestoreEntry],
) -> RestoreReport:
    """Apply a restore stream to ``store``."""
    report = RestoreReport()

    for raw_namespace, key, value in entries:
        label = f"{getattr(raw_namespace, 'value', raw_namespace)}.{key}"
        try:
            namespace = require_namespace(raw_namespace, store.identity_id)
        except InvalidNamespaceError as exc:
            logger.debug("restore.skipped_namespace", key=key, **exc.to_dict())
            report.ignored[label] = exc.message
            continue

        decision = interceptor.on_restore(namespace, key, value)
        match decision:
            case Persist(value=new_value):
                store.put(namespace, key, new_value)
                report.persisted.append(label)
            case Divert():
                report.diverted.append(label)
            case Ignore(reason=reason):
                report.ignored[label] = reason

    logger.info(
        "restore.completed",
        identity_id=store.identity_id,
        persisted=len(report.persisted),
        diverted=len(report.diverted),
        ignored=len(report.ignored),
    )
    return report


__all__ = ["RestoreEntry", "RestoreReport", "backup_settings", "restore_settings"]
