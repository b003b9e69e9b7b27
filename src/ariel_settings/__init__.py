"""Versioned, namespaced key-value settings store.

Layout:
    <data_dir>/
        ariel_settings.db            # owner identity (system, secure, global)
        ariel_settings.db-journal    # sqlite rollback journal, removed with the store
        ariel_settings.db-backup     # one-shot pre-migration backup
        users/
            <identity>/
                ariel_settings.db    # other identities (system, secure)

Each namespace is a table of flat name→value pairs with last-write-wins
overwrite semantics. ``SchemaManager`` creates, migrates and maintains store
files; ``BackupRestoreInterceptor`` decides, key by key, how restored values
reach the store or live subsystems.
"""

from ariel_settings.backup import RestoreReport, backup_settings, restore_settings
from ariel_settings.config import StoreSettings, get_settings
from ariel_settings.defaults import DefaultsProvider, MappingDefaults, NoDefaults, TomlDefaults
from ariel_settings.errors import (
    InvalidNamespaceError,
    MigrationDataLoss,
    ResourceCleanupWarning,
    SchemaIntegrityError,
    SettingsError,
    TransientSubsystemError,
    UnrecognizedValue,
)
from ariel_settings.interceptor import BackupRestoreInterceptor, Divert, Ignore, Persist, RestoreDecision
from ariel_settings.locator import locate
from ariel_settings.namespaces import OWNER_IDENTITY, Namespace, is_valid_namespace
from ariel_settings.registry import StoreRegistry
from ariel_settings.reorganize import move_exact, move_prefixed
from ariel_settings.schema_manager import SchemaManager, StoreState
from ariel_settings.store import Setting, SettingsStore

__version__ = "0.1.0"

__all__ = [
    "OWNER_IDENTITY",
    "BackupRestoreInterceptor",
    "DefaultsProvider",
    "Divert",
    "Ignore",
    "InvalidNamespaceError",
    "MappingDefaults",
    "MigrationDataLoss",
    "Namespace",
    "NoDefaults",
    "Persist",
    "ResourceCleanupWarning",
    "RestoreDecision",
    "RestoreReport",
    "SchemaIntegrityError",
    "SchemaManager",
    "Setting",
    "SettingsError",
    "SettingsStore",
    "StoreRegistry",
    "StoreSettings",
    "StoreState",
    "TomlDefaults",
    "TransientSubsystemError",
    "UnrecognizedValue",
    "backup_settings",
    "get_settings",
    "is_valid_namespace",
    "locate",
    "move_exact",
    "move_prefixed",
    "restore_settings",
]
