"""
Structured error types for the settings store.

Every failure the store can produce is a ``SettingsError`` subclass carrying a
category, a structured ``ErrorContext`` and an optional chained cause. Only a
small part of the hierarchy ever propagates to callers: schema failures while
opening a store. Everything else is logged and absorbed where it happens so a
single bad key never aborts a restore session.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       SettingsError                         │
        │        (category, context, cause, to_dict)                  │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  SchemaIntegrityError   MigrationDataLoss                   │
        │  (SCHEMA, raised)       (SCHEMA, logged only)               │
        │                                                             │
        │  TransientSubsystemError    UnrecognizedValue               │
        │  (SUBSYSTEM, swallowed)     (VALIDATION, key skipped)       │
        │                                                             │
        │  ResourceCleanupWarning     InvalidNamespaceError           │
        │  (STORAGE, logged only)     (VALIDATION, raised)            │
        └─────────────────────────────────────────────────────────────┘

Propagation policy:
    - ``SchemaIntegrityError`` aborts ``SchemaManager.open`` and is surfaced.
    - ``InvalidNamespaceError`` is raised to front-end callers that pass an
      unknown or unavailable namespace.
    - All other types are built only so they can be logged with a uniform
      ``to_dict()`` payload.

Tags:
    error-handling, exception-hierarchy, error-context, settings, schema

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    SCHEMA = "SCHEMA"             # DDL, version stamp, migration
    STORAGE = "STORAGE"           # Store files, sidecars, backups
    SUBSYSTEM = "SUBSYSTEM"       # Live subsystem calls during restore
    VALIDATION = "VALIDATION"     # Namespaces, restored values
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a settings error.

    Only the fields relevant to the failure are set; ``to_dict()`` drops the
    rest so log lines stay compact.

    Attributes:
        identity_id: Identity whose store was being accessed
        namespace: Settings namespace (``system``, ``secure``, ``global``)
        key: Setting name
        path: Filesystem path of the store, sidecar or backup file
        metadata: Additional key-value pairs
    """

    identity_id: int | None = None
    namespace: str | None = None
    key: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for name in ["identity_id", "namespace", "key", "path"]:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SettingsError(Exception):
    """
    Base exception for all settings store errors.

    Subclasses set ``default_category``; instances may override it. A
    ``cause`` is chained onto ``__cause__`` so tracebacks keep the original
    sqlite or OS error.

    Examples:
        >>> error = SettingsError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = SchemaIntegrityError("create failed").with_context(identity_id=10)
        >>> error.context.identity_id
        10
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SettingsError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaIntegrityError("stamp failed").with_context(
                identity_id=0, path="/data/ariel_settings.db"
            )
        """
        for name, value in kwargs.items():
            if hasattr(self.context, name) and name != "metadata":
                setattr(self.context, name, value)
            else:
                self.context.metadata[name] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SCHEMA ERRORS
# =============================================================================


class SchemaIntegrityError(SettingsError):
    """
    DDL or version-stamp failure during create/upgrade.

    Fatal to the open operation. The transaction that produced it has been
    rolled back, so the store file is left exactly as it was before the open
    attempt.
    """

    default_category = ErrorCategory.SCHEMA


class MigrationDataLoss(SettingsError):
    """
    A store was wiped and recreated because no upgrade path reached the target.

    Never raised. The schema manager builds one to log the event and records
    the ``wiped_db_reason`` diagnostic row.
    """

    default_category = ErrorCategory.SCHEMA

    def __init__(self, old_version: int, upgrade_version: int, current_version: int, **kwargs: Any):
        self.old_version = old_version
        self.upgrade_version = upgrade_version
        self.current_version = current_version
        super().__init__(
            f"Settings store wiped: {self.reason}",
            **kwargs,
        )

    @property
    def reason(self) -> str:
        """Diagnostic string stored under ``wiped_db_reason``."""
        return f"{self.old_version}/{self.upgrade_version}/{self.current_version}"


# =============================================================================
# RESTORE ERRORS
# =============================================================================


class TransientSubsystemError(SettingsError):
    """A live subsystem call made during restore failed; the key is abandoned."""

    default_category = ErrorCategory.SUBSYSTEM


class UnrecognizedValue(SettingsError):
    """A restored value failed validation; the key is skipped silently."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


# =============================================================================
# STORAGE / VALIDATION ERRORS
# =============================================================================


class ResourceCleanupWarning(SettingsError):
    """Deleting or renaming a store, sidecar or backup file failed."""

    default_category = ErrorCategory.STORAGE


class InvalidNamespaceError(SettingsError):
    """Namespace is unknown, or not available for the requesting identity."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, namespace: str, message: str | None = None, **kwargs: Any):
        self.namespace = namespace
        super().__init__(message or f"Unknown settings namespace: {namespace!r}", **kwargs)
        self.context.namespace = namespace


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SettingsError",
    "SchemaIntegrityError",
    "MigrationDataLoss",
    "TransientSubsystemError",
    "UnrecognizedValue",
    "ResourceCleanupWarning",
    "InvalidNamespaceError",
]
