"""
Namespace catalog.

The set of settings namespaces is fixed and closed: ``system``, ``secure`` and
``global``. Each namespace is backed by a table of the same name, so the enum
value doubles as the table identifier in generated SQL. Only enum values are
ever interpolated into statements.

``global`` holds device-wide settings and exists only in the owner identity's
store; every identity has ``system`` and ``secure``.
"""

from __future__ import annotations

from enum import Enum

from ariel_settings.errors import InvalidNamespaceError

OWNER_IDENTITY = 0


class Namespace(str, Enum):
    """Settings namespace; the value is the backing table name."""

    SYSTEM = "system"
    SECURE = "secure"
    GLOBAL = "global"

    @property
    def table(self) -> str:
        return self.value

    @property
    def index(self) -> str:
        """Name of the index on this namespace's ``name`` column."""
        return f"{self.value}Index1"

    @classmethod
    def parse(cls, name: str | Namespace) -> Namespace:
        """Resolve a namespace name, raising ``InvalidNamespaceError`` if unknown."""
        if isinstance(name, Namespace):
            return name
        try:
            return cls(name)
        except ValueError:
            raise InvalidNamespaceError(str(name)) from None

    def available_for(self, identity_id: int) -> bool:
        return self is not Namespace.GLOBAL or identity_id == OWNER_IDENTITY


_VALID_NAMESPACES = frozenset(ns.value for ns in Namespace)


def is_valid_namespace(name: str) -> bool:
    """Pure membership test against {system, secure, global}."""
    return name in _VALID_NAMESPACES


def namespaces_for_identity(identity_id: int) -> tuple[Namespace, ...]:
    """Namespaces present in the given identity's store, in creation order."""
    return tuple(ns for ns in Namespace if ns.available_for(identity_id))


def require_namespace(name: str | Namespace, identity_id: int) -> Namespace:
    """Parse ``name`` and check it exists for ``identity_id``."""
    namespace = Namespace.parse(name)
    if not namespace.available_for(identity_id):
        raise InvalidNamespaceError(
            namespace.value,
            f"Namespace {namespace.value!r} exists only for the owner identity",
        ).with_context(identity_id=identity_id)
    return namespace


__all__ = [
    "OWNER_IDENTITY",
    "Namespace",
    "is_valid_namespace",
    "namespaces_for_identity",
    "require_namespace",
]
