"""
Default settings providers.

The schema manager seeds each namespace table from a ``DefaultsProvider`` when
a store is created (and again after a wipe). Where the defaults come from is
the provider's business: a static mapping in code, or a TOML file shipped
with the image::

    # defaults.toml
    [system]
    screen_off_timeout = 60000
    dim_screen = true

    [secure]
    location_providers_allowed = "gps,network"

Values are stored as strings. Booleans become ``"1"``/``"0"`` and numbers
their decimal form, so callers parse them back with ``int()`` or
``float()``.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ariel_settings.errors import InvalidNamespaceError
from ariel_settings.logging import get_logger
from ariel_settings.namespaces import Namespace

logger = get_logger(__name__)


@runtime_checkable
class DefaultsProvider(Protocol):
    """Supplies the key/value pairs seeded into a freshly created namespace."""

    def defaults_for(self, namespace: Namespace) -> list[tuple[str, str | None]]:
        ...


def coerce_value(value: Any) -> str | None:
    """Render a default value the way it is persisted."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Unsupported default value type: {type(value).__name__}")


class NoDefaults:
    """Seeds nothing."""

    def defaults_for(self, namespace: Namespace) -> list[tuple[str, str | None]]:
        return []


class MappingDefaults:
    """Defaults held in memory, keyed by namespace."""

    def __init__(self, defaults: Mapping[Namespace | str, Mapping[str, Any]] | None = None):
        self._defaults: dict[Namespace, dict[str, str | None]] = {}
        for name, pairs in (defaults or {}).items():
            namespace = Namespace.parse(name)
            self._defaults[namespace] = {key: coerce_value(value) for key, value in pairs.items()}

    def defaults_for(self, namespace: Namespace) -> list[tuple[str, str | None]]:
        return list(self._defaults.get(namespace, {}).items())


class TomlDefaults(MappingDefaults):
    """Defaults loaded from a TOML file with one table per namespace."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        with self.path.open("rb") as fh:
            data = tomllib.load(fh)

        unknown = [name for name in data if not isinstance(data[name], dict)]
        if unknown:
            raise ValueError(f"{self.path}: expected a table per namespace, got keys {unknown}")
        try:
            super().__init__(data)
        except InvalidNamespaceError as exc:
            raise exc.with_context(path=str(self.path))

        logger.debug(
            "defaults.loaded",
            path=str(self.path),
            namespaces=sorted(ns.value for ns in self._defaults),
        )


__all__ = [
    "DefaultsProvider",
    "MappingDefaults",
    "NoDefaults",
    "TomlDefaults",
    "coerce_value",
]
