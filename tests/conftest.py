"""
Shared pytest fixtures for ariel-settings tests.

Every test gets its own data directory under ``tmp_path``; nothing touches
the real ``~/.ariel_settings``.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from ariel_settings.config import StoreSettings, clear_settings_cache
from ariel_settings.defaults import MappingDefaults
from ariel_settings.namespaces import OWNER_IDENTITY
from ariel_settings.schema_manager import SchemaManager
from ariel_settings.store import SettingsStore

SECONDARY_IDENTITY = 10


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Point the default configuration at a temp dir and reset global state."""
    monkeypatch.setenv("ARIEL_SETTINGS_DATA_DIR", str(tmp_path / "env-data"))
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture()
def store_settings(tmp_path: Path) -> StoreSettings:
    return StoreSettings(data_dir=tmp_path / "data")


@pytest.fixture()
def defaults() -> MappingDefaults:
    return MappingDefaults(
        {
            "system": {"screen_off_timeout": 60000, "dim_screen": True},
            "secure": {"location_providers_allowed": "gps,network"},
            "global": {"airplane_mode_on": False},
        }
    )


@pytest.fixture()
def manager(store_settings: StoreSettings, defaults: MappingDefaults) -> SchemaManager:
    return SchemaManager(store_settings, defaults)


@pytest.fixture()
def owner_store(manager: SchemaManager) -> Generator[SettingsStore, None, None]:
    store = manager.open(OWNER_IDENTITY)
    yield store
    store.close()


@pytest.fixture()
def user_store(manager: SchemaManager) -> Generator[SettingsStore, None, None]:
    store = manager.open(SECONDARY_IDENTITY)
    yield store
    store.close()
