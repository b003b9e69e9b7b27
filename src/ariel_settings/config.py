"""
Configuration for the settings store.

``StoreSettings`` is the single validated source for filesystem layout,
schema version and logging options. Every field can be set through an
``ARIEL_SETTINGS_*`` environment variable or a ``.env`` file::

    ARIEL_SETTINGS_DATA_DIR=/var/lib/ariel
    ARIEL_SETTINGS_USERS_DIR=/var/lib/ariel/users
    ARIEL_SETTINGS_SCHEMA_VERSION=1

Fields
──────
data_dir        : Directory holding the owner identity's store
users_dir       : Root of per-identity private storage (default ``<data_dir>/users``)
database_name   : Store file name, shared by every identity
schema_version  : Target schema version stamped on every store
journal_suffix  : Rollback-journal sidecar suffix, removed together with the store
backup_suffix   : Suffix of the one-shot pre-migration backup copy
busy_timeout    : Seconds sqlite waits on a locked store before failing
log_level       : structlog level
log_format      : ``json`` or ``console``

Tags:
    configuration, settings, pydantic, environment
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Settings store configuration (``ARIEL_SETTINGS_`` prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="ARIEL_SETTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage layout ───────────────────────────────────────────
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".ariel_settings",
        description="Directory holding the owner identity's store",
    )
    users_dir: Path | None = Field(
        default=None,
        description="Root of per-identity storage areas; defaults to <data_dir>/users",
    )
    database_name: str = Field(default="ariel_settings.db")
    journal_suffix: str = Field(default="-journal")
    backup_suffix: str = Field(default="-backup")

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = Field(default=1, ge=1)
    busy_timeout: float = Field(default=5.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value

    @model_validator(mode="after")
    def _default_users_dir(self) -> StoreSettings:
        if self.users_dir is None:
            self.users_dir = self.data_dir / "users"
        return self


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, StoreSettings] = {}


def get_settings(*, _force_reload: bool = False) -> StoreSettings:
    """Load, validate, and cache a :class:`StoreSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = StoreSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Forget the cached settings (tests, reconfiguration)."""
    _settings_cache.clear()


__all__ = ["StoreSettings", "get_settings", "clear_settings_cache"]
