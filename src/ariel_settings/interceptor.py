"""
Backup/restore interception for individual settings.

During a restore every (namespace, key, value) triple is passed through
``BackupRestoreInterceptor.on_restore`` before it reaches the store. The
result is a ``RestoreDecision``:

    Persist(value)  write ``value`` (possibly normalized) through the normal
                    insert path, with the usual last-write-wins semantics
    Divert()        the key mirrors live subsystem state; the subsystem has
                    been updated and the table must not be written
    Ignore(reason)  drop the key; nothing is written anywhere

Diverted keys:

    system.system_locales      device locale; applied to the live locale
                               configuration unless the user already chose
                               one, and only if this image ships the locale
    secure.backup_auto_restore pushed to the backup manager's auto-restore flag

The interceptor never writes to the store itself. Live subsystem failures
are logged and turn into ``Ignore`` for that key only, so one unreachable
service never aborts a restore session. Undecodable bytes and failing
validators are ignored the same way.

``on_backup`` is the symmetric hook for outgoing values. It is the identity
unless a transform is registered for the key.

Tags:
    backup, restore, interception, locale, settings
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Protocol, runtime_checkable

from ariel_settings.errors import TransientSubsystemError, UnrecognizedValue
from ariel_settings.locale import LocaleConfiguration, encode_locale, normalize_locale_tag, split_locale_tag
from ariel_settings.logging import get_logger
from ariel_settings.namespaces import Namespace

logger = get_logger(__name__)

LOCALE_KEY = "system_locales"
AUTO_RESTORE_KEY = "backup_auto_restore"


# =============================================================================
# DECISIONS
# =============================================================================


@dataclass(frozen=True)
class Persist:
    """Write ``value`` to the namespace table."""

    value: str | None


@dataclass(frozen=True)
class Divert:
    """Handled by a live subsystem; skip persistence."""


@dataclass(frozen=True)
class Ignore:
    """Drop the key."""

    reason: str = ""


RestoreDecision = Persist | Divert | Ignore


# =============================================================================
# LIVE SUBSYSTEMS
# =============================================================================


@runtime_checkable
class LocaleService(Protocol):
    """Live locale configuration of the running system."""

    def get_configuration(self) -> LocaleConfiguration:
        ...

    def update_configuration(self, config: LocaleConfiguration) -> None:
        ...

    def available_locales(self) -> Sequence[str]:
        """BCP-47 tags of the locales this system image ships."""
        ...


@runtime_checkable
class BackupManagerService(Protocol):
    def set_auto_restore(self, enabled: bool) -> None:
        ...


Validator = Callable[[str | None], str | None]
"""Returns the normalized value, or ``None`` to skip the key. Raising also skips it."""

BackupTransform = Callable[[str | None], str | None]


# =============================================================================
# INTERCEPTOR
# =============================================================================


def _decode(value: str | bytes | None) -> str | None:
    if not isinstance(value, bytes):
        return value
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UnrecognizedValue("value is not valid UTF-8", value=value, cause=exc) from exc


class BackupRestoreInterceptor:
    """Per-key restore/backup hooks.

    Parameters
    ----------
    locale_service
        Live locale configuration; locale restores are ignored without one.
    backup_manager
        Receives the restored auto-restore flag.
    validators
        ``{(namespace, key): validator}`` applied to restored values of
        persisted keys.
    backup_transforms
        ``{key: transform}`` applied by ``on_backup``.
    """

    def __init__(
        self,
        locale_service: LocaleService | None = None,
        backup_manager: BackupManagerService | None = None,
        *,
        validators: dict[tuple[Namespace, str], Validator] | None = None,
        backup_transforms: dict[str, BackupTransform] | None = None,
    ) -> None:
        self.locale_service = locale_service
        self.backup_manager = backup_manager
        self._validators = dict(validators or {})
        self._backup_transforms = dict(backup_transforms or {})

    def register_validator(self, namespace: Namespace | str, key: str, validator: Validator) -> None:
        self._validators[(Namespace.parse(namespace), key)] = validator

    def register_backup_transform(self, key: str, transform: BackupTransform) -> None:
        self._backup_transforms[key] = transform

    # -- restore -----------------------------------------------------------

    def on_restore(
        self,
        namespace: Namespace | str,
        key: str,
        value: str | bytes | None,
    ) -> RestoreDecision:
        """Decide what happens to one restored setting."""
        namespace = Namespace.parse(namespace)

        try:
            value = _decode(value)
            if namespace is Namespace.SYSTEM and key == LOCALE_KEY:
                return self._restore_locale(value)
            if namespace is Namespace.SECURE and key == AUTO_RESTORE_KEY:
                return self._restore_auto_restore(value)
        except TransientSubsystemError as exc:
            exc.with_context(namespace=namespace.value, key=key)
            logger.warning("restore.subsystem_failed", **exc.to_dict())
            return Ignore(reason=exc.message)
        except UnrecognizedValue as exc:
            exc.with_context(namespace=namespace.value, key=key)
            logger.debug("restore.unrecognized_value", **exc.to_dict())
            return Ignore(reason=exc.message)

        validator = self._validators.get((namespace, key))
        if validator is None:
            return Persist(value)

        try:
            normalized = validator(value)
        except Exception as exc:
            error = UnrecognizedValue(f"validator failed: {exc}", value=value, cause=exc)
            error.with_context(namespace=namespace.value, key=key)
            logger.debug("restore.unrecognized_value", **error.to_dict())
            return Ignore(reason=error.message)
        if normalized is None:
            return Ignore(reason="rejected by validator")
        return Persist(normalized)

    def _restore_locale(self, value: str | None) -> RestoreDecision:
        if self.locale_service is None:
            return Ignore(reason="no locale service")
        if not value:
            raise UnrecognizedValue("empty locale", value=value)

        current = self._call("get locale configuration", self.locale_service.get_configuration)
        if current.user_set:
            # The user already picked a locale on this device.
            return Ignore(reason="locale set by user")

        tag = normalize_locale_tag(value)
        available = self._call("list available locales", self.locale_service.available_locales)
        if tag not in available:
            raise UnrecognizedValue(f"locale {tag!r} is not available on this system", value=tag)

        self._call(
            "update locale configuration",
            self.locale_service.update_configuration,
            replace(current, locale=tag, user_set=True),
        )
        logger.info("restore.diverted", key=LOCALE_KEY, locale=tag)
        return Divert()

    def _restore_auto_restore(self, value: str | None) -> RestoreDecision:
        enabled = value == "1"
        if self.backup_manager is not None:
            self._call("set auto-restore", self.backup_manager.set_auto_restore, enabled)
        logger.info("restore.diverted", key=AUTO_RESTORE_KEY, enabled=enabled)
        return Divert()

    @staticmethod
    def _call(what: str, func: Callable, *args):
        try:
            return func(*args)
        except Exception as exc:
            raise TransientSubsystemError(f"{what} failed: {exc}", cause=exc) from exc

    # -- backup ------------------------------------------------------------

    def on_backup(self, name: str, value: str | None) -> str | None:
        """Rewrite a value on its way into a backup payload."""
        transform = self._backup_transforms.get(name)
        if transform is None:
            return value
        return transform(value)

    def locale_data(self) -> bytes:
        """Current live locale encoded for a backup payload (``ll-CC``)."""
        if self.locale_service is None:
            return b""
        config = self.locale_service.get_configuration()
        if not config.locale:
            return b""
        language, country = split_locale_tag(config.locale)
        return encode_locale(language, country)


__all__ = [
    "AUTO_RESTORE_KEY",
    "LOCALE_KEY",
    "BackupManagerService",
    "BackupRestoreInterceptor",
    "Divert",
    "Ignore",
    "LocaleService",
    "Persist",
    "RestoreDecision",
]
