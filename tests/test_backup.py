"""Tests for backup collection and restore streams."""

from __future__ import annotations

import pytest

from ariel_settings.backup import RestoreReport, backup_settings, restore_settings
from ariel_settings.interceptor import AUTO_RESTORE_KEY, LOCALE_KEY, BackupRestoreInterceptor
from ariel_settings.locale import LocaleConfiguration
from ariel_settings.namespaces import Namespace
from ariel_settings.store import Setting


class StaticLocales:
    def __init__(self) -> None:
        self.config = LocaleConfiguration()

    def get_configuration(self) -> LocaleConfiguration:
        return self.config

    def update_configuration(self, config: LocaleConfiguration) -> None:
        self.config = config

    def available_locales(self) -> list[str]:
        return ["en-US"]


@pytest.fixture()
def interceptor() -> BackupRestoreInterceptor:
    return BackupRestoreInterceptor(StaticLocales())


class TestBackupSettings:
    def test_collects_every_namespace(self, owner_store, interceptor):
        payload = backup_settings(owner_store, interceptor)

        assert Setting(Namespace.SYSTEM, "dim_screen", "1") in payload
        assert Setting(Namespace.GLOBAL, "airplane_mode_on", "0") in payload
        assert {s.namespace for s in payload} == set(Namespace)

    def test_selected_namespaces(self, owner_store, interceptor):
        payload = backup_settings(owner_store, interceptor, ["secure"])
        assert payload == [Setting(Namespace.SECURE, "location_providers_allowed", "gps,network")]

    def test_transforms_are_applied(self, owner_store, interceptor):
        interceptor.register_backup_transform("dim_screen", lambda v: "0")
        payload = backup_settings(owner_store, interceptor, ["system"])
        assert Setting(Namespace.SYSTEM, "dim_screen", "0") in payload
        assert owner_store.get("system", "dim_screen") == "1"


class TestRestoreSettings:
    def test_mixed_stream(self, owner_store, interceptor):
        entries = [
            ("system", "screen_off_timeout", "30000"),
            ("system", LOCALE_KEY, b"en-US"),
            ("secure", AUTO_RESTORE_KEY, "1"),
            ("system", LOCALE_KEY, b"xx-YY"),
            ("bogus", "anything", "1"),
            (Namespace.GLOBAL, "wifi_on", b"1"),
        ]

        report = restore_settings(owner_store, interceptor, entries)

        assert report.persisted == ["system.screen_off_timeout", "global.wifi_on"]
        assert report.diverted == ["system.system_locales", "secure.backup_auto_restore"]
        assert set(report.ignored) == {"system.system_locales", "bogus.anything"}
        assert report.total == 6

        assert owner_store.get("system", "screen_off_timeout") == "30000"
        assert owner_store.get("global", "wifi_on") == "1"
        assert not owner_store.contains("system", LOCALE_KEY)
        assert not owner_store.contains("secure", AUTO_RESTORE_KEY)

    @pytest.mark.parametrize(
        "bad_entry",
        [("system", "bad_blob", b"\xff\xfe"), ("secure", AUTO_RESTORE_KEY, b"\xff")],
    )
    def test_undecodable_value_does_not_stop_stream(self, owner_store, interceptor, bad_entry):
        report = restore_settings(owner_store, interceptor, [bad_entry, ("system", "after", "1")])

        assert report.persisted == ["system.after"]
        assert list(report.ignored) == [f"{bad_entry[0]}.{bad_entry[1]}"]
        assert owner_store.get("system", "after") == "1"
        assert not owner_store.contains(bad_entry[0], bad_entry[1])

    def test_failing_validator_does_not_stop_stream(self, owner_store, interceptor):
        interceptor.register_validator("system", "font_scale", lambda v: {}["missing"])

        report = restore_settings(
            owner_store, interceptor, [("system", "font_scale", "1"), ("system", "after", "1")]
        )

        assert "system.font_scale" in report.ignored
        assert owner_store.get("system", "after") == "1"

    def test_persist_overwrites_single_row(self, owner_store, interceptor):
        restore_settings(owner_store, interceptor, [("system", "dim_screen", "0")])

        assert owner_store.get("system", "dim_screen") == "0"
        assert owner_store.count("system", "dim_screen") == 1

    def test_global_ignored_for_secondary_identity(self, user_store, interceptor):
        report = restore_settings(user_store, interceptor, [("global", "airplane_mode_on", "1")])

        assert report.persisted == []
        assert "global.airplane_mode_on" in report.ignored

    def test_empty_stream(self, owner_store, interceptor):
        assert restore_settings(owner_store, interceptor, []) == RestoreReport()
