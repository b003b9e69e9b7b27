"""Tests for the bulk-move primitives used by upgrade steps."""

from __future__ import annotations

import sqlite3

import pytest

from ariel_settings.config import StoreSettings
from ariel_settings.errors import SchemaIntegrityError
from ariel_settings.namespaces import Namespace
from ariel_settings.reorganize import move_exact, move_prefixed
from ariel_settings.schema_manager import SchemaManager
from ariel_settings.store import SettingsStore

SYSTEM, SECURE, GLOBAL = Namespace.SYSTEM, Namespace.SECURE, Namespace.GLOBAL


def _snapshot(store: SettingsStore) -> dict[str, dict[str, str | None]]:
    return {
        ns.value: {s.name: s.value for s in store.items(ns)}
        for ns in store.namespaces
    }


def _fail_on_delete(conn: sqlite3.Connection, table: str, name: str) -> None:
    """Install a trigger that aborts deleting ``name`` from ``table``."""
    conn.execute(
        f"CREATE TRIGGER fail_{table} BEFORE DELETE ON {table} "
        f"WHEN OLD.name = '{name}' BEGIN SELECT RAISE(ABORT, 'injected failure'); END"
    )


# ── move_exact ────────────────────────────────────────────────────────


class TestMoveExact:
    def test_moves_rows_and_deletes_source(self, owner_store: SettingsStore):
        owner_store.put_many("system", [("adb_enabled", "1"), ("stay_on", "0")])

        moved = move_exact(owner_store.connection, SYSTEM, GLOBAL, ["adb_enabled", "stay_on"])

        assert moved == 2
        assert owner_store.get("global", "adb_enabled") == "1"
        assert owner_store.get("global", "stay_on") == "0"
        assert not owner_store.contains("system", "adb_enabled")

    def test_overwrites_destination_by_default(self, owner_store: SettingsStore):
        owner_store.put("system", "wifi_on", "1")
        owner_store.put("global", "wifi_on", "0")

        move_exact(owner_store.connection, SYSTEM, GLOBAL, ["wifi_on"])

        assert owner_store.get("global", "wifi_on") == "1"
        assert owner_store.count("global", "wifi_on") == 1

    def test_ignore_conflicts_keeps_destination(self, owner_store: SettingsStore):
        owner_store.put("system", "wifi_on", "1")
        owner_store.put("global", "wifi_on", "0")

        move_exact(owner_store.connection, SYSTEM, GLOBAL, ["wifi_on"], ignore_conflicts=True)

        assert owner_store.get("global", "wifi_on") == "0"
        assert not owner_store.contains("system", "wifi_on")

    def test_missing_names_are_skipped(self, owner_store: SettingsStore):
        assert move_exact(owner_store.connection, SYSTEM, SECURE, ["nope"]) == 0
        assert not owner_store.contains("secure", "nope")

    def test_failure_after_first_key_rolls_back_batch(self, owner_store: SettingsStore):
        owner_store.put_many("system", [("first", "1"), ("second", "2")])
        owner_store.put("secure", "first", "old")
        _fail_on_delete(owner_store.connection, "system", "second")
        before = _snapshot(owner_store)

        with pytest.raises(sqlite3.IntegrityError, match="injected failure"):
            move_exact(owner_store.connection, SYSTEM, SECURE, ["first", "second"])

        assert _snapshot(owner_store) == before
        assert not owner_store.connection.in_transaction


# ── move_prefixed ─────────────────────────────────────────────────────


class TestMovePrefixed:
    @pytest.fixture()
    def seeded(self, owner_store: SettingsStore) -> SettingsStore:
        owner_store.put_many(
            "secure",
            [
                ("foo", "exact"),
                ("foobar", "longer"),
                ("foo_x", "separator"),
                ("fo", "shorter"),
                ("xfoo", "infix"),
                ("FOObar", "case"),
                ("f%o", "wildcard"),
            ],
        )
        return owner_store

    def test_literal_prefix_boundary(self, seeded: SettingsStore):
        moved = move_prefixed(seeded.connection, SECURE, GLOBAL, ["foo"])

        assert moved == 3
        assert set(_snapshot(seeded)["global"]) >= {"foo", "foobar", "foo_x"}
        remaining = set(_snapshot(seeded)["secure"])
        assert {"fo", "xfoo", "FOObar", "f%o"} <= remaining
        assert not remaining & {"foo", "foobar", "foo_x"}

    def test_prefix_with_separator_does_not_match_longer_word(self, seeded: SettingsStore):
        moved = move_prefixed(seeded.connection, SECURE, GLOBAL, ["foo_"])

        assert moved == 1
        assert seeded.get("global", "foo_x") == "separator"
        assert seeded.contains("secure", "foobar")

    def test_no_wildcard_interpretation(self, seeded: SettingsStore):
        assert move_prefixed(seeded.connection, SECURE, GLOBAL, ["f%"]) == 1
        assert seeded.get("global", "f%o") == "wildcard"
        assert seeded.contains("secure", "foo")

    def test_several_prefixes(self, seeded: SettingsStore):
        moved = move_prefixed(seeded.connection, SECURE, SYSTEM, ["xf", "FOO"])
        assert moved == 2
        assert seeded.get("system", "xfoo") == "infix"
        assert seeded.get("system", "FOObar") == "case"

    def test_overwrites_destination(self, seeded: SettingsStore):
        seeded.put("global", "foobar", "stale")
        move_prefixed(seeded.connection, SECURE, GLOBAL, ["foob"])
        assert seeded.get("global", "foobar") == "longer"

    def test_failure_rolls_back_batch(self, seeded: SettingsStore):
        _fail_on_delete(seeded.connection, "secure", "xfoo")
        before = _snapshot(seeded)

        with pytest.raises(sqlite3.IntegrityError):
            move_prefixed(seeded.connection, SECURE, GLOBAL, ["foo", "xfoo"])

        assert _snapshot(seeded) == before

    def test_empty_prefix_rejected(self, seeded: SettingsStore):
        before = _snapshot(seeded)
        with pytest.raises(ValueError):
            move_prefixed(seeded.connection, SECURE, GLOBAL, ["foo", ""])
        assert _snapshot(seeded) == before


# ── Inside an upgrade step ────────────────────────────────────────────


class TestMovesInUpgradeSteps:
    def test_step_moves_keys_between_namespaces(self, store_settings: StoreSettings):
        with SchemaManager(store_settings).open(0) as store:
            store.put_many("system", [("airplane_mode_on", "1"), ("lock_pattern", "x")])

        def step(conn: sqlite3.Connection, identity_id: int) -> None:
            move_exact(conn, SYSTEM, GLOBAL, ["airplane_mode_on"])
            move_prefixed(conn, SYSTEM, SECURE, ["lock_"])

        with SchemaManager(store_settings, target_version=2, steps={1: step}).open(0) as store:
            assert store.get("global", "airplane_mode_on") == "1"
            assert store.get("secure", "lock_pattern") == "x"
            assert not store.contains("system", "airplane_mode_on")

    def test_failing_move_aborts_upgrade(self, store_settings: StoreSettings):
        with SchemaManager(store_settings).open(0) as store:
            store.put("system", "airplane_mode_on", "1")
            _fail_on_delete(store.connection, "system", "airplane_mode_on")

        def step(conn, identity_id):
            move_exact(conn, SYSTEM, GLOBAL, ["airplane_mode_on"])

        with pytest.raises(SchemaIntegrityError):
            SchemaManager(store_settings, target_version=2, steps={1: step}).open(0)

        with SchemaManager(store_settings).open(0) as store:
            assert store.version == 1
            assert store.get("system", "airplane_mode_on") == "1"
            assert not store.contains("global", "airplane_mode_on")
