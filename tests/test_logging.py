"""Tests for structured logging setup."""

from __future__ import annotations

import json

import structlog

from ariel_settings.logging import configure_logging, get_logger, identity_context


def test_json_output_goes_to_stderr(capsys):
    configure_logging(level="INFO", json_format=True, service="test-service")

    get_logger("ariel_settings.test").warning("schema.wiped", identity_id=0, reason="1/1/2")

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "schema.wiped"
    assert record["reason"] == "1/1/2"
    assert record["log.level"] == "warning"
    assert record["service.name"] == "test-service"
    assert record["logger_name"] == "ariel_settings.test"
    assert "@timestamp" in record


def test_package_modules_import_with_named_loggers():
    import ariel_settings.interceptor
    import ariel_settings.schema_manager

    assert ariel_settings.schema_manager.logger is not None
    assert get_logger(__name__) is not None


def test_level_filters_debug(capsys):
    configure_logging(level="INFO", json_format=True)

    get_logger().debug("store.opened")

    assert capsys.readouterr().err == ""


def test_identity_context_binds_and_unbinds():
    with identity_context(10):
        assert structlog.contextvars.get_contextvars() == {"identity_id": 10}
    assert structlog.contextvars.get_contextvars() == {}


def test_identity_context_restores_outer_binding():
    with identity_context(0):
        with identity_context(10):
            assert structlog.contextvars.get_contextvars()["identity_id"] == 10
        assert structlog.contextvars.get_contextvars()["identity_id"] == 0
