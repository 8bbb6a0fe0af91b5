"""Tests for coinfolio.logging.

Tests verify:
- setup_logging installs one structlog-formatted handler at the given level
- the explicit format argument wins over LOG_FORMAT
- refresh_cycle_context binds and then unbinds the cycle context
"""

import logging

import pytest
import structlog

from coinfolio.logging import _add_service, refresh_cycle_context, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def _renderer(root: logging.Logger):
    (handler,) = root.handlers
    assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
    return handler.formatter.processors[-1]


class TestSetupLogging:
    def test_level_and_single_handler(self, restore_logging) -> None:
        setup_logging("debug", "console")
        assert restore_logging.level == logging.DEBUG
        assert isinstance(_renderer(restore_logging), structlog.dev.ConsoleRenderer)

    def test_unknown_level_falls_back_to_info(self, restore_logging) -> None:
        setup_logging("chatty", "console")
        assert restore_logging.level == logging.INFO

    def test_explicit_format_overrides_env(self, restore_logging, monkeypatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "console")
        setup_logging("INFO", "json")
        assert isinstance(_renderer(restore_logging), structlog.processors.JSONRenderer)

    def test_env_format_used_when_not_given(self, restore_logging, monkeypatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        setup_logging("INFO")
        assert isinstance(_renderer(restore_logging), structlog.processors.JSONRenderer)


class TestContext:
    def test_service_stamp_keeps_existing_keys(self) -> None:
        event = _add_service(None, "info", {"event": "x", "service": "other"})
        assert event["service"] == "other"
        assert "version" in event

    def test_refresh_cycle_context(self) -> None:
        with refresh_cycle_context(7):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["refresh_cycle"] == 7
            assert ctx["component"] == "refresh"
        assert "refresh_cycle" not in structlog.contextvars.get_contextvars()
