"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from shopsaga import configure_logging
from shopsaga._logging import add_context, clear_context, get_log_level


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    clear_context()
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level() == "ERROR"

    def test_environment_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("ENV", "test")
        assert get_log_level() == "WARNING"


class TestConfigureLogging:
    def test_json_lines_carry_context(self, restore_logging, capsys):
        configure_logging("info", json=True)
        add_context(request_id="req-7")

        structlog.get_logger("shopsaga.test").info("Stock reserved", product_id="p1", quantity=2)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Stock reserved"
        assert record["product_id"] == "p1"
        assert record["request_id"] == "req-7"
        assert record["level"] == "info"

    def test_level_filters(self, restore_logging, capsys):
        configure_logging("WARNING", json=True)
        structlog.get_logger("shopsaga.test").info("Hidden")
        assert capsys.readouterr().out == ""
