"""Tests for logging setup."""

import json
import logging

import pytest

from folio.core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    get_logger,
    reset_logging,
    setup_logging,
)


@pytest.fixture
def fresh_logging():
    reset_logging()
    yield logging.getLogger("folio")
    reset_logging()


def _record(context=None) -> logging.LogRecord:
    record = logging.LogRecord("folio.engine", logging.INFO, __file__, 1, "Queue built", None, None)
    if context is not None:
        record.context = context
    return record


class TestLogging:
    """Test logging configuration."""

    def test_get_logger_returns_logger(self):
        """get_logger returns a Logger instance."""
        logger = get_logger(__name__)
        assert isinstance(logger, logging.Logger)

    def test_get_logger_nests_under_folio(self):
        assert get_logger("folio.engine.agent").name == "folio.engine.agent"
        assert get_logger("main").name == "folio.main"

    def test_get_logger_same_name_returns_same_logger(self):
        """Same name returns same logger instance."""
        assert get_logger("test.module") is get_logger("test.module")

    def test_setup_logging_creates_handlers(self, tmp_path, fresh_logging):
        """setup_logging creates file and console handlers."""
        before = len(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "logs")
        assert len(fresh_logging.handlers) == before + 2
        assert (tmp_path / "logs" / "folio.log").exists()

    def test_setup_logging_runs_once(self, tmp_path, fresh_logging):
        setup_logging(log_dir=tmp_path / "logs")
        count = len(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "logs")
        assert len(fresh_logging.handlers) == count

    def test_reset_logging_detaches_handlers(self, tmp_path, fresh_logging):
        before = len(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "logs")
        reset_logging()
        assert len(fresh_logging.handlers) == before


class TestFormatters:
    def test_json_formatter_includes_context(self):
        data = json.loads(JSONFormatter().format(_record({"contact_id": 3})))
        assert data["level"] == "INFO"
        assert data["module"] == "folio.engine"
        assert data["message"] == "Queue built"
        assert data["context"] == {"contact_id": 3}
        assert data["timestamp"].endswith("Z")

    def test_console_formatter_appends_context(self):
        line = ConsoleFormatter().format(_record({"contact_id": 3}))
        assert "folio.engine: Queue built [contact_id=3]" in line

    def test_console_formatter_without_context(self):
        assert ConsoleFormatter().format(_record()).endswith("folio.engine: Queue built")
