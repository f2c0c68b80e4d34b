"""Tests for logging setup."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
from rich.logging import RichHandler

from portfolio_lens.config import Settings
from portfolio_lens.errors import CSVParseError
from portfolio_lens.logging import QUIET_LOGGERS, SkipReportedErrors, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_level = root.level
    saved_quiet = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    yield
    for handler in list(root.handlers):
        if isinstance(handler, (RichHandler, RotatingFileHandler)):
            handler.close()
            root.removeHandler(handler)
    root.setLevel(saved_level)
    for name, level in saved_quiet.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, log_dir=tmp_path / "logs")


def _flush():
    for handler in logging.getLogger().handlers:
        handler.flush()


def _last_record(path):
    return json.loads(path.read_text().splitlines()[-1])


class TestSetupLogging:
    def test_installs_console_and_json_file_handlers(self, settings, restore_root_logger):
        setup_logging(settings, cli_log_level="warning")

        root = logging.getLogger()
        assert len(root.handlers) == 3
        assert isinstance(root.handlers[0], RichHandler)
        assert root.handlers[0].level == logging.WARNING

        logging.getLogger("portfolio_lens.test").error("boom %d", 7)
        _flush()

        record = _last_record(settings.log_dir / "portfolio_lens.log")
        assert record["message"] == "boom 7"
        assert record["level"] == "ERROR"
        assert "error_code" not in record
        assert (settings.log_dir / "error.log").read_text().strip()

    def test_reinit_does_not_stack_handlers(self, settings, restore_root_logger):
        setup_logging(settings)
        setup_logging(settings)
        assert len(logging.getLogger().handlers) == 3

    def test_storage_driver_loggers_are_quieted(self, settings, restore_root_logger):
        setup_logging(settings)
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestErrorContext:
    def test_domain_error_fields_land_in_error_log(self, settings, restore_root_logger):
        setup_logging(settings)
        error = CSVParseError("Invalid price value", 3, "price")

        logging.getLogger("portfolio_lens.test").error("Import failed", exc_info=error)
        _flush()

        record = _last_record(settings.log_dir / "error.log")
        assert record["message"] == "Import failed"
        assert record["error_code"] == "CSV_PARSE_ERROR"
        assert record["error_details"] == {"row": 3, "column": "price"}

    def test_console_skips_domain_errors_only(self):
        skip = SkipReportedErrors()
        reported = logging.LogRecord(
            "x", logging.ERROR, __file__, 1, "failed", None,
            (CSVParseError, CSVParseError("bad"), None),
        )
        unexpected = logging.LogRecord(
            "x", logging.ERROR, __file__, 1, "failed", None,
            (RuntimeError, RuntimeError("bad"), None),
        )
        assert not skip.filter(reported)
        assert skip.filter(unexpected)
