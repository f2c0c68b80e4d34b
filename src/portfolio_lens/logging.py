"""Logging setup: Rich console for humans, JSON files for later inspection.

Domain errors are logged with their ``code`` and ``details`` attached as
JSON fields, so ``error.log`` records which row, column, field or storage
operation failed without parsing the message text.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler

from portfolio_lens.config import Settings
from portfolio_lens.errors import PortfolioError

console = Console()

LOG_FILE = "portfolio_lens.log"
ERROR_LOG_FILE = "error.log"

# Per-query chatter from the storage driver stays out of the DEBUG file log.
QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine")


class PortfolioJsonFormatter(JsonFormatter):
    """JSON formatter that flattens a logged ``PortfolioError`` into fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        error = _portfolio_error(record)
        if error is not None:
            log_record["error_code"] = error.code
            log_record["error_details"] = error.details


class SkipReportedErrors(logging.Filter):
    """Drop domain errors from the console; the CLI prints those itself."""

    def filter(self, record: logging.LogRecord) -> bool:
        return _portfolio_error(record) is None


def setup_logging(settings: Settings, *, cli_log_level: str | None = None) -> None:
    """Install the console handler and the two JSON file handlers on the root logger.

    Calling it again replaces the previous handlers.
    """
    settings.log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    root.addHandler(_console_handler((cli_log_level or settings.log_level).upper()))

    formatter = PortfolioJsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    )
    file_level = settings.log_file_level.upper()
    root.addHandler(_file_handler(settings.log_dir / LOG_FILE, file_level, formatter, settings))
    root.addHandler(
        _file_handler(settings.log_dir / ERROR_LOG_FILE, logging.ERROR, formatter, settings)
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _console_handler(level: str) -> RichHandler:
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    handler.addFilter(SkipReportedErrors())
    return handler


def _file_handler(
    path: Path, level: str | int, formatter: logging.Formatter, settings: Settings
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _portfolio_error(record: logging.LogRecord) -> PortfolioError | None:
    if record.exc_info and isinstance(record.exc_info[1], PortfolioError):
        return record.exc_info[1]
    return None
