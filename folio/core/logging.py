"""Logging for Folio CRM.

Every module logs through a child of the ``folio`` logger:

    folio.engine.agent   ->  console (human)  +  folio.log (JSON lines)

Structured fields ride along in ``extra={"context": {...}}`` and appear
as ``[k=v]`` on the console and as a ``context`` object in the file.

Usage:
    from folio.core.logging import get_logger, setup_logging

    setup_logging(config.log_path)  # once, from the entry point
    logger = get_logger(__name__)

    logger.info("Agent action executed", extra={"context": {"contact_id": 3}})
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER_NAME = "folio"
LOG_FILE_NAME = "folio.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, stamped in UTC from the record itself."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        context = _context_of(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Context may hold dates and enums
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """``HH:MM:SS LEVL name: message [k=v, ...]``"""

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{clock} {record.levelname[:4]:4s} {record.name}: {record.getMessage()}"
        context = _context_of(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ConsoleFormatter())
    return handler


def _file_handler(log_dir: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


_logging_initialized = False
_installed_handlers: list[logging.Handler] = []


def setup_logging(
    log_dir: Optional[Path] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """Attach console and rotating JSON file handlers to the folio logger.

    Only the first call has an effect until reset_logging() is called.

    Args:
        log_dir: Directory for folio.log. Defaults to ~/.folio/logs
        console_level: Minimum level echoed to the console
        file_level: Minimum level written to the file
    """
    global _logging_initialized

    if _logging_initialized:
        return

    log_dir = Path(log_dir) if log_dir is not None else Path.home() / ".folio" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    for handler in (_console_handler(console_level), _file_handler(log_dir, file_level)):
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)

    _logging_initialized = True
    root_logger.info("Logging initialized", extra={"context": {"log_dir": str(log_dir)}})


def reset_logging() -> None:
    """Detach and close the handlers installed by setup_logging()."""
    global _logging_initialized

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()
    _logging_initialized = False


def get_logger(name: str) -> logging.Logger:
    """Logger nested under ``folio``.

    ``get_logger("folio.engine.agent")`` and ``get_logger("engine.agent")``
    return the same logger.
    """
    prefix = f"{ROOT_LOGGER_NAME}."
    if name.startswith(prefix):
        name = name[len(prefix) :]
    return logging.getLogger(prefix + name)
