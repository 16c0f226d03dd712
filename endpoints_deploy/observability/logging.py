"""Logging for the deployment test.

Every record is stamped with the App Engine version under test, so the lines
of one deployment can be grouped together in CI output. Records emitted while
gcloud runs also carry the command, the attempt number and the exit code.

Console output is human-readable by default; set LOG_JSON for
newline-delimited JSON.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_current_version: ContextVar[str | None] = ContextVar("current_version", default=None)

# Extra fields CommandRunner attaches to its records
COMMAND_FIELDS = ("command", "attempt", "returncode")


def bind_version(version_id: str | None) -> None:
    """Set the version id stamped on every following record.

    Args:
        version_id: Version under test, or None once it has been torn down.
    """
    _current_version.set(version_id)


def current_version() -> str | None:
    """Version id currently bound, if any."""
    return _current_version.get()


class VersionFilter(logging.Filter):
    """Attach the bound version id to each record as ``version_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Stamp the record; never drops anything.

        Args:
            record: Log record passing through the handler.

        Returns:
            Always True.
        """
        if getattr(record, "version_id", None) is None:
            record.version_id = _current_version.get()
        return True


class JSONFormatter(logging.Formatter):
    """Newline-delimited JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        The version id is included once one is bound, and gcloud context is
        grouped under a ``gcloud`` key.

        Args:
            record: Log record to format.

        Returns:
            JSON string with log data.
        """
        log_record: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        version_id = getattr(record, "version_id", None)
        if version_id is not None:
            log_record["version_id"] = version_id

        gcloud = {name: getattr(record, name) for name in COMMAND_FIELDS if hasattr(record, name)}
        if gcloud:
            log_record["gcloud"] = gcloud

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter that appends the version under test."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format record for a terminal.

        Colours are applied to a copy, so other handlers see the plain level
        name.

        Args:
            record: Log record to format.

        Returns:
            Formatted line, suffixed with ``[version]`` when one is bound.
        """
        if sys.stderr.isatty():
            record = logging.makeLogRecord(record.__dict__)
            color = self.COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        line = super().format(record)
        version_id = getattr(record, "version_id", None)
        if version_id:
            line = f"{line} [{version_id}]"
        return line


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, emit JSON instead of coloured text.
    """
    level = os.getenv("LOG_LEVEL", level).upper()
    log_level = getattr(logging, level, logging.INFO)

    if os.getenv("LOG_JSON", "").lower() in ("true", "1", "yes"):
        json_format = True

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.addFilter(VersionFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ConsoleFormatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(handler)

    # Reduce noise from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
