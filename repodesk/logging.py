"""repodesk structured logging with JSON output and repository context."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# Context added to every JSON record (selected repository, ...)
_log_context: dict[str, Any] = {}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if _log_context:
            log_data.update(_log_context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in ["operation", "command", "exit_status", "duration_ms", "branch"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        operation = getattr(record, "operation", None)
        context = f"[{operation}]" if operation else ""

        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {context} {record.getMessage()}"


def set_repository_context(repo_path: str | Path | None = None, **kwargs: Any) -> None:
    """Set context for all subsequent JSON log records.

    Args:
        repo_path: Selected repository path
        **kwargs: Additional context fields
    """
    global _log_context
    _log_context = {}

    if repo_path is not None:
        _log_context["repo"] = str(repo_path)
    _log_context.update(kwargs)


def clear_repository_context() -> None:
    """Clear all logging context."""
    global _log_context
    _log_context = {}


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return dict(_log_context)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the repodesk namespace.

    Args:
        name: Logger name (typically a dotted module path)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(f"repodesk.{name}")


def setup_logging(
    level: str = "info",
    log_dir: str | Path | None = None,
    json_output: bool = True,
    console_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Set up logging configuration.

    Args:
        level: Log level (debug, info, warn, error)
        log_dir: Directory for log files
        json_output: Whether to output JSON logs to file
        console_output: Whether to output to console
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    log_level = logging.WARNING if level == "warn" else getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger("repodesk")
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if log_dir and json_output:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / "repodesk.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False


# Initialize default logging on import
setup_logging(level="warn", console_output=True, json_output=False)
