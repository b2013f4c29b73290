"""
Centralized logging configuration for Mdluex Search.

Structured JSON logs go to rotating files under ``LOG_DIR``:
- app.log   INFO and above
- error.log ERROR and above
- debug.log everything, only when LOG_LEVEL=DEBUG

A human-readable stderr handler is added when LOG_TO_CONSOLE=true.
Contextual fields are passed as ``extra={"extra_fields": {...}}``.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class JsonFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class LoggerConfig:
    """
    Process-wide logger setup.

    Settings are read from the environment when ``setup_logging`` first runs,
    so a ``.env`` loaded beforehand is honoured.
    """

    MAX_BYTES = 5 * 1024 * 1024
    BACKUP_COUNT = 3

    _initialized = False

    @classmethod
    def setup_logging(cls, log_dir: str | Path | None = None, level: str | None = None) -> None:
        """
        Configure the root logger once.

        Args:
            log_dir: Directory for the rotating log files (default: LOG_DIR or ./logs)
            level: Root level name (default: LOG_LEVEL or INFO)
        """
        if cls._initialized:
            return

        log_path = Path(log_dir or os.getenv("LOG_DIR", "logs"))
        level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
        to_console = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"

        log_path.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, level_name, logging.INFO))
        root_logger.handlers.clear()

        json_formatter = JsonFormatter()

        for filename, handler_level in (("app.log", logging.INFO), ("error.log", logging.ERROR)):
            handler = logging.handlers.RotatingFileHandler(
                log_path / filename,
                maxBytes=cls.MAX_BYTES,
                backupCount=cls.BACKUP_COUNT,
                encoding="utf-8",
            )
            handler.setLevel(handler_level)
            handler.setFormatter(json_formatter)
            root_logger.addHandler(handler)

        if level_name == "DEBUG":
            debug_handler = logging.handlers.RotatingFileHandler(
                log_path / "debug.log",
                maxBytes=cls.MAX_BYTES,
                backupCount=cls.BACKUP_COUNT,
                encoding="utf-8",
            )
            debug_handler.setLevel(logging.DEBUG)
            debug_handler.setFormatter(json_formatter)
            root_logger.addHandler(debug_handler)

        if to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(
                logging.Formatter(
                    fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            root_logger.addHandler(console_handler)

        cls._initialized = True

        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                "extra_fields": {
                    "log_level": level_name,
                    "log_dir": str(log_path),
                    "console_logging": to_console,
                }
            },
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._initialized:
            cls.setup_logging()
        return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Example:
        >>> from utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.warning("Cache write failed", extra={"extra_fields": {"key": "abc"}})
    """
    return LoggerConfig.get_logger(name)
