"""Root logger configuration for the service."""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from server.config import Settings

__all__ = ["JSONFormatter", "setup_logging"]

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JSONFormatter()
    return logging.Formatter(_TEXT_FORMAT)


def setup_logging(settings: Settings) -> None:
    """Configure the root logger: console always, rotating file if configured.

    Existing root handlers are removed so repeated calls (e.g. app reloads)
    do not duplicate output.
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = _make_formatter(settings.log_json)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.log_file:
        logs_dir = os.path.dirname(settings.log_file)
        if logs_dir:
            os.makedirs(logs_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
    logging.getLogger(__name__).info(
        f"Logging configured: level={logging.getLevelName(level)}, "
        f"json={settings.log_json}, file={settings.log_file}"
    )
