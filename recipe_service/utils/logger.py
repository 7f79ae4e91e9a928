"""
Logging utilities with file rotation and structured request events.

Key Features:
    - Console output plus a size-rotated text log per process run
    - JSON-lines event log (``events.json``) carrying per-request fields
    - ``log_event`` helper so handlers emit one structured record per outcome
    - Automatic cleanup of log directories older than a week
"""

import datetime
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path(os.getenv("RECIPES_LOG_DIR", "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_FILE_BASENAME = "recipe_service"
EVENT_LOG_NAME = "events.json"

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_LOG_SIZE_MB = 5
MAX_LOG_SIZE_BYTES = MAX_LOG_SIZE_MB * 1024 * 1024
MAX_BACKUP_COUNT = 10

_now = datetime.datetime.now()
_DATE_DIR = LOG_DIR / _now.strftime("%Y-%m-%d")
_DATE_DIR.mkdir(exist_ok=True)
_GLOBAL_LOG_FILE = (
    _DATE_DIR / f"{LOG_FILE_BASENAME}_{_now.strftime('%Y-%m-%d_%H-%M-%S')}.log"
)
_EVENT_LOG_FILE = LOG_DIR / EVENT_LOG_NAME

# Shared across loggers so every module writes to the same two files.
_file_handlers: list[logging.Handler] = []


class SafeRotatingFileHandler(RotatingFileHandler):
    """Size-based rotation that keeps writing to the current file if rotation fails."""

    def doRollover(self):
        try:
            super().doRollover()
        except OSError as e:
            import sys

            sys.stderr.write(
                f"Log rotation failed: {e}. Continuing with current log file.\n"
            )
            sys.stderr.flush()


class JsonEventFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    Fields passed through ``extra={"fields": {...}}`` are merged into the
    top-level object next to ``level``, ``msg`` and ``time``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "time": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
        }
        fields = getattr(record, "fields", None)
        if fields:
            for key, value in fields.items():
                payload.setdefault(key, value)
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _get_log_level(level_str: str) -> int:
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_str.upper(), logging.INFO)


def _shared_file_handlers() -> list[logging.Handler]:
    if not _file_handlers:
        text_handler = SafeRotatingFileHandler(
            _GLOBAL_LOG_FILE,
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=MAX_BACKUP_COUNT,
            encoding="utf-8",
        )
        text_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

        event_handler = SafeRotatingFileHandler(
            _EVENT_LOG_FILE,
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=MAX_BACKUP_COUNT,
            encoding="utf-8",
        )
        event_handler.setFormatter(JsonEventFormatter())

        _file_handlers.extend([text_handler, event_handler])
        cleanup_old_logs(keep_days=7)
    return _file_handlers


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """Set up logger with console, rotating text file and JSON event handlers."""
    logger = logging.getLogger(name)

    log_level = _get_log_level(level or DEFAULT_LOG_LEVEL)
    logger.setLevel(log_level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    logger.addHandler(console_handler)

    for handler in _shared_file_handlers():
        logger.addHandler(handler)

    return logger


def log_event(
    logger: logging.Logger, level: int, message: str, exc: Exception = None, **fields
) -> None:
    """Emit one structured record.

    The console/text line gets ``key=value`` pairs appended; the JSON event
    log receives the fields as real keys.
    """
    if exc is not None:
        fields["error"] = str(exc)
    suffix = " ".join(f"{key}={value}" for key, value in fields.items())
    text = f"{message} ({suffix})" if suffix else message
    logger.log(level, text, extra={"fields": {"event": message, **fields}})


def cleanup_old_logs(keep_days: int = 7):
    """Remove dated log directories older than ``keep_days``."""
    cutoff_time = datetime.datetime.now() - datetime.timedelta(days=keep_days)
    deleted_count = 0
    failed_count = 0

    for date_dir in LOG_DIR.iterdir():
        if not date_dir.is_dir():
            continue
        try:
            dir_date = datetime.datetime.strptime(date_dir.name, "%Y-%m-%d")
        except ValueError:
            continue
        if dir_date >= cutoff_time:
            continue
        for log_file in date_dir.iterdir():
            try:
                log_file.unlink()
                deleted_count += 1
            except (PermissionError, FileNotFoundError):
                failed_count += 1
        try:
            date_dir.rmdir()
        except OSError:
            pass  # still holds files we could not delete

    if deleted_count > 0 or failed_count > 0:
        print(
            f"Log cleanup completed: {deleted_count} files deleted, {failed_count} files failed to delete"
        )
