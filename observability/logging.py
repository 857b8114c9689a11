"""Log routing for applications that embed the detector.

The detector modules only write to their own ``logging.getLogger(__name__)``
loggers. The host application calls ``setup_logging(config)`` once at
startup to send those records to stdout and to ``LOG_DIR/sniffer.log``.

AnalysisPipeline.run tags its work with a short run id held in a
contextvar; every handler installed here copies it onto the record, so the
lines of one run can be grepped out of an interleaved log.

Usage:
    >>> config = Config.load()
    >>> setup_logging(config)
    >>> state = await AnalysisPipeline(config).run(text)
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

LOG_FILE_NAME = "sniffer.log"

# HTTP and model client libraries that are chatty at DEBUG
NOISY_LOGGERS = ("aiohttp", "httpx", "httpcore", "openai", "asyncio")

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")

# Attributes present on every record; the rest arrived through extra=
_BUILTIN_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "run_id",
}


def set_run_context(run_id: str) -> None:
    run_id_var.set(run_id)


def clear_context() -> None:
    run_id_var.set("-")


class ContextFilter(logging.Filter):
    """Copies the current run id onto each record as ``record.run_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Always carries timestamp, level, logger, message and run_id. Warnings
    and above add a ``source`` block; fields passed via ``extra=`` are
    copied through, stringified when not JSON-serializable.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }
        if record.levelno >= logging.WARNING:
            entry["source"] = {"file": record.filename, "line": record.lineno, "function": record.funcName}
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _BUILTIN_ATTRS:
                entry[key] = _jsonable(value)

        return json.dumps(entry, ensure_ascii=False)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class TextFormatter(logging.Formatter):
    """``HH:MM:SS [LEVEL] [run_id] logger: message`` (full date in files)."""

    def __init__(self, include_date: bool = False):
        datefmt = "%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S"
        super().__init__("%(asctime)s [%(levelname)s] [%(run_id)s] %(name)s: %(message)s", datefmt)


def _formatter(config: Any, for_file: bool) -> logging.Formatter:
    if config.log_format == "json":
        return JsonFormatter()
    return TextFormatter(include_date=for_file)


def _file_handler(config: Any) -> logging.Handler:
    """Size-based rotation when LOG_MAX_BYTES is set, else daily at midnight.

    Raises:
        OSError: If the log directory cannot be created or opened
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)
    path = config.log_dir / LOG_FILE_NAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            path, maxBytes=config.log_max_bytes, backupCount=config.log_backup_count, encoding="utf-8",
        )
    return TimedRotatingFileHandler(path, when="midnight", backupCount=config.log_backup_count, encoding="utf-8")


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Replace the root logger's handlers with console and file handlers.

    Args:
        config: Config carrying the LOG_* settings
        verbose: Force DEBUG on the console regardless of LOG_LEVEL

    Returns:
        True if the file handler is installed, False when the log directory
        is unusable and only the console is logging
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.DEBUG)

    run_filter = ContextFilter()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO))
    console.setFormatter(_formatter(config, for_file=False))
    console.addFilter(run_filter)
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    try:
        file_handler = _file_handler(config)
    except OSError as e:
        logging.getLogger(__name__).warning(
            "Log directory unusable, logging to console only | dir=%s error=%s", config.log_dir, e,
        )
        return False

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_formatter(config, for_file=True))
    file_handler.addFilter(run_filter)
    root.addHandler(file_handler)
    return True
