"""Logging setup for the ``docchat`` logger tree.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where records go and how they look. Output goes to stderr so the
CLI's stdout stays clean for answers.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "docchat"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO during every request
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


class JSONExceptionFormatter(logging.Formatter):
    """One JSON object per line, with exception and docchat error details.

    Records logged by ``log_exception`` carry their structured payload in
    ``record.error``; it is emitted as-is under ``"error"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.filename,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        error = getattr(record, "error", None)
        if isinstance(error, dict):
            entry["error"] = error

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def _handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """(Re)configure the ``docchat`` logger; safe to call more than once.

    Args:
        level: Level name, case-insensitive. Unknown names fall back to INFO.
        log_file: Also append records to this file.
        json_format: Emit JSON lines instead of the pipe-delimited text form.

    Returns:
        The ``docchat`` logger.
    """
    formatter: logging.Formatter
    if json_format:
        formatter = JSONExceptionFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), formatter))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), formatter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
