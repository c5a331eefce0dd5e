"""Error translation shared by the API, the SSE stream and the CLI.

Any exception, docchat's own or not, is turned into the same payload shape
(``error`` / ``location`` / ``context`` / ``cause`` / ``stack_trace``),
logged once with its traceback, and given an HTTP status.
"""

import logging
import traceback
from pathlib import Path
from typing import Any

from ...core.domain.exceptions import (
    DocChatError,
    DocumentNotFoundError,
    DocumentVersionConflictError,
    LLMConnectionError,
    LLMRateLimitError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FOREIGN_ERROR_CODE = "PYTHON_ERR"

# First match wins, so subclasses precede their bases.
HTTP_STATUS_BY_ERROR: list[tuple[Any, int]] = [
    (ValidationError, 400),
    (DocumentNotFoundError, 404),
    (DocumentVersionConflictError, 409),
    (LLMRateLimitError, 429),
    (LLMConnectionError, 503),
    (DocChatError, 500),
    (ValueError, 400),
    ((ConnectionError, TimeoutError), 503),
]


def get_http_status_code(exc: Exception) -> int:
    """HTTP status for ``exc``; 500 when nothing more specific applies."""
    for error_types, status in HTTP_STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return status
    return 500


def format_exception_json(
    exc: Exception,
    include_trace: bool = False,
    extra_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the JSON error payload for any exception.

    Foreign exceptions get the ``PYTHON_ERR`` code and the location of the
    innermost traceback frame.
    """
    if isinstance(exc, DocChatError):
        payload = exc.to_dict(include_trace=include_trace)
    else:
        frames = traceback.extract_tb(exc.__traceback__)
        innermost = frames[-1] if frames else None
        payload = {
            "error": {"type": type(exc).__name__, "code": FOREIGN_ERROR_CODE, "message": str(exc)},
            "location": {
                "class": "<unknown>",
                "method": innermost.name if innermost else "<unknown>",
                "file": Path(innermost.filename).name if innermost else "<unknown>",
                "line": innermost.lineno if innermost else 0,
            },
        }
        if include_trace:
            payload["stack_trace"] = [
                line for line in traceback.format_exception(exc) if line.strip()
            ]

    if extra_context:
        payload["context"] = {**payload.get("context", {}), **extra_context}
    return payload


def log_exception(
    exc: Exception,
    log: logging.Logger | None = None,
    level: int = logging.ERROR,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """Log ``exc`` once with its code, context and traceback.

    The payload travels in the ``error`` record attribute, which the JSON
    log formatter emits as a structured field.
    """
    payload = format_exception_json(exc, extra_context=extra_context)
    (log or logger).log(
        level,
        "%s [%s]: %s",
        payload["error"]["type"],
        payload["error"]["code"],
        payload["error"]["message"],
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"error": payload},
    )
