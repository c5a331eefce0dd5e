"""Root of the docchat exception hierarchy.

Every docchat error carries a stable ``error_code`` (``DC_<AREA>_<NNN>``),
the place it was raised from and an optional underlying cause. ``to_dict``
is the single serialized form shared by HTTP error bodies, SSE error
events and the CLI.
"""

import sys
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from types import FrameType
from typing import Any


@dataclass(frozen=True)
class RaiseSite:
    """Code location that constructed an error."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def from_frame(cls, frame: FrameType | None) -> "RaiseSite":
        if frame is None:
            return cls("<unknown>", "<unknown>", "<unknown>", 0)
        owner = frame.f_locals.get("self")
        return cls(
            class_name=type(owner).__name__ if owner is not None else "<module>",
            method_name=frame.f_code.co_name,
            file_name=Path(frame.f_code.co_filename).name,
            line_number=frame.f_lineno,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


def _caller_outside_hierarchy() -> FrameType | None:
    """First frame that is not a DocChatError constructor."""
    frame = sys._getframe(1)
    while frame is not None and isinstance(frame.f_locals.get("self"), DocChatError):
        frame = frame.f_back
    return frame


class DocChatError(Exception):
    """Base exception for all docchat errors.

    Example:
        raise DocumentStoreCorruptedError(
            "Document collection is not valid JSON",
            cause=e,
            context={"path": str(path)},
        ) from e
    """

    error_code: str = "DC_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = dict(context or {})
        self.location = RaiseSite.from_frame(_caller_outside_hierarchy())

    def trace_lines(self) -> list[str]:
        """Formatted traceback of this error and its cause chain."""
        return [
            line
            for chunk in traceback.format_exception(self)
            for line in chunk.splitlines()
            if line.strip()
        ]

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Serialize for JSON error responses and structured logs.

        Args:
            include_trace: Add ``stack_trace`` (debug mode only).
        """
        result: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            },
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            result["context"] = self.extra_context
        if self.cause is not None:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace:
            result["stack_trace"] = self.trace_lines()
        return result
