"""Response models produced by the response assembler."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class SourceRef:
    """Reference to a document used to ground an answer."""

    id: str
    title: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title}


@dataclass
class StreamFrame:
    """One unit of incremental output.

    ``content`` is cumulative: each frame carries the whole answer emitted
    so far. The terminal frame has ``is_final=True`` and repeats the full
    answer so a consumer that only keeps the last frame still has it.
    """

    content: str
    sources: list[SourceRef] = field(default_factory=list)
    is_final: bool = False


@dataclass
class ChatResponse:
    """A complete answer to one chat message.

    Attributes:
        text: Final answer text (generated or fallback).
        sources: Documents the answer was grounded on.
        used_fallback: True when the completion backend failed or produced
            unusable output and a deterministic fallback was substituted.
        timestamp: When the answer was produced.
    """

    text: str
    sources: list[SourceRef] = field(default_factory=list)
    used_fallback: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
