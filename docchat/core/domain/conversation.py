"""Conversation models shared by the memory and the response assembler."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Role(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"

    @property
    def label(self) -> str:
        """Transcript label, e.g. ``User``."""
        return self.value.capitalize()


class ConversationStyle(Enum):
    """Tone inferred from the user's wording.

    Only steers the tone instruction given to the completion backend;
    never affects scoring or memory bounds.
    """

    FORMAL = "formal"
    CASUAL = "casual"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ConversationTurn:
    """A single immutable dialogue turn."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    document_context: str | None = None


@dataclass
class ChatHistoryEntry:
    """A persisted question/answer exchange."""

    entry_id: int
    user_id: str
    message: str
    response: str
    sources: list[str]
    created_at: str


@dataclass
class ChatHistoryPage:
    """One page of persisted chat history."""

    entries: list[ChatHistoryEntry]
    total: int
    has_more: bool
