"""Bounded conversational memory.

A memory keeps at most ``max_turns`` dialogue turns. The ``max_tokens``
budget is applied only when a transcript is built for the completion
backend, never by evicting stored turns.
"""

from __future__ import annotations

import math
import re
from collections import deque

from ..domain import ConversationStyle, ConversationTurn, Role
from ..domain.exceptions import InvalidRoleError

CHARS_PER_TOKEN = 4
DOCUMENT_CONTEXT_LOOKBACK = 3
SUMMARY_WORDS_PER_TURN = 3
SUMMARY_MIN_WORD_LENGTH = 3
SUMMARY_MAX_TOPICS = 8


def estimate_tokens(text: str) -> int:
    """Approximate the token count of ``text`` as ``ceil(chars / 4)``.

    A stand-in for a real tokenizer; swapping it out does not change the
    memory's eviction contract.
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _coerce_role(role: Role | str) -> Role:
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).lower())
    except ValueError as e:
        raise InvalidRoleError(
            f"Unknown conversation role: {role!r}", cause=e, context={"role": str(role)}
        ) from e


class ConversationMemory:
    """Ordered, capacity-bounded buffer of dialogue turns.

    Not safe for concurrent mutation; one instance belongs to exactly one
    in-flight conversation.
    """

    def __init__(self, max_turns: int = 10, max_tokens: int = 2000) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self.max_tokens = max_tokens
        self._history: deque[ConversationTurn] = deque()

    def __len__(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple[ConversationTurn, ...]:
        """Turns in chronological order."""
        return tuple(self._history)

    def add_turn(
        self,
        role: Role | str,
        content: str,
        document_context: str | None = None,
    ) -> ConversationTurn:
        """Append a turn, evicting the oldest turns beyond ``max_turns``."""
        turn = ConversationTurn(
            role=_coerce_role(role),
            content=content,
            document_context=document_context or None,
        )
        self._history.append(turn)
        while len(self._history) > self.max_turns:
            self._history.popleft()
        return turn

    def get_context(self, turns: int | None = None) -> str:
        """Build a transcript of the most recent turns within the token budget.

        Turns are taken newest first until adding one more would push the
        estimate over ``max_tokens``; the result reads oldest first.

        Args:
            turns: Optionally consider only the last ``turns`` turns.
        """
        if self.max_tokens <= 0:
            return ""

        candidates = list(self._history)
        if turns is not None:
            candidates = candidates[-turns:] if turns > 0 else []

        transcript = ""
        for turn in reversed(candidates):
            extended = f"{turn.role.label}: {turn.content}\n" + transcript
            if estimate_tokens(extended) > self.max_tokens:
                break
            transcript = extended

        return transcript

    def get_recent_document_context(self) -> str:
        """Return the newest non-empty document context among the last 3 turns."""
        recent = list(self._history)[-DOCUMENT_CONTEXT_LOOKBACK:]
        for turn in reversed(recent):
            if turn.document_context:
                return turn.document_context
        return ""

    def get_topics(self) -> list[str]:
        """Leading words of each user turn, deduplicated in first-seen order."""
        topics: dict[str, None] = {}
        for turn in self._history:
            if turn.role is not Role.USER:
                continue
            words = [w for w in turn.content.split() if len(w) >= SUMMARY_MIN_WORD_LENGTH]
            for word in words[:SUMMARY_WORDS_PER_TURN]:
                topics.setdefault(word, None)
        return list(topics)

    def get_summary(self) -> str:
        """Short advisory label of what the user has asked about."""
        topics = self.get_topics()
        if not topics:
            return ""
        return "Topics discussed: " + ", ".join(topics[:SUMMARY_MAX_TOPICS])

    def clear(self) -> None:
        """Forget every turn (session reset)."""
        self._history.clear()


FORMAL_MARKERS = (
    "please",
    "could you",
    "would you",
    "kindly",
    "thank you",
    "です",
    "ます",
    "ください",
    "お願い",
    "いただけ",
)
CASUAL_MARKERS = (
    "hey",
    "yeah",
    "thanks!",
    "cool",
    "lol",
    "gonna",
    "wanna",
    "だよ",
    "じゃん",
    "だね",
    "かな",
)
_WORD_MARKER = re.compile(r"^[a-z !]+$")


def _count_markers(text: str, markers: tuple[str, ...]) -> int:
    count = 0
    for marker in markers:
        if _WORD_MARKER.match(marker):
            count += len(re.findall(rf"(?<!\w){re.escape(marker)}(?!\w)", text))
        else:
            count += text.count(marker)
    return count


class EnhancedConversationMemory(ConversationMemory):
    """Memory with a summary view for long conversations and tone inference."""

    def __init__(
        self,
        max_turns: int = 15,
        max_tokens: int = 3000,
        summary_threshold: int = 6,
        recent_turns: int = 4,
    ) -> None:
        super().__init__(max_turns=max_turns, max_tokens=max_tokens)
        self.summary_threshold = summary_threshold
        self.recent_turns = recent_turns

    def get_summary_context(self) -> str:
        """Summary line plus the recent transcript once the dialogue is long.

        Short conversations get the plain budgeted transcript.
        """
        if len(self) <= self.summary_threshold:
            return self.get_context()

        summary = self.get_summary()
        recent = self.get_context(turns=self.recent_turns)
        if not summary:
            return recent

        combined = f"{summary}\n\n{recent}"
        if estimate_tokens(combined) > self.max_tokens:
            return recent
        return combined

    def infer_style(self) -> ConversationStyle:
        """Infer formal, casual or neutral tone from the user's wording."""
        user_text = " ".join(
            turn.content.lower() for turn in self._history if turn.role is Role.USER
        )
        if not user_text:
            return ConversationStyle.NEUTRAL

        formal = _count_markers(user_text, FORMAL_MARKERS)
        casual = _count_markers(user_text, CASUAL_MARKERS)

        if formal > casual:
            return ConversationStyle.FORMAL
        if casual > formal:
            return ConversationStyle.CASUAL
        return ConversationStyle.NEUTRAL
