"""Response assembly: one-shot answers and incremental frame streams.

The stream is a post-hoc chunking of an answer that has already been
fully generated (or produced by the fallback responder). It is not
token-level incremental generation from the backend; the backend is
called exactly once per message either way.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Generator, Iterator

from ..domain import ChatResponse, Role, SourceRef, StreamFrame
from ..domain.utils import truncate
from ..ports.llm_port import CompletionParams, CompletionPort
from .fallback import FallbackResponder
from .memory import ConversationMemory, EnhancedConversationMemory
from .prompts import (
    HISTORY_SECTION,
    REFERENCE_SECTION,
    STYLE_INSTRUCTIONS,
    SYSTEM_PROMPT,
    TURN_SECTION,
)

logger = logging.getLogger(__name__)

SENTENCE_TERMINALS = ".!?。！？"

# Each piece is a clause plus its terminal punctuation and trailing
# whitespace, so joining all pieces reproduces the text exactly.
_CHUNK_PATTERN = re.compile(rf"[^{SENTENCE_TERMINALS}]*(?:[{SENTENCE_TERMINALS}]+\s*|$)")

_MARKUP_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^【.*?】\s*", re.MULTILINE), ""),
    (re.compile(r"^#+\s*", re.MULTILINE), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"^[ \t]*[•\-*]\s+", re.MULTILINE), ""),
    (re.compile(r"^[:：]\s*", re.MULTILINE), ""),
    (re.compile("[\U0001f300-\U0001faff\u2600-\u27bf]"), ""),
    (re.compile(r"[ \t]+\n"), "\n"),
    (re.compile(r"\n{3,}"), "\n\n"),
]


def split_into_chunks(text: str) -> list[str]:
    """Split text after sentence-terminal punctuation, keeping the punctuation.

    ``"".join(split_into_chunks(text)) == text`` always holds.
    """
    return [match.group(0) for match in _CHUNK_PATTERN.finditer(text) if match.group(0)]


def is_usable(text: str) -> bool:
    """Return False for empty or degenerate output (no letters or digits)."""
    return any(ch.isalnum() for ch in text)


class ResponseAssembler:
    """Turns a message into an answer, as one response or a frame stream.

    Both paths call the completion backend once, substitute the fallback
    responder on any failure, and record the user and assistant turns in
    the memory exactly once.
    """

    def __init__(
        self,
        llm: CompletionPort,
        fallback: FallbackResponder | None = None,
        params: CompletionParams | None = None,
        chunk_delay: float = 0.05,
        target_length: int = 400,
        max_sentences: int = 3,
        max_context_chars: int = 1000,
        min_fragment_length: int = 5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the assembler.

        Args:
            llm: Completion backend.
            fallback: Responder used when the backend fails.
            params: Sampling parameters for every completion call.
            chunk_delay: Seconds to wait between streamed frames.
            target_length: Answers longer than this are cut to
                ``max_sentences`` sentences.
            max_sentences: Sentences kept when truncating.
            max_context_chars: Document context included in the prompt.
            min_fragment_length: Trailing unterminated fragments shorter than
                this are dropped.
            sleep: Delay function, replaceable in tests.
        """
        self.llm = llm
        self.fallback = fallback or FallbackResponder()
        self.params = params or CompletionParams()
        self.chunk_delay = chunk_delay
        self.target_length = target_length
        self.max_sentences = max_sentences
        self.max_context_chars = max_context_chars
        self.min_fragment_length = min_fragment_length
        self._sleep = sleep

    def build_prompt(
        self,
        message: str,
        memory: ConversationMemory,
        document_context: str = "",
    ) -> str:
        """Assemble system instructions, reference material, history and the message."""
        sections = [SYSTEM_PROMPT.strip()]

        if isinstance(memory, EnhancedConversationMemory):
            style_instruction = STYLE_INSTRUCTIONS[memory.infer_style()]
            if style_instruction:
                sections.append(style_instruction)
            conversation = memory.get_summary_context()
        else:
            conversation = memory.get_context()

        if document_context:
            sections.append(
                REFERENCE_SECTION.format(
                    document_context=truncate(document_context, self.max_context_chars)
                )
            )

        if conversation:
            sections.append(HISTORY_SECTION.format(conversation=conversation.rstrip("\n")))

        sections.append(TURN_SECTION.format(message=message))
        return "\n\n".join(sections)

    def post_process(self, text: str) -> str:
        """Strip structural markup and trim over-long or ragged answers."""
        cleaned = text
        for pattern, replacement in _MARKUP_RULES:
            cleaned = pattern.sub(replacement, cleaned)
        cleaned = cleaned.strip()

        if len(cleaned) > self.target_length:
            cleaned = "".join(split_into_chunks(cleaned)[: self.max_sentences]).strip()

        pieces = split_into_chunks(cleaned)
        if len(pieces) > 1:
            tail = pieces[-1].strip()
            if tail[-1:] not in SENTENCE_TERMINALS and len(tail) < self.min_fragment_length:
                cleaned = "".join(pieces[:-1]).strip()

        return cleaned

    def resolve_document_context(
        self, memory: ConversationMemory, document_context: str | None
    ) -> str:
        """Explicit context wins; otherwise reuse the conversation's recent one."""
        if document_context and document_context.strip():
            return document_context
        return memory.get_recent_document_context()

    def produce_answer(
        self,
        message: str,
        memory: ConversationMemory,
        document_context: str = "",
    ) -> tuple[str, bool]:
        """Call the backend once and return ``(answer, used_fallback)``.

        Never raises for backend failures: exceptions and unusable output
        are logged and replaced by the fallback responder's answer.
        """
        prompt = self.build_prompt(message, memory, document_context)

        try:
            raw = self.llm.complete(prompt, self.params)
        except Exception as e:
            logger.warning("Completion backend failed, using fallback answer: %s", e)
            return self.fallback.respond(message, document_context), True

        answer = self.post_process(raw or "")
        if not is_usable(answer):
            logger.warning("Completion backend returned unusable output, using fallback answer")
            return self.fallback.respond(message, document_context), True

        return answer, False

    def _commit(
        self, memory: ConversationMemory, message: str, answer: str, document_context: str
    ) -> None:
        memory.add_turn(Role.USER, message, document_context)
        memory.add_turn(Role.ASSISTANT, answer, document_context)

    def generate(
        self,
        message: str,
        memory: ConversationMemory,
        document_context: str | None = None,
        sources: list[SourceRef] | None = None,
    ) -> ChatResponse:
        """Answer ``message`` synchronously and record the exchange in ``memory``."""
        context = self.resolve_document_context(memory, document_context)
        answer, used_fallback = self.produce_answer(message, memory, context)
        self._commit(memory, message, answer, context)
        return ChatResponse(text=answer, sources=list(sources or []), used_fallback=used_fallback)

    def generate_streaming(
        self,
        message: str,
        memory: ConversationMemory,
        document_context: str | None = None,
        sources: list[SourceRef] | None = None,
    ) -> Iterator[StreamFrame]:
        """Answer ``message`` and return a lazy stream of cumulative frames.

        Generation and the memory commit happen before this method returns,
        so the exchange is recorded exactly once whether or not the caller
        consumes the stream to the end.
        """
        response = self.generate(message, memory, document_context, sources)
        return self.stream_frames(response.text, response.sources)

    def stream_frames(
        self, text: str, sources: list[SourceRef] | None = None
    ) -> Generator[StreamFrame, None, None]:
        """Yield one cumulative frame per sentence piece, then a terminal frame.

        The generator holds no external state, so a consumer may stop
        iterating at any point.
        """
        frame_sources = list(sources or [])
        emitted = ""

        for index, piece in enumerate(split_into_chunks(text)):
            if index > 0 and self.chunk_delay > 0:
                self._sleep(self.chunk_delay)
            emitted += piece
            yield StreamFrame(content=emitted, sources=frame_sources)

        yield StreamFrame(content=emitted, sources=frame_sources, is_final=True)
