"""Use-case service for answering chat messages grounded in documents."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..domain import ChatResponse, Document, SourceRef, StreamFrame
from ..domain.exceptions import EmptyMessageError, MessageTooLongError
from ..domain.utils import normalize_text
from ..ports.chat_history_port import ChatHistoryPort
from ..ports.document_store_port import DocumentStorePort
from .memory import ConversationMemory
from .response_assembler import ResponseAssembler
from .search_service import SearchService

logger = logging.getLogger(__name__)


def render_document(doc: Document) -> str:
    """Render one document as a prompt context block."""
    content = doc.searchable_text.strip()
    if not content:
        content = f"{doc.title}: {doc.description or 'No content available'}"
    return f"Document: {doc.title}\nContent: {content}"


class ChatService:
    """Application service orchestrating retrieval, generation and history."""

    def __init__(
        self,
        store: DocumentStorePort,
        search_service: SearchService,
        assembler: ResponseAssembler,
        history: ChatHistoryPort | None = None,
        context_results: int = 3,
        max_message_length: int = 4000,
    ) -> None:
        self.store = store
        self.search_service = search_service
        self.assembler = assembler
        self.history = history
        self.context_results = context_results
        self.max_message_length = max_message_length

    def validate_message(self, message: str) -> str:
        """Normalize a message and reject empty or oversized input."""
        clean = normalize_text(message or "")
        if not clean:
            raise EmptyMessageError("Message cannot be empty or whitespace only")
        if len(clean) > self.max_message_length:
            raise MessageTooLongError(
                "Message exceeds maximum allowed length",
                context={"length": len(clean), "max_length": self.max_message_length},
            )
        return clean

    def build_document_context(
        self,
        document_ids: list[str] | None = None,
        query: str | None = None,
    ) -> tuple[str, list[SourceRef]]:
        """Collect document text for the prompt.

        Explicitly selected documents take precedence; otherwise the top
        search hits for ``query`` are used.

        Args:
            document_ids: Documents chosen by the user, in display order.
            query: Query to search with when no documents were chosen.

        Returns:
            Tuple of (context text, sources). Both empty when nothing applies.
        """
        documents: list[Document] = []

        if document_ids:
            for doc_id in dict.fromkeys(document_ids):
                doc = self.store.get_by_id(doc_id)
                if doc is None:
                    logger.info("Selected document %s not found, skipping", doc_id)
                    continue
                documents.append(doc)
        elif query:
            results = self.search_service.search(query, limit=self.context_results)
            documents = [r.document for r in results if r.relevance_score > 0]

        context = "\n\n".join(render_document(doc) for doc in documents)
        sources = [SourceRef(id=doc.doc_id, title=doc.title) for doc in documents]
        return context, sources

    def _record(self, user_id: str, message: str, response: ChatResponse) -> None:
        if self.history is None:
            return
        try:
            self.history.record(
                user_id, message, response.text, [source.title for source in response.sources]
            )
        except Exception as e:
            logger.error("Failed to save chat history: %s", e)

    def ask(
        self,
        message: str,
        memory: ConversationMemory,
        document_ids: list[str] | None = None,
        user_id: str = "anonymous",
    ) -> ChatResponse:
        """Answer a message synchronously.

        Raises:
            EmptyMessageError: If the message is blank.
            MessageTooLongError: If the message is too long.
            DocumentStoreError: If the document store cannot be read.
        """
        clean = self.validate_message(message)
        context, sources = self.build_document_context(document_ids, query=clean)

        response = self.assembler.generate(clean, memory, context or None, sources)
        self._record(user_id, clean, response)
        return response

    def ask_stream(
        self,
        message: str,
        memory: ConversationMemory,
        document_ids: list[str] | None = None,
        user_id: str = "anonymous",
    ) -> Iterator[StreamFrame]:
        """Answer a message as a frame stream.

        The answer is generated and recorded (memory and history) before the
        stream is returned; iterating only paces the delivery.
        """
        clean = self.validate_message(message)
        context, sources = self.build_document_context(document_ids, query=clean)

        response = self.assembler.generate(clean, memory, context or None, sources)
        self._record(user_id, clean, response)
        return self.assembler.stream_frames(response.text, response.sources)
