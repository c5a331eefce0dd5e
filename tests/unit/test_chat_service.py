"""Unit tests for ChatService orchestration."""

import logging
from unittest.mock import MagicMock

import pytest

from docchat.core.domain import Role, SourceRef
from docchat.core.domain.exceptions import EmptyMessageError, MessageTooLongError
from docchat.core.services.chat_service import ChatService, render_document
from docchat.core.services.memory import ConversationMemory
from docchat.core.services.response_assembler import ResponseAssembler
from docchat.core.services.search_service import SearchService
from tests.conftest import make_document


@pytest.fixture
def history():
    return MagicMock()


@pytest.fixture
def service(memory_store, mock_llm, history):
    return ChatService(
        store=memory_store,
        search_service=SearchService(memory_store),
        assembler=ResponseAssembler(mock_llm, chunk_delay=0),
        history=history,
        context_results=2,
        max_message_length=100,
    )


class TestValidation:
    @pytest.mark.unit
    @pytest.mark.parametrize("message", ["", "   ", "\ufeff\n\t"])
    def test_blank_message_rejected(self, service, message):
        with pytest.raises(EmptyMessageError):
            service.ask(message, ConversationMemory())

    @pytest.mark.unit
    def test_long_message_rejected(self, service):
        with pytest.raises(MessageTooLongError):
            service.ask("x" * 101, ConversationMemory())

    @pytest.mark.unit
    def test_message_normalized(self, service):
        assert service.validate_message("  what   about\ufeff leave? ") == "what about leave?"


class TestDocumentContext:
    """Tests for selecting the documents an answer is grounded on."""

    @pytest.mark.unit
    def test_selected_documents_in_order(self, service):
        context, sources = service.build_document_context(["doc-leave", "doc-eval", "doc-leave"])

        assert [s.id for s in sources] == ["doc-leave", "doc-eval"]
        assert context.startswith("Document: Leave Rules\nContent: Employees receive")

    @pytest.mark.unit
    def test_missing_selected_documents_skipped(self, service):
        _, sources = service.build_document_context(["nope", "doc-eval"])

        assert sources == [SourceRef(id="doc-eval", title="Evaluation Policy")]

    @pytest.mark.unit
    def test_search_used_without_selection(self, service):
        _, sources = service.build_document_context(query="paid leave")

        assert sources[0].id == "doc-leave"
        assert len(sources) <= 2

    @pytest.mark.unit
    def test_no_matches_gives_empty_context(self, service):
        assert service.build_document_context(query="parking") == ("", [])

    @pytest.mark.unit
    def test_render_document_without_text_uses_description(self):
        doc = make_document("d", title="Scan", description="Scanned contract")

        assert render_document(doc) == "Document: Scan\nContent: Scan: Scanned contract"

    @pytest.mark.unit
    def test_render_document_ignores_extraction_placeholder(self):
        doc = make_document(
            "d",
            title="Scan",
            description="Scanned contract",
            text="Text extraction not available for this file type",
        )

        assert render_document(doc) == "Document: Scan\nContent: Scan: Scanned contract"


class TestAsk:
    """Tests for the synchronous and streaming entry points."""

    @pytest.mark.unit
    def test_ask_returns_answer_with_sources(self, service, mock_llm, history):
        memory = ConversationMemory()

        response = service.ask("When do reviews happen?", memory, user_id="u1")

        assert response.text == mock_llm.complete.return_value
        assert response.sources[0].id == "doc-eval"
        assert "Reviews happen twice a year" in mock_llm.complete.call_args[0][0]
        history.record.assert_called_once_with(
            "u1", "When do reviews happen?", response.text, ["Evaluation Policy"]
        )
        assert len(memory) == 2

    @pytest.mark.unit
    def test_history_failure_does_not_break_chat(self, service, history, caplog):
        history.record.side_effect = RuntimeError("disk full")

        with caplog.at_level(logging.ERROR, logger="docchat.core.services.chat_service"):
            response = service.ask("hello", ConversationMemory())

        assert response.text
        record = next(r for r in caplog.records if r.msg.startswith("Failed to save"))
        assert record.getMessage() == "Failed to save chat history: disk full"
        assert record.args

    @pytest.mark.unit
    def test_ask_stream_records_before_iteration(self, service, history):
        memory = ConversationMemory()

        frames = service.ask_stream("What about leave?", memory)

        assert len(memory) == 2
        history.record.assert_called_once()
        frames = list(frames)
        assert frames[-1].is_final
        assert frames[-1].content == memory.history[-1].content
        assert memory.history[0].role is Role.USER

    @pytest.mark.unit
    def test_ask_without_history_adapter(self, memory_store, mock_llm):
        service = ChatService(
            memory_store, SearchService(memory_store), ResponseAssembler(mock_llm, chunk_delay=0)
        )

        assert service.ask("hello", ConversationMemory()).text
