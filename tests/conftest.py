"""
Pytest configuration and shared fixtures.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from docchat.core.domain import Document
from docchat.core.ports.document_store_port import DocumentStorePort
from docchat.core.ports.llm_port import CompletionPort


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (API and CLI surfaces)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


class InMemoryDocumentStore(DocumentStorePort):
    """Document store kept in a list, preserving insertion order."""

    def __init__(self, documents=None):
        self.documents = list(documents or [])

    def list_active(self):
        return [doc for doc in self.documents if doc.is_active]

    def get_by_id(self, doc_id):
        for doc in self.list_active():
            if doc.doc_id == doc_id:
                return doc
        return None

    def save(self, document):
        self.documents = [d for d in self.documents if d.doc_id != document.doc_id]
        self.documents.append(document)
        return document

    def soft_delete(self, doc_id):
        for doc in self.documents:
            if doc.doc_id == doc_id:
                doc.is_active = False
                return True
        return False


def make_document(doc_id, title="", text="", description="", tags=None, active=True, age_days=0):
    """Build a document with an upload time ``age_days`` in the past."""
    return Document(
        doc_id=doc_id,
        title=title,
        description=description,
        tags=list(tags or []),
        extracted_text=text,
        is_active=active,
        uploaded_at=datetime(2024, 4, 1, tzinfo=UTC) - timedelta(days=age_days),
    )


@pytest.fixture
def sample_documents():
    """A small mixed-language collection."""
    return [
        make_document(
            "doc-eval",
            title="Evaluation Policy",
            description="How annual performance reviews work",
            tags=["hr", "evaluation"],
            text=(
                "Reviews happen twice a year. Managers rate each goal on a five point scale. "
                "Bonuses follow the final evaluation."
            ),
        ),
        make_document(
            "doc-leave",
            title="Leave Rules",
            description="Paid leave and holidays",
            tags=["hr", "leave"],
            text="Employees receive twenty days of paid leave. Unused leave carries over once.",
            age_days=3,
        ),
        make_document(
            "doc-ja",
            title="会社規定",
            description="就業規則の概要",
            tags=["規定"],
            text="会社の就業時間は九時から十八時です。残業は事前申請が必要です。",
            age_days=7,
        ),
    ]


@pytest.fixture
def memory_store(sample_documents):
    """In-memory store seeded with the sample documents."""
    return InMemoryDocumentStore(sample_documents)


@pytest.fixture
def mock_llm():
    """Completion backend mock answering with a fixed sentence pair."""
    llm = MagicMock(spec=CompletionPort)
    llm.complete.return_value = "Reviews happen twice a year. Bonuses follow the evaluation."
    return llm


@pytest.fixture
def failing_llm():
    """Completion backend mock that always raises."""
    llm = MagicMock(spec=CompletionPort)
    llm.complete.side_effect = ConnectionError("backend unavailable")
    return llm
