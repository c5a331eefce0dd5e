"""Document Store Port Interface."""

from abc import ABC, abstractmethod

from ..domain import Document


class DocumentStorePort(ABC):
    """Abstract interface for document persistence.

    The search index only uses the read operations. Implementations own
    their write synchronisation; callers never lock.
    """

    @abstractmethod
    def list_active(self) -> list[Document]:
        """Return all active documents in store order."""
        ...

    @abstractmethod
    def get_by_id(self, doc_id: str) -> Document | None:
        """Return the active document with ``doc_id`` or None."""
        ...

    @abstractmethod
    def save(self, document: Document) -> Document:
        """Insert or update a document and return the stored version."""
        ...

    @abstractmethod
    def soft_delete(self, doc_id: str) -> bool:
        """Mark a document inactive. Returns False if it does not exist."""
        ...
