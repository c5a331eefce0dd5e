"""JSON file adapter for document metadata and extracted text.

The collection lives in one ``documents.json`` file. Every
read-modify-write runs under a single writer lock and is written through
a temporary file plus atomic rename, so concurrent writers in this
process cannot lose each other's updates and readers never observe a
half-written file. Updates carry the document ``version`` they were based
on (optimistic versioning).
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from ...core.domain import Document, DocumentPage
from ...core.domain.exceptions import (
    DocumentStoreCorruptedError,
    DocumentStoreError,
    DocumentVersionConflictError,
    MalformedDocumentError,
)
from ...core.ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)


class JsonDocumentStore(DocumentStorePort):
    """Document store backed by a JSON array of camelCase records."""

    def __init__(self, path: str | Path = "data/documents.json") -> None:
        """Initialize the store, creating an empty collection if needed.

        Args:
            path: Location of the JSON collection file.
        """
        self.path = Path(path)
        self._lock = threading.RLock()
        self._ensure_collection()

    def _ensure_collection(self) -> None:
        """Create the parent directory and an empty collection file."""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                if not self.path.exists():
                    self._write_records([])
            except OSError as e:
                raise DocumentStoreError(
                    "Failed to initialize document store", cause=e, context={"path": str(self.path)}
                ) from e

    def _read_records(self) -> list[Any]:
        """Load the raw collection.

        Raises:
            DocumentStoreError: If the file cannot be read.
            DocumentStoreCorruptedError: If the content is not a JSON array.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentStoreError(
                "Failed to read document store", cause=e, context={"path": str(self.path)}
            ) from e

        try:
            records = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as e:
            raise DocumentStoreCorruptedError(
                "Document collection is not valid JSON", cause=e, context={"path": str(self.path)}
            ) from e

        if not isinstance(records, list):
            raise DocumentStoreCorruptedError(
                "Document collection must be a JSON array",
                context={"path": str(self.path), "type": type(records).__name__},
            )
        return records

    def _write_records(self, records: list[Any]) -> None:
        """Atomically replace the collection file."""
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise DocumentStoreError(
                "Failed to write document store", cause=e, context={"path": str(self.path)}
            ) from e

    def _stored_version(self, record: dict[str, Any]) -> int:
        try:
            return int(record.get("version") or 1)
        except (TypeError, ValueError) as e:
            raise MalformedDocumentError(
                "Document record has an invalid version",
                cause=e,
                context={"id": record.get("id"), "version": record.get("version")},
            ) from e

    def _parse_records(self, records: list[Any]) -> list[Document]:
        """Convert records to documents, skipping malformed ones."""
        documents = []
        for index, record in enumerate(records):
            try:
                documents.append(Document.from_dict(record))
            except MalformedDocumentError as e:
                logger.warning("Skipping malformed document record #%d: %s", index, e.message)
        return documents

    def list_all(self) -> list[Document]:
        """Return every parseable document, active or not, in store order."""
        with self._lock:
            records = self._read_records()
        return self._parse_records(records)

    def list_active(self) -> list[Document]:
        return [doc for doc in self.list_all() if doc.is_active]

    def get_by_id(self, doc_id: str) -> Document | None:
        for doc in self.list_active():
            if doc.doc_id == doc_id:
                return doc
        return None

    def save(self, document: Document) -> Document:
        """Insert a new document or update an existing one.

        An update must carry the version currently stored; the stored
        version is then incremented.

        Raises:
            DocumentVersionConflictError: If the stored version differs.
        """
        with self._lock:
            records = self._read_records()

            for index, record in enumerate(records):
                if isinstance(record, dict) and record.get("id") == document.doc_id:
                    stored_version = self._stored_version(record)
                    if stored_version != document.version:
                        raise DocumentVersionConflictError(
                            "Document was modified by another writer",
                            context={
                                "id": document.doc_id,
                                "expected_version": document.version,
                                "stored_version": stored_version,
                            },
                        )
                    saved = replace(document, version=stored_version + 1)
                    records[index] = saved.to_dict()
                    self._write_records(records)
                    logger.info("Updated document %s (version %d)", saved.doc_id, saved.version)
                    return saved

            records.append(document.to_dict())
            self._write_records(records)

        logger.info("Saved document %s", document.doc_id)
        return document

    def soft_delete(self, doc_id: str) -> bool:
        with self._lock:
            records = self._read_records()
            for record in records:
                if isinstance(record, dict) and record.get("id") == doc_id:
                    record["isActive"] = False
                    record["version"] = self._stored_version(record) + 1
                    self._write_records(records)
                    logger.info("Soft-deleted document %s", doc_id)
                    return True
        return False

    def list_documents(
        self,
        query: str | None = None,
        tags: list[str] | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> DocumentPage:
        """List active documents newest first with optional filters.

        Args:
            query: Case-insensitive substring matched against title,
                description, extracted text and tags.
            tags: Keep documents carrying at least one of these tags.
            limit: Page size.
            offset: Number of documents to skip.

        Returns:
            DocumentPage with the page, the filtered total and ``has_more``.
        """
        documents = self.list_active()

        if query:
            needle = query.lower()
            documents = [
                doc
                for doc in documents
                if needle in doc.title.lower()
                or needle in doc.description.lower()
                or needle in doc.extracted_text.lower()
                or any(needle in tag.lower() for tag in doc.tags)
            ]

        if tags:
            documents = [doc for doc in documents if any(tag in doc.tags for tag in tags)]

        documents.sort(key=lambda doc: doc.uploaded_at, reverse=True)

        total = len(documents)
        return DocumentPage(
            documents=documents[offset : offset + limit],
            total=total,
            has_more=offset + limit < total,
        )
