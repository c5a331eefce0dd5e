"""Document and search result models for the chat engine."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .exceptions import MalformedDocumentError

# Texts the upload pipeline stores in place of real content when
# extraction fails or is unsupported. Compared lower-cased.
EXTRACTION_PLACEHOLDERS = (
    "text extraction not available for this file type",
    "text extraction failed",
    "pdf text extraction is being processed",
    "pdf content extraction requires pdf-parse library",
    "word document content extraction requires mammoth library",
    "powerpoint content extraction not yet implemented",
    "content extraction not supported for this file type",
)


def is_extraction_placeholder(text: str) -> bool:
    """Return True if ``text`` is an extraction failure marker, not content.

    Surrounding brackets and a trailing period are ignored, and a marker
    followed by further detail still counts.
    """
    normalized = text.strip().strip("[]").strip().lower()
    if not normalized:
        return False
    return any(normalized.startswith(marker) for marker in EXTRACTION_PLACEHOLDERS)


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass
class Document:
    """An uploaded document and the text extracted from it.

    Documents are owned by the document store. The search index only ever
    holds a read-only view of them for the duration of one call.

    Attributes:
        doc_id: Unique identifier.
        title: Display title.
        description: Free-text description supplied at upload time.
        tags: Ordered tag names.
        extracted_text: Text extracted from the file. May be empty or a
            placeholder when extraction failed.
        is_active: False once the document has been soft-deleted.
        uploaded_at: Upload time, used for listing order only.
        version: Incremented by the store on every update.
    """

    doc_id: str
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    extracted_text: str = ""
    is_active: bool = True
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    file_name: str = ""
    original_file_name: str = ""
    file_path: str = ""
    file_size: int = 0
    mime_type: str = ""
    uploaded_by: str = ""
    version: int = 1

    @property
    def tags_text(self) -> str:
        """Tags joined by single spaces, the form used for matching."""
        return " ".join(self.tags)

    @property
    def searchable_text(self) -> str:
        """Extracted text, or an empty string when it is a failure placeholder."""
        if is_extraction_placeholder(self.extracted_text):
            return ""
        return self.extracted_text

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted collection's camelCase keys."""
        return {
            "id": self.doc_id,
            "title": self.title,
            "description": self.description,
            "fileName": self.file_name,
            "originalFileName": self.original_file_name,
            "filePath": self.file_path,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "extractedText": self.extracted_text,
            "tags": list(self.tags),
            "uploadedBy": self.uploaded_by,
            "uploadedAt": self.uploaded_at.isoformat(),
            "version": self.version,
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        """Build a document from a persisted record.

        Raises:
            MalformedDocumentError: If the record has no id or a field has
                the wrong type.
        """
        if not isinstance(data, dict):
            raise MalformedDocumentError(
                "Document record is not an object", context={"type": type(data).__name__}
            )

        doc_id = data.get("id")
        if not isinstance(doc_id, str) or not doc_id:
            raise MalformedDocumentError("Document record has no id", context={"record": data})

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise MalformedDocumentError("Document tags must be strings", context={"id": doc_id})

        text_fields = {}
        for key in ("title", "description", "extractedText"):
            value = data.get(key) or ""
            if not isinstance(value, str):
                raise MalformedDocumentError(
                    f"Document field '{key}' must be a string", context={"id": doc_id}
                )
            text_fields[key] = value

        try:
            uploaded_at = _parse_timestamp(data.get("uploadedAt") or datetime.now(UTC))
            file_size = int(data.get("fileSize") or 0)
            version = int(data.get("version") or 1)
        except (TypeError, ValueError) as e:
            raise MalformedDocumentError(
                "Document record has invalid values", cause=e, context={"id": doc_id}
            ) from e

        return cls(
            doc_id=doc_id,
            title=text_fields["title"],
            description=text_fields["description"],
            tags=list(tags),
            extracted_text=text_fields["extractedText"],
            is_active=bool(data.get("isActive", True)),
            uploaded_at=uploaded_at,
            file_name=str(data.get("fileName") or ""),
            original_file_name=str(data.get("originalFileName") or ""),
            file_path=str(data.get("filePath") or ""),
            file_size=file_size,
            mime_type=str(data.get("mimeType") or ""),
            uploaded_by=str(data.get("uploadedBy") or ""),
            version=version,
        )


class MatchType(str, Enum):
    """Field that produced a search result's display excerpt."""

    TITLE = "title"
    DESCRIPTION = "description"
    TAGS = "tags"
    CONTENT = "content"


@dataclass
class SearchResult:
    """A search hit with its aggregated relevance score.

    Attributes:
        document: The matched Document.
        relevance_score: Weighted sum across all matching fields (>= 0).
        match_type: Field the excerpt was taken from.
        matched_text: Bounded excerpt for display.
    """

    document: Document
    relevance_score: float
    match_type: MatchType = MatchType.CONTENT
    matched_text: str = ""


@dataclass
class DocumentPage:
    """One page of a filtered document listing."""

    documents: list[Document]
    total: int
    has_more: bool
