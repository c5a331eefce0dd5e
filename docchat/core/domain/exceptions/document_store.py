"""Document store exceptions for docchat."""

from .base import DocChatError


class DocumentStoreError(DocChatError):
    """Base error for document store operations (I/O failures included)."""

    error_code = "DC_DOC_001"


class DocumentStoreCorruptedError(DocumentStoreError):
    """The persisted document collection cannot be parsed.

    The store never attempts repair; the caller sees a hard failure.
    """

    error_code = "DC_DOC_002"


class DocumentNotFoundError(DocumentStoreError):
    """No active document exists with the requested id."""

    error_code = "DC_DOC_003"


class DocumentVersionConflictError(DocumentStoreError):
    """The document was modified by another writer since it was read."""

    error_code = "DC_DOC_004"


class MalformedDocumentError(DocumentStoreError):
    """A single persisted record is missing fields or has wrong types."""

    error_code = "DC_DOC_005"
