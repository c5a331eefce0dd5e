"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ....core.domain import ChatHistoryEntry, Document, SearchResult


class ChatMessage(BaseModel):
    """A single message in the conversation history."""

    role: Literal["user", "assistant"] = Field(..., description="Role of the message sender")
    content: str = Field(..., description="Content of the message")


class ChatRequest(BaseModel):
    """Request model for sending a chat message."""

    message: str = Field(
        ...,
        description="The user's message",
        json_schema_extra={"example": "What does the evaluation policy say about bonuses?"},
    )
    document_ids: list[str] = Field(
        default_factory=list,
        description="Documents to answer from; search is used when empty",
    )
    conversation_history: list[ChatMessage] = Field(
        default_factory=list,
        description="Previous turns, oldest first",
    )
    user_id: str = Field(default="anonymous", description="Owner of the chat history")


class SourceInfo(BaseModel):
    """A document an answer was grounded on."""

    id: str
    title: str


class ChatResponseModel(BaseModel):
    """Response model for a chat answer."""

    message: str = Field(..., description="The assistant's answer")
    sources: list[SourceInfo] = Field(default_factory=list)
    used_fallback: bool = Field(False, description="True when the language model was bypassed")
    timestamp: datetime


class HistoryEntryModel(BaseModel):
    id: int
    message: str
    response: str
    sources: list[str]
    created_at: str

    @classmethod
    def from_entry(cls, entry: ChatHistoryEntry) -> "HistoryEntryModel":
        return cls(
            id=entry.entry_id,
            message=entry.message,
            response=entry.response,
            sources=entry.sources,
            created_at=entry.created_at,
        )


class HistoryResponse(BaseModel):
    entries: list[HistoryEntryModel]
    total: int
    has_more: bool


class DocumentCreate(BaseModel):
    """Document metadata plus text that was already extracted from the file."""

    title: str = Field(..., min_length=1)
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    extracted_text: str = ""
    file_name: str = ""
    original_file_name: str = ""
    file_path: str = ""
    file_size: int = Field(0, ge=0)
    mime_type: str = ""
    uploaded_by: str = ""


class DocumentModel(BaseModel):
    """A stored document."""

    id: str
    title: str
    description: str
    tags: list[str]
    extracted_text: str
    file_name: str
    original_file_name: str
    mime_type: str
    file_size: int
    uploaded_by: str
    uploaded_at: datetime
    version: int

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentModel":
        return cls(
            id=doc.doc_id,
            title=doc.title,
            description=doc.description,
            tags=doc.tags,
            extracted_text=doc.extracted_text,
            file_name=doc.file_name,
            original_file_name=doc.original_file_name,
            mime_type=doc.mime_type,
            file_size=doc.file_size,
            uploaded_by=doc.uploaded_by,
            uploaded_at=doc.uploaded_at,
            version=doc.version,
        )


class DocumentListResponse(BaseModel):
    documents: list[DocumentModel]
    total: int
    has_more: bool


class SearchHit(BaseModel):
    """One ranked search result."""

    id: str
    title: str
    relevance_score: float
    match_type: str
    matched_text: str

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchHit":
        return cls(
            id=result.document.doc_id,
            title=result.document.title,
            relevance_score=result.relevance_score,
            match_type=result.match_type.value,
            matched_text=result.matched_text,
        )


class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit]


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    document_store: str = Field(..., description="Document store status")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., DC_DOC_003)")
    message: str = Field(..., description="Human-readable error message")


class ErrorLocation(BaseModel):
    """Source location where error occurred."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(..., alias="class", description="Class name or <module>")
    method: str = Field(..., description="Method/function name")
    file: str = Field(..., description="Source file name")
    line: int = Field(..., description="Line number")
    timestamp: str | None = Field(None, description="When the error occurred")


class ErrorResponse(BaseModel):
    """Response model for structured errors."""

    error: ErrorDetail
    location: ErrorLocation | None = None
    context: dict | None = None
    cause: dict | None = None
    stack_trace: list[str] | None = Field(None, description="Stack trace (debug mode only)")
