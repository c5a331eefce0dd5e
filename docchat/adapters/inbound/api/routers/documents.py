"""Document endpoints: search, listing, registration and soft deletion."""

import logging
import uuid

from fastapi import APIRouter, Depends, Query

from .....core.domain import Document
from .....core.domain.exceptions import DocumentNotFoundError
from .....core.domain.utils import clean_text
from .....core.services.search_service import SearchService
from ....outbound.json_document_store import JsonDocumentStore
from ..deps import get_document_store, get_search_service
from ..models import (
    DocumentCreate,
    DocumentListResponse,
    DocumentModel,
    ErrorResponse,
    SearchHit,
    SearchResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Document not found"}}


@router.get("/search", response_model=SearchResponse)
def search_documents(
    q: str = Query("", description="Search query"),
    limit: int = Query(10, ge=0, le=100),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Rank active documents against a query."""
    results = search.search(q, limit=limit)
    return SearchResponse(query=q, results=[SearchHit.from_result(r) for r in results])


@router.get("", response_model=DocumentListResponse)
def list_documents(
    query: str | None = Query(None, description="Substring filter"),
    tags: list[str] | None = Query(None, description="Keep documents with any of these tags"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: JsonDocumentStore = Depends(get_document_store),
) -> DocumentListResponse:
    """List active documents, newest first."""
    page = store.list_documents(query=query, tags=tags, limit=limit, offset=offset)
    return DocumentListResponse(
        documents=[DocumentModel.from_document(doc) for doc in page.documents],
        total=page.total,
        has_more=page.has_more,
    )


@router.get("/{doc_id}", response_model=DocumentModel, responses=_NOT_FOUND)
def get_document(
    doc_id: str,
    store: JsonDocumentStore = Depends(get_document_store),
) -> DocumentModel:
    doc = store.get_by_id(doc_id)
    if doc is None:
        raise DocumentNotFoundError("Document not found", context={"id": doc_id})
    return DocumentModel.from_document(doc)


@router.post("", response_model=DocumentModel, status_code=201)
def create_document(
    payload: DocumentCreate,
    store: JsonDocumentStore = Depends(get_document_store),
) -> DocumentModel:
    """Register a document whose text has already been extracted."""
    document = Document(
        doc_id=str(uuid.uuid4()),
        title=payload.title,
        description=payload.description,
        tags=payload.tags,
        extracted_text=clean_text(payload.extracted_text),
        file_name=payload.file_name,
        original_file_name=payload.original_file_name or payload.file_name,
        file_path=payload.file_path,
        file_size=payload.file_size,
        mime_type=payload.mime_type,
        uploaded_by=payload.uploaded_by,
    )
    saved = store.save(document)
    logger.info("Registered document %s via API", saved.doc_id)
    return DocumentModel.from_document(saved)


@router.delete("/{doc_id}", status_code=204, responses=_NOT_FOUND)
def delete_document(
    doc_id: str,
    store: JsonDocumentStore = Depends(get_document_store),
) -> None:
    """Soft-delete a document; it disappears from search and listings."""
    if not store.soft_delete(doc_id):
        raise DocumentNotFoundError("Document not found", context={"id": doc_id})
