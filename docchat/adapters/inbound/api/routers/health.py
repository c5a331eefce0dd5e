"""Health check endpoints."""

from fastapi import APIRouter, Depends

from ..... import __version__
from ....outbound.json_document_store import JsonDocumentStore
from ..deps import get_document_store
from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Basic liveness check."""
    return HealthResponse(status="healthy", version=__version__, document_store="not_checked")


@router.get("/ready", response_model=HealthResponse)
def readiness_check(store: JsonDocumentStore = Depends(get_document_store)) -> HealthResponse:
    """Readiness probe: the document store must be readable."""
    try:
        count = len(store.list_active())
        store_status = f"connected ({count} active documents)"
        status = "ready"
    except Exception as e:
        store_status = f"error: {e}"
        status = "not_ready"

    return HealthResponse(status=status, version=__version__, document_store=store_status)
