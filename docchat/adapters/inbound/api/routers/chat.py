"""Chat endpoints: one-shot answers, SSE streaming and history."""

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from .....composition.container import new_memory
from .....core.domain import StreamFrame
from .....core.ports.chat_history_port import ChatHistoryPort
from .....core.services.chat_service import ChatService
from .....core.services.memory import ConversationMemory
from ....common.exception_handler import format_exception_json, log_exception
from ..deps import get_chat_history, get_chat_service
from ..models import (
    ChatRequest,
    ChatResponseModel,
    ErrorResponse,
    HistoryEntryModel,
    HistoryResponse,
    SourceInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def build_memory(request: ChatRequest) -> ConversationMemory:
    """Rebuild the conversation memory from the client-held history."""
    memory = new_memory()
    for turn in request.conversation_history:
        memory.add_turn(turn.role, turn.content)
    return memory


def _sse(payload: dict | str) -> str:
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n"


def event_stream(frames: Iterator[StreamFrame]) -> Iterator[str]:
    """Encode content frames as SSE events followed by ``[DONE]``."""
    try:
        for frame in frames:
            if frame.is_final:
                break
            yield _sse(
                {
                    "content": frame.content,
                    "sources": [source.to_dict() for source in frame.sources],
                    "timestamp": datetime.now(UTC).isoformat(),
                }
            )
    except Exception as e:
        log_exception(e, extra_context={"operation": "chat_stream"})
        yield _sse({"error": format_exception_json(e)["error"]})
        return
    yield _sse("[DONE]")


@router.post(
    "",
    response_model=ChatResponseModel,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid message"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
def send_message(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponseModel:
    """Answer a message using the selected documents or a document search."""
    response = service.ask(
        request.message,
        build_memory(request),
        document_ids=request.document_ids or None,
        user_id=request.user_id,
    )
    return ChatResponseModel(
        message=response.text,
        sources=[SourceInfo(id=s.id, title=s.title) for s in response.sources],
        used_fallback=response.used_fallback,
        timestamp=response.timestamp,
    )


@router.post(
    "/stream",
    responses={400: {"model": ErrorResponse, "description": "Invalid message"}},
)
def stream_message(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Answer a message as a Server-Sent Events stream of cumulative frames."""
    frames = service.ask_stream(
        request.message,
        build_memory(request),
        document_ids=request.document_ids or None,
        user_id=request.user_id,
    )
    return StreamingResponse(
        event_stream(frames),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/history", response_model=HistoryResponse)
def chat_history(
    user_id: str = Query("anonymous"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    history: ChatHistoryPort = Depends(get_chat_history),
) -> HistoryResponse:
    """Return the user's past exchanges, newest first."""
    page = history.list_history(user_id, limit=limit, offset=offset)
    return HistoryResponse(
        entries=[HistoryEntryModel.from_entry(entry) for entry in page.entries],
        total=page.total,
        has_more=page.has_more,
    )
