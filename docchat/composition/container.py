"""Composition root wiring settings and adapters to the application services."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.json_document_store import JsonDocumentStore
from ..adapters.outbound.llm.gemini_adapter import GeminiCompletionAdapter
from ..adapters.outbound.sqlite_chat_history import SQLiteChatHistoryAdapter
from ..config.settings import settings
from ..core.ports.llm_port import CompletionParams
from ..core.services.chat_service import ChatService
from ..core.services.fallback import FallbackResponder
from ..core.services.memory import EnhancedConversationMemory
from ..core.services.response_assembler import ResponseAssembler
from ..core.services.search_service import SearchService

logger = logging.getLogger(__name__)


@lru_cache
def get_document_store() -> JsonDocumentStore:
    logger.info("Initializing JsonDocumentStore at %s", settings.documents_file)
    settings.ensure_directories()
    return JsonDocumentStore(settings.documents_file)


@lru_cache
def get_search_service() -> SearchService:
    return SearchService(get_document_store(), snippet_max_length=settings.snippet_max_length)


@lru_cache
def get_completion() -> GeminiCompletionAdapter:
    logger.info("Initializing GeminiCompletionAdapter for %s", settings.llm_model)
    return GeminiCompletionAdapter(
        api_key=settings.google_api_key,
        model=settings.llm_model,
        requests_per_minute=settings.llm_requests_per_minute,
    )


@lru_cache
def get_fallback_responder() -> FallbackResponder:
    if settings.fallback_rules_file:
        return FallbackResponder.from_json_file(settings.fallback_rules_file)
    return FallbackResponder()


@lru_cache
def get_assembler() -> ResponseAssembler:
    return ResponseAssembler(
        llm=get_completion(),
        fallback=get_fallback_responder(),
        params=CompletionParams(
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        ),
        chunk_delay=settings.stream_chunk_delay,
        target_length=settings.response_target_length,
        max_context_chars=settings.max_context_chars,
    )


@lru_cache
def get_chat_history() -> SQLiteChatHistoryAdapter:
    logger.info("Initializing SQLiteChatHistoryAdapter at %s", settings.chat_history_db)
    settings.ensure_directories()
    return SQLiteChatHistoryAdapter(
        settings.chat_history_db, max_entries=settings.chat_history_max_entries
    )


@lru_cache
def get_chat_service() -> ChatService:
    logger.info("Initializing ChatService...")
    return ChatService(
        store=get_document_store(),
        search_service=get_search_service(),
        assembler=get_assembler(),
        history=get_chat_history(),
        context_results=settings.context_results,
        max_message_length=settings.max_message_length,
    )


def new_memory() -> EnhancedConversationMemory:
    """Create a fresh memory for one conversation."""
    return EnhancedConversationMemory(
        max_turns=settings.memory_max_turns,
        max_tokens=settings.memory_max_tokens,
    )
