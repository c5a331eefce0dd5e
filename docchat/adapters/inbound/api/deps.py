"""FastAPI dependency providers.

Thin wrappers over the composition root so tests can swap them through
``app.dependency_overrides``.
"""

from ....composition import container
from ....core.ports.chat_history_port import ChatHistoryPort
from ....core.services.chat_service import ChatService
from ....core.services.search_service import SearchService
from ...outbound.json_document_store import JsonDocumentStore


def get_document_store() -> JsonDocumentStore:
    return container.get_document_store()


def get_search_service() -> SearchService:
    return container.get_search_service()


def get_chat_service() -> ChatService:
    return container.get_chat_service()


def get_chat_history() -> ChatHistoryPort:
    return container.get_chat_history()
