"""Ports consumed by the chat engine core."""

from .chat_history_port import ChatHistoryPort
from .document_store_port import DocumentStorePort
from .llm_port import CompletionParams, CompletionPort

__all__ = ["ChatHistoryPort", "CompletionParams", "CompletionPort", "DocumentStorePort"]
