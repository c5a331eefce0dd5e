"""Domain models for docchat.

- document: Document, SearchResult, MatchType and DocumentPage
- conversation: Role, ConversationTurn, ConversationStyle and chat history records
- response: SourceRef, StreamFrame and ChatResponse

All models are re-exported here:

    from docchat.core.domain import Document, SearchResult, StreamFrame
"""

from .conversation import (
    ChatHistoryEntry,
    ChatHistoryPage,
    ConversationStyle,
    ConversationTurn,
    Role,
)
from .document import Document, DocumentPage, MatchType, SearchResult
from .response import ChatResponse, SourceRef, StreamFrame

__all__ = [
    # Document models
    "Document",
    "DocumentPage",
    "MatchType",
    "SearchResult",
    # Conversation models
    "Role",
    "ConversationStyle",
    "ConversationTurn",
    "ChatHistoryEntry",
    "ChatHistoryPage",
    # Response models
    "SourceRef",
    "StreamFrame",
    "ChatResponse",
]
