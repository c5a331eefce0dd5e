"""Port definition for chat history persistence."""

from typing import Protocol

from ..domain import ChatHistoryPage


class ChatHistoryPort(Protocol):
    """Port for recording answered questions."""

    def record(self, user_id: str, message: str, response: str, sources: list[str]) -> int:
        """Persist one exchange.

        Args:
            user_id: Owner of the conversation.
            message: The user's message.
            response: The assistant's answer.
            sources: Titles of the documents used.

        Returns:
            ID of the stored entry, 0 if nothing was stored.
        """
        ...

    def list_history(self, user_id: str, limit: int = 50, offset: int = 0) -> ChatHistoryPage:
        """Return one page of a user's history, oldest first."""
        ...
