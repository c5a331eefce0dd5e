"""Completion backend exceptions for docchat."""

from .base import DocChatError


class LLMError(DocChatError):
    """Base error for completion backend operations."""

    error_code = "DC_LLM_001"


class LLMConnectionError(LLMError):
    """Failed to reach the completion backend.

    Common causes:
    - Invalid API key
    - Network issues
    - Service unavailable
    """

    error_code = "DC_LLM_002"


class LLMRateLimitError(LLMError):
    """Rate limit exceeded on the completion backend.

    The free tier has limited requests per minute.
    Wait a moment and try again.
    """

    error_code = "DC_LLM_003"


class LLMGenerationError(LLMError):
    """The backend answered but produced no usable text.

    Common causes:
    - Content filtered by safety settings
    - Token limit exceeded
    - Invalid prompt format
    """

    error_code = "DC_LLM_004"
