"""Validation exceptions for docchat."""

from .base import DocChatError


class ValidationError(DocChatError):
    """Input validation failed."""

    error_code = "DC_VAL_001"


class EmptyMessageError(ValidationError):
    """Chat message cannot be empty or whitespace only."""

    error_code = "DC_VAL_002"


class MessageTooLongError(ValidationError):
    """Chat message exceeds maximum allowed length."""

    error_code = "DC_VAL_003"


class InvalidRoleError(ValidationError):
    """Conversation turn role must be ``user`` or ``assistant``."""

    error_code = "DC_VAL_004"


class InvalidSearchLimitError(ValidationError):
    """Search result limit must not be negative."""

    error_code = "DC_VAL_005"
