"""Custom exception hierarchy for docchat.

Errors are grouped by area (configuration, document store, completion
backend, validation); the API maps each group to an HTTP status.

Import from this package directly:

    from docchat.core.domain.exceptions import DocChatError, DocumentStoreError
"""

# Base classes
from .base import DocChatError, RaiseSite

# Configuration exceptions
from .configuration import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingAPIKeyError,
)

# Document store exceptions
from .document_store import (
    DocumentNotFoundError,
    DocumentStoreCorruptedError,
    DocumentStoreError,
    DocumentVersionConflictError,
    MalformedDocumentError,
)

# Completion backend exceptions
from .llm import (
    LLMConnectionError,
    LLMError,
    LLMGenerationError,
    LLMRateLimitError,
)

# Validation exceptions
from .validation import (
    EmptyMessageError,
    InvalidRoleError,
    InvalidSearchLimitError,
    MessageTooLongError,
    ValidationError,
)

__all__ = [
    # Base
    "RaiseSite",
    "DocChatError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
    "InvalidConfigurationError",
    # Document store
    "DocumentStoreError",
    "DocumentStoreCorruptedError",
    "DocumentNotFoundError",
    "DocumentVersionConflictError",
    "MalformedDocumentError",
    # LLM
    "LLMError",
    "LLMConnectionError",
    "LLMRateLimitError",
    "LLMGenerationError",
    # Validation
    "ValidationError",
    "EmptyMessageError",
    "MessageTooLongError",
    "InvalidRoleError",
    "InvalidSearchLimitError",
]
