"""Configuration-related exceptions for docchat."""

from .base import DocChatError


class ConfigurationError(DocChatError):
    """Configuration or environment variable errors.

    Raised when required configuration is missing or invalid.
    """

    error_code = "DC_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key is not configured."""

    error_code = "DC_CFG_002"


class InvalidConfigurationError(ConfigurationError):
    """Configuration value is invalid (e.g. an unreadable fallback rules file)."""

    error_code = "DC_CFG_003"
