"""Configuration management for docchat."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets copied from files or injected by hosting platforms may carry a
    BOM, which breaks HTTP headers built from them.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API
    google_api_key: str = ""

    @field_validator("google_api_key", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Model settings
    llm_model: str = "gemini-2.0-flash"
    llm_requests_per_minute: int = 15
    llm_temperature: float = 0.7
    llm_max_tokens: int = 300

    # Data directories
    data_dir: Path = Path("./data")

    # Search settings
    search_default_limit: int = 10
    snippet_max_length: int = 200
    context_results: int = 3

    # Conversation settings
    memory_max_turns: int = 15
    memory_max_tokens: int = 3000
    stream_chunk_delay: float = 0.05
    response_target_length: int = 400
    max_context_chars: int = 1000
    max_message_length: int = 4000
    chat_history_max_entries: int = 100
    fallback_rules_file: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    debug: bool = False

    @property
    def documents_file(self) -> Path:
        """JSON collection of document records."""
        return self.data_dir / "documents.json"

    @property
    def chat_history_db(self) -> Path:
        """SQLite database holding chat history."""
        return self.data_dir / "chat_history.db"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
