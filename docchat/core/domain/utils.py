"""Text helpers shared by the domain and the adapters.

Incoming documents and user messages have BOM and replacement characters
stripped at the boundary; internal layers assume text is already clean.
"""

import re
import unicodedata

_WHITESPACE_RUN = re.compile(r"[ \t\f\v]+")


def clean_text(text: str, *, normalize: bool = True) -> str:
    """Remove BOM markers and optionally apply NFKC normalization.

    Args:
        text: Input text that may contain BOM or special characters.
        normalize: Whether to apply NFKC normalization.

    Returns:
        Cleaned text.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    if normalize:
        cleaned = unicodedata.normalize("NFKC", cleaned)
    return cleaned


def normalize_text(text: str) -> str:
    """Clean text and collapse horizontal whitespace, keeping line breaks.

    Full-width CJK punctuation such as ``。`` is left untouched by NFKC,
    so sentence splitting still sees it.
    """
    cleaned = clean_text(text).replace("\r\n", "\n").replace("\r", "\n")
    lines = [_WHITESPACE_RUN.sub(" ", line).strip() for line in cleaned.split("\n")]
    return "\n".join(lines).strip()


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut text to ``max_length`` characters, appending ``suffix`` when cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + suffix
