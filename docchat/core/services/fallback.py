"""Deterministic fallback answers used when the completion backend fails.

The keyword-to-template mapping is product content, so it lives in data:
``FallbackRule`` objects that can be loaded from a JSON file. Only the
shape is fixed: keyword-triggered templates, and a structured analysis of
the document context when one is available.
"""

import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import InvalidConfigurationError
from ..domain.utils import truncate

logger = logging.getLogger(__name__)

_SECTION_BOUNDARY = re.compile(r"[。．.!?！？\n]")
_DATE_PATTERN = re.compile(r"\d{4}[/-]\d{1,2}[/-]\d{1,2}|\d{1,2}[/-]\d{1,2}[/-]\d{4}")
_PLACEHOLDER = re.compile(r"\{(message|excerpt)\}")


class FallbackRule(BaseModel):
    """Keyword-triggered fallback template.

    Templates may use the ``{message}`` and ``{excerpt}`` placeholders.
    """

    name: str
    keywords: list[str] = Field(min_length=1)
    response: str
    document_response: str | None = None

    def matches(self, message: str) -> bool:
        lowered = message.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


def fill_template(template: str, message: str, excerpt: str = "") -> str:
    """Substitute the ``{message}`` and ``{excerpt}`` placeholders.

    Any other braces are literal text, so templates loaded from data may
    contain JSON or code samples.
    """
    values = {"message": message, "excerpt": excerpt}
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)


DEFAULT_RULES: list[FallbackRule] = [
    FallbackRule(
        name="greeting",
        keywords=["hello", "hi there", "good morning", "こんにちは", "はじめまして"],
        response=(
            "Hello! I can answer questions about the documents you have uploaded. "
            "What would you like to know?"
        ),
    ),
    FallbackRule(
        name="thanks",
        keywords=["thank", "ありがとう"],
        response="You're welcome. Let me know if there is anything else I can help with.",
    ),
    FallbackRule(
        name="help",
        keywords=["help", "support", "助けて", "サポート"],
        response=(
            "Happy to help! Ask me about policies, procedures or anything covered by "
            "your documents, for example evaluation rules or benefits."
        ),
    ),
    FallbackRule(
        name="evaluation",
        keywords=["evaluation", "review", "評価", "人事"],
        response=(
            "I can explain the evaluation system in detail once the relevant HR "
            "documents are uploaded."
        ),
        document_response=(
            "Here is what the documents say about the evaluation system.\n\n"
            "According to the material: \"{excerpt}\"\n\n"
            "Which part would you like me to explain in more detail?"
        ),
    ),
]

GENERIC_RESPONSE = (
    "I received your question: \"{message}\".\n\n"
    "For a more detailed answer, upload the related documents or ask a more "
    "specific question."
)


def extract_relevant_section(context: str, keywords: list[str]) -> str | None:
    """Return the first sentence containing a keyword, with its neighbours.

    Args:
        context: Document context text.
        keywords: Candidate keywords; single characters are ignored.

    Returns:
        The matching sentence joined with the previous and next sentence, or
        None if no keyword occurs.
    """
    sentences = [s.strip() for s in _SECTION_BOUNDARY.split(context) if s.strip()]
    wanted = [k for k in keywords if k and len(k.strip()) > 1]

    for index, sentence in enumerate(sentences):
        if any(keyword in sentence for keyword in wanted):
            start = max(0, index - 1)
            end = min(len(sentences), index + 2)
            return ". ".join(sentences[start:end]) + "."
    return None


class FallbackResponder:
    """Builds content-aware answers without the completion backend."""

    def __init__(
        self,
        rules: list[FallbackRule] | None = None,
        generic_response: str = GENERIC_RESPONSE,
        context_chars: int = 1500,
        preview_chars: int = 500,
        excerpt_chars: int = 250,
    ) -> None:
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self.generic_response = generic_response
        self.context_chars = context_chars
        self.preview_chars = preview_chars
        self.excerpt_chars = excerpt_chars

    @classmethod
    def from_json_file(cls, path: Path, **kwargs) -> "FallbackResponder":
        """Load rules from a JSON list of rule objects.

        Raises:
            InvalidConfigurationError: If the file is unreadable or invalid.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
            rules = TypeAdapter(list[FallbackRule]).validate_json(raw)
        except (OSError, PydanticValidationError) as e:
            raise InvalidConfigurationError(
                "Could not load fallback rules", cause=e, context={"path": str(path)}
            ) from e
        logger.info("Loaded %d fallback rules from %s", len(rules), path)
        return cls(rules=rules, **kwargs)

    def respond(self, message: str, document_context: str | None = None) -> str:
        """Return a deterministic answer for ``message``.

        With document context, a matching rule's document template wins;
        otherwise a structured analysis of the context is composed. Without
        context, the first matching rule's plain response is used.
        """
        if document_context and document_context.strip():
            return self._respond_with_document(message, document_context)

        for rule in self.rules:
            if rule.matches(message):
                return fill_template(rule.response, message)
        return fill_template(self.generic_response, message)

    def _respond_with_document(self, message: str, document_context: str) -> str:
        context = document_context[: self.context_chars]
        keywords = [message, *message.split()]

        for rule in self.rules:
            if rule.document_response and rule.matches(message):
                section = extract_relevant_section(context, rule.keywords + keywords)
                excerpt = truncate(section or context, self.excerpt_chars)
                return fill_template(rule.document_response, message, excerpt)

        return self.analyze_document(message, document_context)

    def analyze_document(self, message: str, document_context: str) -> str:
        """Structured overview of the document context for ``message``."""
        section = extract_relevant_section(
            document_context[: self.context_chars], [message, *message.split()]
        )
        word_count = len(document_context.split())
        has_numbers = any(ch.isdigit() for ch in document_context)
        has_dates = bool(_DATE_PATTERN.search(document_context))

        parts = [f"Regarding \"{message}\", here is what I found in the documents."]
        if section:
            parts.append(f"Relevant passage:\n\"{truncate(section, self.excerpt_chars)}\"")
        parts.append(
            "Document overview:\n"
            f"- Approximately {word_count} words\n"
            f"- Numeric data: {'present' if has_numbers else 'none'}\n"
            f"- Dates: {'present' if has_dates else 'none'}"
        )
        parts.append(f"Preview:\n{truncate(document_context, self.preview_chars)}")
        parts.append("Ask a more specific question and I will look at the matching section.")
        return "\n\n".join(parts)
