"""Google Gemini completion adapter using the google-genai SDK."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from google.genai import errors
from google.genai.types import GenerateContentConfig

from ....common.rate_limiter import RateLimiter
from ....core.domain.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMRateLimitError,
    MissingAPIKeyError,
)
from ....core.domain.utils import normalize_text
from ....core.ports.llm_port import CompletionParams, CompletionPort

if TYPE_CHECKING:
    from google import genai

logger = logging.getLogger(__name__)


def _is_rate_limit(exc: Exception) -> bool:
    if isinstance(exc, errors.APIError) and exc.code == 429:
        return True
    message = str(exc).lower()
    return "quota" in message or "rate limit" in message or "resource_exhausted" in message


class GeminiCompletionAdapter(CompletionPort):
    """Completion backend over the Gemini API.

    The SDK client is created on first use. Every call first takes a token
    from the rate limiter; quota errors are retried with exponential
    backoff and surface as ``LLMRateLimitError`` once retries run out.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        requests_per_minute: int | None = 15,
        max_retries: int = 3,
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: Google AI API key.
            model: Model to use.
            requests_per_minute: Client-side request budget; None disables it.
            max_retries: Attempts made when the backend reports a quota error.
            client: Pre-built SDK client, mainly for tests.
            sleep: Delay function used for backoff.
        """
        self.api_key = api_key
        self.model_name = model
        self.max_retries = max(1, max_retries)
        self.rate_limiter = RateLimiter(requests_per_minute, sleep=sleep)
        self._client = client
        self._sleep = sleep

    def _get_client(self) -> genai.Client:
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Get one at https://aistudio.google.com/ "
                    "and set GOOGLE_API_KEY in your .env file."
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized for model: %s", self.model_name)

        return self._client

    def complete(self, prompt: str, params: CompletionParams | None = None) -> str:
        """Generate a completion for ``prompt``.

        Raises:
            MissingAPIKeyError: If no API key is configured.
            LLMRateLimitError: If the quota is still exhausted after retries.
            LLMConnectionError: If the backend cannot be reached.
            LLMGenerationError: If the backend returns no text.
        """
        params = params or CompletionParams()
        client = self._get_client()
        config = GenerateContentConfig(
            temperature=params.temperature,
            max_output_tokens=params.max_tokens,
            stop_sequences=list(params.stop) or None,
        )
        contents = normalize_text(prompt)

        for attempt in range(self.max_retries):
            self.rate_limiter.acquire()
            try:
                response = client.models.generate_content(
                    model=self.model_name,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                if _is_rate_limit(e):
                    if attempt < self.max_retries - 1:
                        wait_time = 2**attempt
                        logger.warning("Rate limit hit, retrying in %ds", wait_time)
                        self._sleep(wait_time)
                        continue
                    raise LLMRateLimitError(
                        "Gemini rate limit reached after retries",
                        cause=e,
                        context={"model": self.model_name, "attempts": self.max_retries},
                    ) from e
                if isinstance(e, errors.ClientError) and e.code not in (401, 403):
                    raise LLMGenerationError(
                        "Gemini rejected the request", cause=e, context={"model": self.model_name}
                    ) from e
                raise LLMConnectionError(
                    "Failed to reach Gemini", cause=e, context={"model": self.model_name}
                ) from e

            if not response.candidates or not response.text:
                raise LLMGenerationError(
                    "Gemini returned no text", context={"model": self.model_name}
                )
            return normalize_text(response.text)

        raise LLMRateLimitError("Gemini rate limit reached", context={"model": self.model_name})
