"""Completion Port Interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CompletionParams:
    """Sampling parameters passed to the completion backend."""

    temperature: float = 0.7
    max_tokens: int = 300
    stop: tuple[str, ...] = ("User:", "Assistant:")


class CompletionPort(ABC):
    """Abstract interface for text-completion backends.

    Implementations may raise on any failure; no assumption is made about
    latency or determinism.
    """

    @abstractmethod
    def complete(self, prompt: str, params: CompletionParams | None = None) -> str:
        """Return the backend's completion for ``prompt``."""
        ...
