"""Text-generation runner adapters."""

from __future__ import annotations

from typing import Protocol

from .gemini import GeminiRunner
from .runner import LLMRunner


class TextRunner(Protocol):
    """Anything that turns a prompt into raw response text."""

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Return the model's raw text or raise GenerationError."""


__all__ = ["GeminiRunner", "LLMRunner", "TextRunner"]
