"""Adapter for Google Gemini via the google-genai SDK."""

from __future__ import annotations

import os
from typing import Any, Optional, Sequence

from google import genai
from google.genai import types

from ..errors import GenerationError


class GeminiRunner:
    """Executes prompts against a Gemini model."""

    DEFAULT_MODEL = "gemini-2.0-flash"
    ENV_API_KEY_KEYS = ("LEARNMAP_LLM_API_KEY", "GOOGLE_AI_API_KEY", "GEMINI_API_KEY")
    ENV_MODEL_KEYS = ("LEARNMAP_LLM_MODEL", "GEMINI_MODEL")

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 60.0,
        client: Any = None,
    ) -> None:
        self.model = model or _first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._api_key = api_key or _first_env_value(self.ENV_API_KEY_KEYS)
        self._client = client

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt to Gemini and return the response text."""
        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        try:
            response = client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            raise GenerationError(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise GenerationError("Gemini returned an empty response")
        return text.strip()

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise GenerationError(
                "No Gemini API key configured. Set GOOGLE_AI_API_KEY or llm.api_key."
            )
        http_options = None
        if self.request_timeout:
            http_options = types.HttpOptions(timeout=int(self.request_timeout * 1000))
        self._client = genai.Client(api_key=self._api_key, http_options=http_options)
        return self._client


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = ["GeminiRunner"]
