"""Function-map generation against OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import http.client
import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from ..errors import GenerationError

_FROM_ENV = object()

ENV_MODEL_KEYS = ("LEARNMAP_LLM_MODEL", "OPENAI_MODEL")
ENV_BASE_URL_KEYS = ("LEARNMAP_LLM_BASE_URL", "OPENAI_BASE_URL")
ENV_API_KEY_KEYS = ("LEARNMAP_LLM_API_KEY", "OPENAI_API_KEY")


@dataclass
class ChatRequest:
    """One ``/chat/completions`` call for a single function-map prompt."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]

    @property
    def endpoint(self) -> str:
        if not self.base_url:
            raise GenerationError("The openai runner needs llm.base_url or OPENAI_BASE_URL.")
        return f"{self.base_url}/chat/completions"

    def body(self) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if self.system:
            messages.append({"role": "system", "content": self.system})
        messages.append({"role": "user", "content": self.prompt})
        body: Dict[str, Any] = {"model": self.model, "messages": messages}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


Transport = Callable[[ChatRequest], str]


class LLMRunner:
    """Sends function-map prompts to an OpenAI-compatible endpoint.

    ``transport`` replaces the HTTP call, which lets tests inspect the exact
    ``ChatRequest`` without a server.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "http://localhost:12434/engines/v1"

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None | object = _FROM_ENV,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        api_key: str | None | object = _FROM_ENV,
        request_timeout: Optional[float] = 60.0,
        transport: Transport | None = None,
    ) -> None:
        self.model = model or _env_setting(ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        if base_url is _FROM_ENV:
            base_url = _env_setting(ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        self.base_url = str(base_url).rstrip("/") if base_url else None
        self.api_key = _env_setting(ENV_API_KEY_KEYS) if api_key is _FROM_ENV else api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._transport = transport or post_chat_completion

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Return the completion text for ``prompt`` or raise ``GenerationError``."""
        return self._transport(
            ChatRequest(
                prompt=prompt,
                system=system,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                base_url=self.base_url,
                api_key=self.api_key,  # type: ignore[arg-type]
                request_timeout=self.request_timeout,
            )
        )


def post_chat_completion(request: ChatRequest) -> str:
    """POST ``request`` and return the first choice's text.

    Every transport failure, including connections dropped mid-response,
    surfaces as ``GenerationError`` so a single bad file never aborts a batch.
    """
    timeout = request.request_timeout or 60.0
    http_request = Request(
        request.endpoint,
        data=json.dumps(request.body()).encode("utf-8"),
        headers=request.headers(),
        method="POST",
    )
    try:
        with urlopen(http_request, timeout=timeout) as response:
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore").strip()
        raise GenerationError(
            f"{request.endpoint} answered HTTP {exc.code}: {detail or exc.reason}"
        ) from exc
    except TimeoutError as exc:
        raise GenerationError(f"{request.endpoint} did not answer within {timeout:g}s") from exc
    except (OSError, http.client.HTTPException) as exc:
        reason = getattr(exc, "reason", None) or exc
        raise GenerationError(f"Request to {request.endpoint} failed: {reason}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GenerationError(f"{request.endpoint} returned a non-JSON body") from exc

    text = completion_text(payload).strip()
    if not text:
        raise GenerationError(f"{request.endpoint} returned an empty response")
    return text


def completion_text(payload: Any) -> str:
    """Pull the first choice's message content (or legacy ``text``) from a response body."""
    try:
        first = payload["choices"][0]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str):
        return content
    text = first.get("text")
    return text if isinstance(text, str) else ""


def _env_setting(keys: Sequence[str]) -> str | None:
    return next((os.environ[key] for key in keys if os.environ.get(key)), None)


__all__ = ["ChatRequest", "LLMRunner", "completion_text", "post_chat_completion"]
