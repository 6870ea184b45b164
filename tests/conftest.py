from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Iterator, List

import pytest

from learnmap.errors import GenerationError
from tests._fixtures.chat_server import ChatServer
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


class ScriptedRunner:
    """Text runner double that replays canned responses and records prompts.

    Each response is either a string or an exception instance to raise.
    """

    def __init__(self, responses: Iterable[object] | Callable[[str], object]) -> None:
        self._responses = responses if callable(responses) else list(responses)
        self.calls: List[dict[str, object]] = []

    def run(self, prompt: str, *, system: str | None = None) -> str:
        self.calls.append({"prompt": prompt, "system": system})
        if callable(self._responses):
            outcome = self._responses(prompt)
        elif self._responses:
            outcome = self._responses.pop(0)
        else:
            raise GenerationError("No scripted response left")
        if isinstance(outcome, BaseException):
            raise outcome
        return str(outcome)


@pytest.fixture
def scripted_runner() -> Callable[..., ScriptedRunner]:
    return ScriptedRunner


@pytest.fixture
def chat_server(monkeypatch) -> Iterator[Callable[..., ChatServer]]:
    """Start local chat servers for a test and shut them down afterwards."""
    for name in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    started: List[ChatServer] = []

    def _start(responder) -> ChatServer:
        server = ChatServer(responder).start()
        started.append(server)
        return server

    yield _start
    for server in started:
        server.stop()
