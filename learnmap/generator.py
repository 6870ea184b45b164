"""Turns content digests into raw model responses."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List

from .errors import GenerationError
from .llm import TextRunner
from .logging import get_logger
from .models import PageDigest, RepoDigest
from .prompting.builder import PromptBuilder, PromptRequest


class ExplanationGenerator:
    """Issues generation calls for a digest and collects the raw text responses.

    A page digest produces exactly one call and any failure propagates. A
    repository digest produces one call per file; a failing file is logged and
    skipped so the remaining files still contribute to the map. With
    ``max_workers > 1`` the per-file calls run in a thread pool and responses are
    returned in completion order.
    """

    def __init__(
        self,
        runner: TextRunner,
        prompt_builder: PromptBuilder | None = None,
        *,
        max_workers: int = 1,
    ) -> None:
        self.runner = runner
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_workers = max(1, max_workers)
        self.logger = get_logger("generator")

    def generate(self, digest: PageDigest | RepoDigest) -> List[str]:
        if isinstance(digest, PageDigest):
            request = self.prompt_builder.build_page_prompt(digest)
            self.logger.info("Generating function map for page %s", digest.url)
            return [self._call(request)]

        requests = self.prompt_builder.build_requests(digest)
        self.logger.info(
            "Generating function map entries for %d files from %s", len(requests), digest.url
        )
        if self.max_workers == 1 or len(requests) <= 1:
            responses = []
            for request in requests:
                response = self._call_or_skip(request)
                if response is not None:
                    responses.append(response)
            return responses
        return self._generate_concurrently(requests)

    def _generate_concurrently(self, requests: List[PromptRequest]) -> List[str]:
        responses: List[str] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._call_or_skip, request) for request in requests]
            for future in as_completed(futures):
                response = future.result()
                if response is not None:
                    responses.append(response)
        return responses

    def _call(self, request: PromptRequest) -> str:
        return self.runner.run(request.prompt, system=request.system)

    def _call_or_skip(self, request: PromptRequest) -> str | None:
        try:
            return self._call(request)
        except GenerationError as exc:
            self.logger.warning("Skipping %s: generation failed: %s", request.label, exc)
            return None


__all__ = ["ExplanationGenerator"]
