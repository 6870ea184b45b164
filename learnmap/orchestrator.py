"""Pipeline orchestration: extract, generate, normalise, issue a key."""

from __future__ import annotations

from typing import Callable, Optional
from urllib.parse import urlparse

from .config import LearnMapConfig, load_config
from .errors import (
    AnalysisError,
    CloneError,
    FetchError,
    GenerationError,
    ValidationError,
)
from .extractors import PageExtractor, RepoExtractor
from .generator import ExplanationGenerator
from .keys import issue_key
from .llm import GeminiRunner, LLMRunner, TextRunner
from .logging import get_logger
from .models import AnalysisKind, AnalysisResult, PageDigest, Project, RepoDigest
from .normalizer import normalize
from .plugin import PluginCompiler
from .prompting import PromptBuilder
from .stores import PROJECT_CREATED, InMemoryProjectStore, ProjectStore


class Orchestrator:
    """Coordinates analysis runs and plugin compilation over injected collaborators."""

    def __init__(
        self,
        *,
        config: LearnMapConfig | None = None,
        page_extractor: PageExtractor | None = None,
        repo_extractor: RepoExtractor | None = None,
        generator: ExplanationGenerator | None = None,
        llm_runner: TextRunner | None = None,
        prompt_builder: PromptBuilder | None = None,
        store: ProjectStore | None = None,
        compiler: PluginCompiler | None = None,
        key_issuer: Callable[[], str] = issue_key,
    ) -> None:
        self.config = config or load_config()
        extraction = self.config.extraction
        self.page_extractor = page_extractor or PageExtractor(
            max_paragraphs=extraction.max_paragraphs,
            min_paragraph_chars=extraction.min_paragraph_chars,
            render_timeout=extraction.render_timeout,
        )
        self.repo_extractor = repo_extractor or RepoExtractor(
            max_files=extraction.max_files,
            max_chars=extraction.max_file_chars,
            extensions=extraction.extensions,
            excluded_dirs=extraction.excluded_dirs,
            clone_timeout=extraction.clone_timeout,
        )
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._generator = generator
        self._llm_runner = llm_runner
        self.store = store if store is not None else InMemoryProjectStore()
        self.compiler = compiler or PluginCompiler(
            marker_attribute=self.config.plugin.marker_attribute
        )
        self.key_issuer = key_issuer
        self.logger = get_logger("orchestrator")

    def analyze(
        self,
        project_name: str,
        scrape_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ) -> AnalysisResult:
        """Run extraction, generation and normalisation for exactly one target."""
        name, kind, target = self._validate(project_name, scrape_url, repo_url)

        digest: PageDigest | RepoDigest
        try:
            if kind is AnalysisKind.PAGE:
                self.logger.info("Analysing website %s for project %r", target, name)
                digest = self.page_extractor.extract(target)
            else:
                self.logger.info("Analysing repository %s for project %r", target, name)
                digest = self.repo_extractor.extract(target)
        except (FetchError, CloneError, OSError) as exc:
            self.logger.error("Extraction failed for project %r: %s", name, exc)
            raise AnalysisError(f"Could not read analysis target: {exc}", cause=exc) from exc

        try:
            responses = self._resolve_generator().generate(digest)
        except GenerationError as exc:
            self.logger.error("Generation failed for project %r: %s", name, exc)
            raise AnalysisError(f"Explanation generation failed: {exc}", cause=exc) from exc

        function_map = normalize(responses, digest.kind)
        key = self.key_issuer()
        self.logger.info(
            "Analysis for %r produced %d entries from %d responses",
            name,
            len(function_map),
            len(responses),
        )
        return AnalysisResult(
            key=key,
            function_map=function_map,
            project_name=name,
            kind=digest.kind,
        )

    def create_project(
        self,
        project_name: str,
        scrape_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ) -> Project:
        """Analyse the target, persist the project and record its creation."""
        result = self.analyze(project_name, scrape_url=scrape_url, repo_url=repo_url)
        target_kwargs = (
            {"scrape_url": scrape_url.strip()}
            if result.kind is AnalysisKind.PAGE and scrape_url
            else {"repo_url": (repo_url or "").strip()}
        )
        project_id = self.store.create_project(
            result.project_name,
            result.key,
            result.function_map,
            **target_kwargs,
        )
        self.store.log_activity(project_id, PROJECT_CREATED)
        project = self.store.get_project_by_id(project_id)
        if project is None:  # pragma: no cover - store contract violation
            raise RuntimeError(f"Project {project_id} vanished after creation")
        self.logger.info("Created project %d (%s)", project.id, project.project_name)
        return project

    def build_plugin(self, key: str) -> Optional[str]:
        """Return the embedded plugin script for the project owning ``key``."""
        project = self.store.get_project_by_key(key)
        if project is None:
            return None
        return self.compiler.compile_embedded(project.function_map)

    def build_loader(self, lookup_endpoint: Optional[str] = None, key: Optional[str] = None) -> str:
        """Return the fetching plugin variant pointed at ``lookup_endpoint``."""
        endpoint = lookup_endpoint or self.config.plugin.lookup_endpoint
        if not endpoint:
            raise ValidationError("No lookup endpoint given or configured")
        return self.compiler.compile_fetching(endpoint, key=key)

    def _validate(
        self,
        project_name: str,
        scrape_url: Optional[str],
        repo_url: Optional[str],
    ) -> tuple[str, AnalysisKind, str]:
        name = (project_name or "").strip()
        if not name:
            raise ValidationError("Project name is required")

        scrape_target = (scrape_url or "").strip() or None
        repo_target = (repo_url or "").strip() or None
        if repo_target is not None and scrape_target is None:
            return name, AnalysisKind.REPO, repo_target
        if scrape_target is None or repo_target is not None:
            raise ValidationError("Exactly one of scrape_url or repo_url is required")

        parsed = urlparse(scrape_target)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValidationError(f"scrape_url must be an http(s) URL: {scrape_target!r}")
        return name, AnalysisKind.PAGE, scrape_target

    def _resolve_generator(self) -> ExplanationGenerator:
        if self._generator is None:
            self._generator = ExplanationGenerator(
                self._resolve_llm_runner(),
                self.prompt_builder,
                max_workers=self.config.llm.max_workers,
            )
        return self._generator

    def _resolve_llm_runner(self) -> TextRunner:
        if self._llm_runner is not None:
            return self._llm_runner
        llm = self.config.llm
        if llm.runner in {"openai", "http"}:
            overrides: dict[str, object] = {}
            if llm.base_url:
                overrides["base_url"] = llm.base_url
            if llm.api_key:
                overrides["api_key"] = llm.api_key
            self._llm_runner = LLMRunner(
                model=llm.model,
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
                request_timeout=llm.request_timeout,
                **overrides,
            )
        elif llm.runner == "gemini":
            self._llm_runner = GeminiRunner(
                model=llm.model,
                api_key=llm.api_key,
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
                request_timeout=llm.request_timeout,
            )
        else:
            raise ValidationError(f"Unknown llm.runner {llm.runner!r}; expected 'gemini' or 'openai'")
        self.logger.debug("Using %s runner", llm.runner)
        return self._llm_runner


__all__ = ["Orchestrator"]
