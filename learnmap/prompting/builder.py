"""Builds function-map prompts from extracted digests."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import PageDigest, RepoDigest, SourceFile
from .constants import FILE_EXAMPLE_IDS, PAGE_EXAMPLE_IDS, SYSTEM_PROMPT


@dataclass
class PromptRequest:
    """One generation call: the user prompt, its system prompt and a label for logs."""

    label: str
    prompt: str
    system: str | None = None
    metadata: Dict[str, object] = field(default_factory=dict)


class PromptBuilder:
    """Renders page and per-file prompts from Jinja2 templates."""

    PAGE_TEMPLATE = "page.j2"
    FILE_TEMPLATE = "file.j2"

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        page_example_ids: Sequence[str] = PAGE_EXAMPLE_IDS,
        file_example_ids: Sequence[str] = FILE_EXAMPLE_IDS,
    ) -> None:
        self.templates_dir = templates_dir
        self.system_prompt = system_prompt
        self.page_example_ids = list(page_example_ids)
        self.file_example_ids = list(file_example_ids)
        self._env = self._create_env(templates_dir)

    def build_page_prompt(self, digest: PageDigest) -> PromptRequest:
        template = self._env.get_template(self.PAGE_TEMPLATE)
        prompt = template.render(
            url=digest.url,
            title=digest.title,
            headings=digest.headings,
            paragraphs=digest.paragraphs,
            forms=[asdict(form) for form in digest.forms],
            example_ids=self.page_example_ids,
        )
        return PromptRequest(
            label=digest.url,
            prompt=prompt.strip(),
            system=self.system_prompt,
            metadata={"kind": digest.kind.value},
        )

    def build_file_prompt(self, source: SourceFile) -> PromptRequest:
        template = self._env.get_template(self.FILE_TEMPLATE)
        prompt = template.render(
            name=source.name,
            extension=source.extension,
            content=source.content,
            example_ids=self.file_example_ids,
        )
        return PromptRequest(
            label=source.path,
            prompt=prompt.strip(),
            system=self.system_prompt,
            metadata={"kind": "repo", "path": source.path},
        )

    def build_requests(self, digest: PageDigest | RepoDigest) -> List[PromptRequest]:
        """Return one request for a page digest, or one per file for a repository digest."""
        if isinstance(digest, PageDigest):
            return [self.build_page_prompt(digest)]
        return [self.build_file_prompt(source) for source in digest.files]

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )


__all__ = ["PromptBuilder", "PromptRequest"]
