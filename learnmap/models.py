"""Core data models shared across learnmap components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

FunctionMap = Dict[str, str]


class AnalysisKind(str, Enum):
    """Which extractor produced a digest."""

    PAGE = "page"
    REPO = "repo"


@dataclass
class LinkDescriptor:
    """Anchor text and its resolved target."""

    text: str
    href: str


@dataclass
class FieldDescriptor:
    """A single form control on a rendered page."""

    type: str
    placeholder: str = ""
    name: str = ""


@dataclass
class FormDescriptor:
    """The controls of one form, in document order."""

    fields: List[FieldDescriptor] = field(default_factory=list)


@dataclass
class PageDigest:
    """Bounded structural summary of a rendered page."""

    url: str
    title: str
    headings: List[str] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    links: List[LinkDescriptor] = field(default_factory=list)
    forms: List[FormDescriptor] = field(default_factory=list)

    @property
    def kind(self) -> AnalysisKind:
        return AnalysisKind.PAGE


@dataclass
class SourceFile:
    """A source file selected from a cloned repository."""

    name: str
    extension: str
    path: str
    content: str


@dataclass
class RepoDigest:
    """Capped, ordered selection of repository files."""

    url: str
    files: List[SourceFile] = field(default_factory=list)

    @property
    def kind(self) -> AnalysisKind:
        return AnalysisKind.REPO


@dataclass
class AnalysisResult:
    """Output of one orchestration run, ready to persist."""

    key: str
    function_map: FunctionMap
    project_name: str
    kind: AnalysisKind


@dataclass
class Project:
    """A stored project and its function map."""

    id: int
    project_name: str
    access_key: str
    function_map: FunctionMap
    scrape_url: Optional[str] = None
    repo_url: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class ActivityRecord:
    """Append-only activity entry for a project."""

    id: int
    project_id: int
    action: str
    timestamp: str
    project_name: Optional[str] = None
