"""Content extractors producing bounded digests for the generator."""

from .page import PageExtractor
from .repo import RepoExtractor, collect_source_files

__all__ = ["PageExtractor", "RepoExtractor", "collect_source_files"]
