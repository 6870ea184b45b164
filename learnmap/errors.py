"""Exception taxonomy shared by the analysis pipeline."""

from __future__ import annotations


class LearnMapError(RuntimeError):
    """Base class for all learnmap failures."""


class ConfigError(LearnMapError):
    """Raised when the configuration file cannot be parsed."""


class ValidationError(LearnMapError):
    """Raised when caller input is missing or malformed."""


class FetchError(LearnMapError):
    """Raised when a page cannot be loaded or rendered."""


class RenderTimeout(FetchError):
    """Raised when a page does not settle within the render timeout."""


class CloneError(LearnMapError):
    """Raised when a repository cannot be cloned."""


class GenerationError(LearnMapError):
    """Raised when the text-generation backend fails for a prompt."""


class ParseError(LearnMapError):
    """Raised when model output is not a usable function map."""


class AnalysisError(LearnMapError):
    """Fatal analysis failure wrapping the extraction or generation cause."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def classification(self) -> str:
        if self.cause is None:
            return "AnalysisError"
        if isinstance(self.cause, OSError):
            return "IOError"
        return type(self.cause).__name__


__all__ = [
    "AnalysisError",
    "CloneError",
    "ConfigError",
    "FetchError",
    "GenerationError",
    "LearnMapError",
    "ParseError",
    "RenderTimeout",
    "ValidationError",
]
