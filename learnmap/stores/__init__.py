"""Project persistence backends."""

from .base import PROJECT_CREATED, ProjectStore
from .memory import InMemoryProjectStore
from .sqlite import SQLiteProjectStore

__all__ = ["InMemoryProjectStore", "PROJECT_CREATED", "ProjectStore", "SQLiteProjectStore"]
