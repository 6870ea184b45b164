"""Persistence protocol for projects and their activity log."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import List, Mapping, Optional, Protocol

from ..models import ActivityRecord, Project

PROJECT_CREATED = "Project created"


class ProjectStore(Protocol):
    """Storage for projects keyed by id and by access key."""

    def create_project(
        self,
        project_name: str,
        access_key: str,
        function_map: Mapping[str, str],
        *,
        scrape_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ) -> int:
        """Persist a new project and return its id."""

    def get_project_by_id(self, project_id: int) -> Optional[Project]:
        """Return the project or ``None``."""

    def get_project_by_key(self, access_key: str) -> Optional[Project]:
        """Return the project owning ``access_key`` or ``None``."""

    def list_projects(self) -> List[Project]:
        """Return all projects, newest first."""

    def delete_project(self, project_id: int) -> bool:
        """Delete a project, revoking its key; ``False`` when it did not exist."""

    def log_activity(self, project_id: int, action: str) -> None:
        """Append an activity record."""

    def recent_activity(self, limit: int = 10) -> List[ActivityRecord]:
        """Return the newest activity records first."""


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


__all__ = ["PROJECT_CREATED", "ProjectStore", "utc_timestamp"]
