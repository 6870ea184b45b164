"""In-process project store used by tests and one-off CLI runs."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Mapping, Optional

from ..models import ActivityRecord, Project
from .base import utc_timestamp


class InMemoryProjectStore:
    """Dictionary-backed ``ProjectStore``; state lives only as long as the instance."""

    def __init__(self) -> None:
        self._projects: Dict[int, Project] = {}
        self._activity: List[ActivityRecord] = []
        self._next_project_id = 1
        self._next_activity_id = 1
        self._lock = threading.Lock()

    def create_project(
        self,
        project_name: str,
        access_key: str,
        function_map: Mapping[str, str],
        *,
        scrape_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ) -> int:
        with self._lock:
            if any(project.access_key == access_key for project in self._projects.values()):
                raise ValueError("Access key already issued")
            project_id = self._next_project_id
            self._next_project_id += 1
            now = utc_timestamp()
            self._projects[project_id] = Project(
                id=project_id,
                project_name=project_name,
                access_key=access_key,
                function_map=dict(function_map),
                scrape_url=scrape_url,
                repo_url=repo_url,
                created_at=now,
                updated_at=now,
            )
            return project_id

    def get_project_by_id(self, project_id: int) -> Optional[Project]:
        project = self._projects.get(project_id)
        return _copy(project) if project else None

    def get_project_by_key(self, access_key: str) -> Optional[Project]:
        for project in self._projects.values():
            if project.access_key == access_key:
                return _copy(project)
        return None

    def list_projects(self) -> List[Project]:
        ordered = sorted(self._projects.values(), key=lambda project: project.id, reverse=True)
        return [_copy(project) for project in ordered]

    def delete_project(self, project_id: int) -> bool:
        with self._lock:
            return self._projects.pop(project_id, None) is not None

    def log_activity(self, project_id: int, action: str) -> None:
        with self._lock:
            self._activity.append(
                ActivityRecord(
                    id=self._next_activity_id,
                    project_id=project_id,
                    action=action,
                    timestamp=utc_timestamp(),
                )
            )
            self._next_activity_id += 1

    def recent_activity(self, limit: int = 10) -> List[ActivityRecord]:
        records = []
        for record in reversed(self._activity[-limit:] if limit > 0 else []):
            project = self._projects.get(record.project_id)
            records.append(replace(record, project_name=project.project_name if project else None))
        return records


def _copy(project: Project) -> Project:
    return replace(project, function_map=dict(project.function_map))


__all__ = ["InMemoryProjectStore"]
