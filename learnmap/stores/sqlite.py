"""SQLite-backed project store."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, List, Mapping, Optional

from ..models import ActivityRecord, Project
from .base import utc_timestamp

_SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_name TEXT NOT NULL,
    api_key TEXT UNIQUE NOT NULL,
    github_url TEXT,
    scrape_url TEXT,
    function_map TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS activity (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER,
    action TEXT NOT NULL,
    timestamp TEXT NOT NULL
);
"""


class SQLiteProjectStore:
    """``ProjectStore`` persisted to a SQLite file; one connection per operation."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def create_project(
        self,
        project_name: str,
        access_key: str,
        function_map: Mapping[str, str],
        *,
        scrape_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ) -> int:
        now = utc_timestamp()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO projects
                    (project_name, api_key, github_url, scrape_url, function_map, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project_name,
                    access_key,
                    repo_url,
                    scrape_url,
                    json.dumps(dict(function_map)),
                    now,
                    now,
                ),
            )
            return int(cursor.lastrowid)

    def get_project_by_id(self, project_id: int) -> Optional[Project]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        return _row_to_project(row) if row else None

    def get_project_by_key(self, access_key: str) -> Optional[Project]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM projects WHERE api_key = ?", (access_key,)
            ).fetchone()
        return _row_to_project(row) if row else None

    def list_projects(self) -> List[Project]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM projects ORDER BY id DESC"
            ).fetchall()
        return [_row_to_project(row) for row in rows]

    def delete_project(self, project_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
            return cursor.rowcount > 0

    def log_activity(self, project_id: int, action: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO activity (project_id, action, timestamp) VALUES (?, ?, ?)",
                (project_id, action, utc_timestamp()),
            )

    def recent_activity(self, limit: int = 10) -> List[ActivityRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT a.id, a.project_id, a.action, a.timestamp, p.project_name
                FROM activity a
                LEFT JOIN projects p ON a.project_id = p.id
                ORDER BY a.id DESC
                LIMIT ?
                """,
                (max(0, limit),),
            ).fetchall()
        return [
            ActivityRecord(
                id=row["id"],
                project_id=row["project_id"],
                action=row["action"],
                timestamp=row["timestamp"],
                project_name=row["project_name"],
            )
            for row in rows
        ]


def _row_to_project(row: sqlite3.Row) -> Project:
    function_map = json.loads(row["function_map"])
    return Project(
        id=row["id"],
        project_name=row["project_name"],
        access_key=row["api_key"],
        function_map=function_map if isinstance(function_map, dict) else {},
        scrape_url=row["scrape_url"],
        repo_url=row["github_url"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


__all__ = ["SQLiteProjectStore"]
