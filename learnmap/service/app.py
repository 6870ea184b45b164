"""FastAPI application entrypoint for learnmap service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..config import LearnMapConfig, load_config
from ..errors import AnalysisError, LearnMapError, ValidationError
from ..logging import get_logger
from ..models import ActivityRecord, Project
from ..orchestrator import Orchestrator
from ..stores import SQLiteProjectStore

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
JAVASCRIPT_MEDIA_TYPE = "application/javascript"

T = TypeVar("T")

logger = get_logger("service")


class CreateProjectRequest(BaseModel):
    project_name: str = ""
    scrape_url: Optional[str] = None
    repo_url: Optional[str] = None


class ProjectResponse(BaseModel):
    id: int
    project_name: str
    access_key: str
    scrape_url: Optional[str] = None
    repo_url: Optional[str] = None
    function_map: Dict[str, str]
    created_at: str
    updated_at: str


class ProjectSummary(BaseModel):
    id: int
    project_name: str
    access_key: str
    scrape_url: Optional[str] = None
    repo_url: Optional[str] = None
    function_map_count: int
    created_at: str


class ActivityResponse(BaseModel):
    id: int
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    action: str
    timestamp: str


class DeleteResponse(BaseModel):
    status: str


class HealthResponse(BaseModel):
    status: str


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] | None = None,
    *,
    config: LearnMapConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing learnmap operations.

    Without a factory, every request gets a fresh orchestrator sharing one
    SQLite store located by the loaded configuration.
    """
    if orchestrator_factory is None:
        resolved = config or load_config()
        shared_store = SQLiteProjectStore(resolved.store.path)

        def orchestrator_factory() -> Orchestrator:
            return Orchestrator(config=resolved, store=shared_store)

    factory = orchestrator_factory
    app = FastAPI(title="learnmap Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/projects", response_model=ProjectResponse)
    async def create_project(
        payload: CreateProjectRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ProjectResponse:
        def _run_create() -> Project:
            return orchestrator.create_project(
                payload.project_name,
                scrape_url=payload.scrape_url,
                repo_url=payload.repo_url,
            )

        project = await _run_blocking(_run_create)
        return _project_response(project)

    @app.get("/projects", response_model=List[ProjectSummary])
    async def list_projects(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> List[ProjectSummary]:
        projects = await _run_blocking(orchestrator.store.list_projects)
        return [
            ProjectSummary(
                id=project.id,
                project_name=project.project_name,
                access_key=project.access_key,
                scrape_url=project.scrape_url,
                repo_url=project.repo_url,
                function_map_count=len(project.function_map),
                created_at=project.created_at,
            )
            for project in projects
        ]

    @app.get("/projects/{project_id}", response_model=ProjectResponse)
    async def get_project(
        project_id: int,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Any:
        project = await _run_blocking(lambda: orchestrator.store.get_project_by_id(project_id))
        if project is None:
            return JSONResponse(status_code=404, content={"error": "Project not found"})
        return _project_response(project)

    @app.delete("/projects/{project_id}", response_model=DeleteResponse)
    async def delete_project(
        project_id: int,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Any:
        deleted = await _run_blocking(lambda: orchestrator.store.delete_project(project_id))
        if not deleted:
            return JSONResponse(status_code=404, content={"error": "Project not found"})
        logger.info("Deleted project %d", project_id)
        return DeleteResponse(status="deleted")

    @app.get("/activity", response_model=List[ActivityResponse])
    async def recent_activity(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> List[ActivityResponse]:
        records = await _run_blocking(orchestrator.store.recent_activity)
        return [_activity_response(record) for record in records]

    @app.get("/lookup", name="lookup")
    async def lookup(
        key: Optional[str] = None,
        apiKey: Optional[str] = None,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        access_key = (key or apiKey or "").strip()
        if not access_key:
            return JSONResponse(
                status_code=400, content={"error": "API key is required"}, headers=CORS_HEADERS
            )
        project = await _run_blocking(lambda: orchestrator.store.get_project_by_key(access_key))
        if project is None:
            return JSONResponse(
                status_code=404, content={"error": "Invalid API key"}, headers=CORS_HEADERS
            )
        return JSONResponse(content=project.function_map, headers=CORS_HEADERS)

    @app.options("/lookup")
    async def lookup_preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.get("/plugin/{key}.js")
    async def embedded_plugin(
        key: str,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Response:
        script = await _run_blocking(lambda: orchestrator.build_plugin(key))
        if script is None:
            return Response(
                content="/* learnmap: unknown API key */\n",
                status_code=404,
                media_type=JAVASCRIPT_MEDIA_TYPE,
            )
        return Response(content=script, media_type=JAVASCRIPT_MEDIA_TYPE)

    @app.get("/plugin.js")
    async def loader_plugin(
        request: Request,
        key: Optional[str] = None,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Response:
        endpoint = orchestrator.config.plugin.lookup_endpoint or str(request.url_for("lookup"))
        script = orchestrator.build_loader(endpoint, key=(key or "").strip() or None)
        return Response(content=script, media_type=JAVASCRIPT_MEDIA_TYPE)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_: Any, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "ValidationError", "detail": str(exc)},
        )

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(_: Any, exc: AnalysisError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": exc.classification, "detail": str(exc)},
        )

    @app.exception_handler(LearnMapError)
    async def learnmap_error_handler(_: Any, exc: LearnMapError) -> JSONResponse:
        logger.exception("Unhandled learnmap failure")
        return JSONResponse(
            status_code=500,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app


async def _run_blocking(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        project_name=project.project_name,
        access_key=project.access_key,
        scrape_url=project.scrape_url,
        repo_url=project.repo_url,
        function_map=project.function_map,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _activity_response(record: ActivityRecord) -> ActivityResponse:
    return ActivityResponse(
        id=record.id,
        project_id=record.project_id,
        project_name=record.project_name,
        action=record.action,
        timestamp=record.timestamp,
    )


def run_service(
    host: str = "0.0.0.0", port: int = 8000, *, config: LearnMapConfig | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)
