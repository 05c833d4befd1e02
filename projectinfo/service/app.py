"""FastAPI application exposing projectinfo detection over HTTP."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..orchestrator import Orchestrator
from ..stores.result_cache import result_to_dict


class LineStatsModel(BaseModel):
    code: int
    nFiles: int


class ProjectDetailsResponse(BaseModel):
    languages: List[str]
    frameworks: List[str]
    details: Dict[str, str]
    cloc: Dict[str, LineStatsModel]


class DetectRequest(BaseModel):
    path: str
    write: bool = True


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator(root: Path) -> Orchestrator:
    return Orchestrator(root)


def create_app(
    orchestrator_factory: Callable[[Path], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing projectinfo operations."""

    app = FastAPI(title="projectinfo", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/project", response_model=ProjectDetailsResponse)
    async def read_project(path: str) -> Dict[str, Any]:
        root = _resolve_root(path)
        orchestrator = orchestrator_factory(root)
        result = await orchestrator.read(root)
        if result is None:
            raise HTTPException(status_code=404, detail=f"No project details cached for {root}")
        return result_to_dict(result)

    @app.post("/detect", response_model=ProjectDetailsResponse)
    async def detect_project(payload: DetectRequest) -> Dict[str, Any]:
        root = _resolve_root(payload.path)
        orchestrator = orchestrator_factory(root)
        result = await orchestrator.detect(root)
        if payload.write:
            await orchestrator.write(root, result)
        return result_to_dict(result)

    return app


def _resolve_root(path: str) -> Path:
    root = Path(path).expanduser().resolve()
    if not root.is_dir():
        raise HTTPException(status_code=404, detail=f"{root} is not a directory")
    return root


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
