"""FastAPI application entrypoint for sxsgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..config import SxsGenConfig, load_config
from ..errors import InputFileMissing, ManifestError
from ..orchestrator import GenerationRequest, ManifestOrchestrator, SourceMode

XML_MEDIA_TYPE = "application/xml"


class ManifestRequest(BaseModel):
    mode: SourceMode
    source: Optional[str] = None
    files: List[str] = []
    base_dir: Optional[str] = None
    assembly_name: str = ""
    assembly_version: str = ""
    description: str = ""
    inline: bool = False
    use_common_controls: bool = False
    dependency_overrides: Optional[List[str]] = None

    def to_generation_request(self) -> GenerationRequest:
        return GenerationRequest(
            mode=self.mode,
            source=Path(self.source) if self.source else None,
            files=tuple(self.files),
            base_dir=Path(self.base_dir) if self.base_dir else None,
            assembly_name=self.assembly_name,
            assembly_version=self.assembly_version,
            description=self.description,
            inline=self.inline,
            use_common_controls=self.use_common_controls,
            dependency_overrides=(
                tuple(self.dependency_overrides) if self.dependency_overrides is not None else None
            ),
        )


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> ManifestOrchestrator:
    config: SxsGenConfig = load_config(Path.cwd())
    return ManifestOrchestrator.from_config(config)


def create_app(
    orchestrator_factory: Callable[[], ManifestOrchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing manifest generation."""

    app = FastAPI(title="sxsgen Service", version="1.0.0")

    async def get_orchestrator() -> ManifestOrchestrator:
        # Lazy-instantiate per request so registry reads reflect the current state.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/manifest")
    async def generate_manifest(
        payload: ManifestRequest,
        orchestrator: ManifestOrchestrator = Depends(get_orchestrator),
    ) -> Response:
        request = payload.to_generation_request()
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, orchestrator.generate, request)
        return Response(content=data.getvalue(), media_type=XML_MEDIA_TYPE)

    @app.exception_handler(InputFileMissing)
    async def input_missing_handler(_: Any, exc: InputFileMissing) -> JSONResponse:
        return JSONResponse(status_code=404, content={"kind": exc.kind, "detail": str(exc)})

    @app.exception_handler(ManifestError)
    async def manifest_error_handler(_: Any, exc: ManifestError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"kind": exc.kind, "detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the manifest API with uvicorn until interrupted."""
    app = create_app()
    uvicorn.run(app, host=host, port=port)
