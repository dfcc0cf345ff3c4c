"""Tests for the FastAPI service mode."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sxsgen.errors import ComponentNotResolvable, InputFileMissing
from sxsgen.orchestrator import GenerationRequest, SourceMode
from sxsgen.service import create_app


class _StubOrchestrator:
    def __init__(self) -> None:
        self.requests: list[GenerationRequest] = []
        self.error: Exception | None = None

    def generate(self, request: GenerationRequest) -> io.BytesIO:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return io.BytesIO(b'<?xml version="1.0" encoding="utf-8" standalone="yes"?>\n<assembly />\n')


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    app = create_app(lambda: orchestrator)  # type: ignore[arg-type, return-value]
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_manifest_endpoint_returns_xml(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post(
        "/manifest",
        json={
            "mode": "project",
            "source": "C:/src/App.vbp",
            "inline": True,
            "use_common_controls": True,
            "dependency_overrides": ['<assemblyIdentity name="Vendor.Grid" />'],
        },
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.text.startswith("<?xml")
    (request,) = orchestrator.requests
    assert request.mode is SourceMode.PROJECT
    assert request.source == Path("C:/src/App.vbp")
    assert request.inline is True
    assert request.use_common_controls is True
    assert request.dependency_overrides == ('<assemblyIdentity name="Vendor.Grid" />',)


def test_manifest_endpoint_file_set(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post(
        "/manifest",
        json={
            "mode": "fileSet",
            "files": ["a.ocx", "b.vbp"],
            "base_dir": "/srv/suite",
            "assembly_name": "Vendor.Suite",
            "assembly_version": "1.0.0.0",
        },
    )

    assert response.status_code == 200
    (request,) = orchestrator.requests
    assert request.files == ("a.ocx", "b.vbp")
    assert request.base_dir == Path("/srv/suite")
    assert request.dependency_overrides is None


def test_manifest_endpoint_rejects_unknown_mode(client: TestClient) -> None:
    response = client.post("/manifest", json={"mode": "registry"})

    assert response.status_code == 422


def test_pipeline_errors_map_to_bad_request(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    orchestrator.error = ComponentNotResolvable("Can't find filename for guid {X}")

    response = client.post("/manifest", json={"mode": "project", "source": "App.vbp"})

    assert response.status_code == 400
    assert response.json() == {"kind": "ComponentNotResolvable", "detail": "Can't find filename for guid {X}"}


def test_missing_inputs_map_to_not_found(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    orchestrator.error = InputFileMissing("Project file does not exist: App.vbp")

    response = client.post("/manifest", json={"mode": "project", "source": "App.vbp"})

    assert response.status_code == 404
    assert response.json()["kind"] == "InputFileMissing"
