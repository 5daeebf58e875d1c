# ruff: noqa

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from starlette.requests import Request

from app.core.error_handling import (
    REQUEST_ID_HEADER,
    _error_payload,
    _get_request_id,
    install_error_handling,
)
from app.core.errors import ProjectLinkBrokenError, TaskNotFoundError


def _app() -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    return app


def test_request_validation_error_includes_request_id():
    app = _app()

    @app.get("/needs-int")
    def needs_int(limit: int) -> dict[str, int]:
        return {"limit": limit}

    client = TestClient(app)
    resp = client.get("/needs-int?limit=abc")

    assert resp.status_code == 422
    body = resp.json()
    assert isinstance(body.get("detail"), list)
    assert isinstance(body.get("request_id"), str) and body["request_id"]
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_request_validation_error_handles_bytes_input_without_500():
    class Payload(BaseModel):
        content: str

    app = _app()

    @app.put("/needs-object")
    def needs_object(payload: Payload) -> dict[str, str]:
        return {"content": payload.content}

    client = TestClient(app, raise_server_exceptions=False)
    resp = client.put(
        "/needs-object",
        content=b"plain-text-body",
        headers={"content-type": "text/plain"},
    )

    assert resp.status_code == 422
    body = resp.json()
    assert isinstance(body.get("detail"), list)
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_http_exception_includes_request_id():
    app = _app()

    @app.get("/nope")
    def nope() -> None:
        raise HTTPException(status_code=404, detail="nope")

    client = TestClient(app)
    resp = client.get("/nope")

    assert resp.status_code == 404
    body = resp.json()
    assert body["detail"] == "nope"
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_domain_not_found_maps_to_404():
    app = _app()

    @app.get("/tasks/{task_id}")
    def task(task_id: int) -> None:
        raise TaskNotFoundError(task_id)

    client = TestClient(app)
    resp = client.get("/tasks/12")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Task 12 not found"


def test_broken_project_link_is_a_generic_500():
    app = _app()

    @app.get("/evaluate")
    def evaluate() -> None:
        raise ProjectLinkBrokenError(task_id=3, project_id=9)

    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/evaluate")

    assert resp.status_code == 500
    body = resp.json()
    # Internal identifiers stay in the logs.
    assert body["detail"] == "Internal Server Error"
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_response_validation_error_returns_500_with_request_id():
    class Out(BaseModel):
        name: str = Field(min_length=1)

    app = _app()

    @app.get("/bad", response_model=Out)
    def bad() -> dict[str, str]:
        return {"name": ""}

    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/bad")

    assert resp.status_code == 500
    body = resp.json()
    assert body["detail"] == "Internal Server Error"
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_client_provided_request_id_is_preserved():
    app = _app()

    @app.get("/needs-int")
    def needs_int(limit: int) -> dict[str, int]:
        return {"limit": limit}

    client = TestClient(app)
    resp = client.get("/needs-int?limit=abc", headers={REQUEST_ID_HEADER: "  req-123  "})

    assert resp.status_code == 422
    body = resp.json()
    assert body["request_id"] == "req-123"
    assert resp.headers.get(REQUEST_ID_HEADER) == "req-123"


def test_successful_response_carries_request_id():
    app = _app()

    @app.get("/ok")
    def ok() -> dict[str, str]:
        return {"ok": "1"}

    client = TestClient(app)
    resp = client.get("/ok")

    assert resp.status_code == 200
    assert isinstance(resp.headers.get(REQUEST_ID_HEADER), str)


def test_get_request_id_prefers_state_value():
    req = Request({"type": "http", "headers": [], "state": {"request_id": "abc"}})
    assert _get_request_id(req) == "abc"


def test_get_request_id_generates_when_missing():
    req = Request({"type": "http", "headers": [], "state": {}})
    generated = _get_request_id(req)
    assert isinstance(generated, str) and generated
    assert _get_request_id(req) == generated


def test_error_payload_shape():
    assert _error_payload(detail="x", request_id="req-1") == {"detail": "x", "request_id": "req-1"}
