from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from miary.observability.instrument import log_computation
from miary.observability.metrics import COMPUTATION_COUNTER
from miary.observability.middleware import (
    register_request_middleware,
    unhandled_exception_handler,
)


def _build_app():
    app = FastAPI()
    register_request_middleware(app)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    return app


def test_request_context_adds_request_id_header():
    app = _build_app()

    @app.get("/ok")
    def ok_route():
        return {"ok": True}

    client = TestClient(app)
    resp = client.get("/ok")
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-Id")


def test_unhandled_exception_returns_request_id():
    from fastapi import Request
    from starlette.types import Scope

    scope: Scope = {"type": "http", "method": "GET", "path": "/", "headers": []}
    request = Request(scope)
    request.state.request_id = "abc-123"
    response = unhandled_exception_handler(request, RuntimeError("boom"))
    assert response.status_code == 500
    assert response.body
    assert b"abc-123" in response.body


def _counter(name: str, status: str) -> float:
    return COMPUTATION_COUNTER.labels(computation=name, status=status)._value.get()


def test_log_computation_counts_success_and_error():
    @log_computation("sample_job")
    def sample_job(fail: bool = False):
        if fail:
            raise ValueError("nope")
        return [1, 2, 3]

    ok_before = _counter("sample_job", "ok")
    err_before = _counter("sample_job", "error")

    assert sample_job() == [1, 2, 3]
    try:
        sample_job(fail=True)
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError")

    assert _counter("sample_job", "ok") == ok_before + 1
    assert _counter("sample_job", "error") == err_before + 1
    assert sample_job.__name__ == "sample_job"


def test_percentile_interpolates():
    from miary.observability.metrics import percentile

    assert percentile([], 50) == 0.0
    assert percentile([10.0], 95) == 10.0
    assert percentile([1.0, 2.0, 3.0, 4.0], 50) == 2.5
    assert percentile([0.0, 10.0], 95) == pytest.approx(9.5)
