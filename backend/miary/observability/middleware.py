from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from miary.schemas.common import fail
from .metrics import observe_request

logger = structlog.get_logger("http")

REQUEST_ID_HEADER = "X-Request-Id"

# scrapes are not traffic
UNTRACKED_PATHS = frozenset({"/metrics"})


async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    path = request.url.path
    structlog.contextvars.bind_contextvars(request_id=request_id, method=request.method, path=path)

    start = time.perf_counter()
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    except Exception:
        logger.exception("request.error", status_code=500)
        raise
    finally:
        duration = (time.perf_counter() - start) * 1000
        if path not in UNTRACKED_PATHS:
            observe_request(path, request.method, status, duration)
            logger.info("request.completed", status_code=int(status), duration_ms=round(duration, 2))
        structlog.contextvars.clear_contextvars()


def register_request_middleware(app: FastAPI) -> None:
    app.middleware("http")(request_context_middleware)


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info(
        "request.invalid",
        errors=len(errors),
        first_loc=".".join(str(p) for p in errors[0]["loc"]) if errors else None,
    )
    return fail(
        "VALIDATION_ERROR",
        "Request payload failed validation",
        status_code=422,
        details={"errors": errors},
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.exception("request.unhandled_exception", exc_type=type(exc).__name__, error=str(exc))
    payload: dict[str, Any] = {"detail": "Internal Server Error"}
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=500, content=payload)
