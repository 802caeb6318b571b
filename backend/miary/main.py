# miary/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# Import router objects explicitly to avoid module name collisions
from miary.routers.health import router as health_router
from miary.routers.report import router as report_router
from miary.routers.weather import router as weather_router
from miary.observability.logging import configure_logging
from miary.observability.middleware import (
    register_request_middleware,
    unhandled_exception_handler,
    validation_exception_handler,
)
from miary.observability.metrics import router as observability_router
from miary.config import get_settings

configure_logging()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Miary Report Engine", version=settings.APP_VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400
    )

    register_request_middleware(app)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(observability_router)
    app.include_router(report_router)
    app.include_router(weather_router)

    return app


app = create_app()
