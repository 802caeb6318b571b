from __future__ import annotations

import logging
from typing import Any, Dict

import structlog

from miary.config import get_settings

SERVICE_NAME = "miary-report-engine"


def configure_logging(level: str | None = None) -> None:
    """
    Route structlog and stdlib records through one handler. Engine modules log
    with ``logging.getLogger(__name__)``; those records get the same JSON shape,
    request context and service fields as the structlog events from the HTTP
    layer. ``ENV=dev`` renders for the console instead.
    """
    settings = get_settings()
    log_level = (level or settings.LOG_LEVEL).upper()

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_service_context,
    ]
    if settings.ENV == "dev":
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        wrapper_class=structlog.stdlib.BoundLogger,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def _add_service_context(logger: Any, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    settings = get_settings()
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("env", settings.ENV)
    event_dict.setdefault("version", settings.APP_VERSION)
    return event_dict
