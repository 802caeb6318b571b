from __future__ import annotations

import functools
import time
from typing import Any, Callable, TypeVar

import structlog

from .metrics import observe_computation

F = TypeVar("F", bound=Callable[..., Any])

logger = structlog.get_logger("compute")


def _result_size(res: Any) -> int | None:
    """Days produced by an engine call: feature list, report day records or a plain list."""
    if isinstance(res, list):
        return len(res)
    features = getattr(res, "features", None)
    if isinstance(features, list):
        return len(features)
    report = getattr(res, "report", res)
    raw = getattr(report, "raw", None)
    if raw is not None:
        return len(raw.counts_by_day)
    coverage = getattr(res, "coverage", None)
    return getattr(coverage, "days_documented", None)


def log_computation(name: str) -> Callable[[F], F]:
    """Time an engine entry point, count it by outcome and emit structured logs."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            start = time.perf_counter()
            logger.debug("compute.start", computation=name)
            try:
                result = func(*args, **kwargs)
            except Exception:
                duration = (time.perf_counter() - start) * 1000
                observe_computation(name, "error", duration)
                logger.exception("compute.error", computation=name, duration_ms=round(duration, 2))
                raise
            duration = (time.perf_counter() - start) * 1000
            observe_computation(name, "ok", duration)
            logger.info(
                "compute.completed",
                computation=name,
                duration_ms=round(duration, 2),
                result_size=_result_size(result),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
