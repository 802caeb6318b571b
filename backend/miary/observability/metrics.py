from __future__ import annotations

from collections import defaultdict, deque
from typing import Deque, Dict, List

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
)

router = APIRouter(tags=["observability"])

REQUEST_COUNTER = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency",
    ["path", "method"],
)
COMPUTATION_COUNTER = Counter(
    "miary_computations_total",
    "Report engine invocations",
    ["computation", "status"],
)
COMPUTATION_LATENCY = Histogram(
    "miary_computation_duration_seconds",
    "Report engine run time",
    ["computation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)


class LatencyWindow:
    """Rolling per-path latency samples (ms) for the p50/p95 health view."""

    def __init__(self, size: int = 200) -> None:
        self._samples: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=size))

    def record(self, path: str, duration_ms: float) -> None:
        self._samples[path].append(duration_ms)

    def summary(self) -> List[dict]:
        rows = []
        for path, samples in self._samples.items():
            if not samples:
                continue
            ordered = sorted(samples)
            rows.append({
                "path": path,
                "p50_ms": round(percentile(ordered, 50), 2),
                "p95_ms": round(percentile(ordered, 95), 2),
                "sample_size": len(ordered),
            })
        return rows


REQUEST_WINDOW = LatencyWindow()


def observe_request(path: str, method: str, status: str, duration_ms: float) -> None:
    REQUEST_WINDOW.record(path, duration_ms)
    REQUEST_COUNTER.labels(path=path, method=method, status=status).inc()
    REQUEST_LATENCY.labels(path=path, method=method).observe(duration_ms / 1000)


def observe_computation(computation: str, status: str, duration_ms: float) -> None:
    COMPUTATION_COUNTER.labels(computation=computation, status=status).inc()
    COMPUTATION_LATENCY.labels(computation=computation).observe(duration_ms / 1000)


@router.get("/metrics")
async def metrics_endpoint() -> PlainTextResponse:
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/api/health/latency")
async def latency_health() -> dict:
    return {"paths": REQUEST_WINDOW.summary()}


def percentile(ordered: List[float], pct: float) -> float:
    """Linear interpolation between closest ranks; ``ordered`` must be sorted."""
    if not ordered:
        return 0.0
    k = (len(ordered) - 1) * (pct / 100)
    lo = int(k)
    hi = min(lo + 1, len(ordered) - 1)
    return ordered[lo] + (ordered[hi] - ordered[lo]) * (k - lo)
