"""Prometheus metrics, Sentry integration, and scoring call tracking.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics
- init_sentry(): Initialize Sentry for the API process
- track_reputation_calculation(): Context manager for reputation scoring metrics
- record_channel_recommendation() / record_channel_submission(): domain counters
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.consumidor.core.errors import NotFoundError

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Scoring Metrics ──────────────────────────────────────────────────────────

reputation_calculations_total = Counter(
    "reputation_calculations_total",
    "Total company reputation calculations",
    ["status"],
)

reputation_calculation_duration_seconds = Histogram(
    "reputation_calculation_duration_seconds",
    "Company reputation calculation duration in seconds (fetch included)",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

channel_recommendations_total = Counter(
    "channel_recommendations_total",
    "Total channel recommendation requests",
    ["category", "priority"],
)

channel_submissions_total = Counter(
    "channel_submissions_total",
    "Complaint submissions to external channels",
    ["channel", "status"],
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records Prometheus metrics for every HTTP request.

    Skips the /metrics endpoint itself to avoid self-referential counting.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # Route pattern keeps company/complaint ids out of the label set
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()

        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Domain Metrics Helpers ──────────────────────────────────────────────────


@asynccontextmanager
async def track_reputation_calculation() -> AsyncGenerator[None, None]:
    """Record duration and outcome of one reputation calculation.

    Usage:
        async with track_reputation_calculation():
            reputation = await self._calculate(company_id)

    NotFound lookups are counted as ``not_found``; any other exception as
    ``error``. The exception is always re-raised.
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except NotFoundError:
        status = "not_found"
        raise
    except Exception:
        status = "error"
        raise
    finally:
        reputation_calculations_total.labels(status=status).inc()
        reputation_calculation_duration_seconds.observe(time.perf_counter() - start_time)


def record_channel_recommendation(category: str, priority: str) -> None:
    channel_recommendations_total.labels(category=category, priority=priority).inc()


def record_channel_submission(channel: str, success: bool) -> None:
    channel_submissions_total.labels(
        channel=channel, status="success" if success else "failure"
    ).inc()


# ── Sentry Integration ───────────────────────────────────────────────────────


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration

    traces_sample_rate = 0.1 if environment == "production" else 1.0

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        send_default_pii=False,
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
