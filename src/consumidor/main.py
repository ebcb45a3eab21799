"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
lifespan events for database initialization and service wiring, and the v1
API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.consumidor.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.consumidor.api.v1.router import router as v1_router
from src.consumidor.config import get_settings
from src.consumidor.core.database import close_db, get_session, init_db
from src.consumidor.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: init DB, Sentry and services on startup, close on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()
    await init_db()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    # Each module is wrapped in its own try/except so one failure leaves the
    # others serving; endpoints of a failed module answer 503.

    try:
        from src.consumidor.channels.scorer import ChannelScorer

        app.state.channel_scorer = ChannelScorer(
            recommendation_threshold=settings.CHANNEL_RECOMMENDATION_THRESHOLD,
        )
        log.info("startup.channel_scorer_initialized")
    except Exception:
        log.warning("startup.channel_scorer_init_failed", exc_info=True)
        app.state.channel_scorer = None

    try:
        from src.consumidor.complaints.repository import ComplaintRepository
        from src.consumidor.reputation.calculator import ReputationCalculator
        from src.consumidor.reputation.ranking import CategoryRankingAggregator
        from src.consumidor.reputation.service import ReputationService

        complaint_repository = ComplaintRepository(session_factory=get_session)
        app.state.complaint_repository = complaint_repository
        app.state.reputation_service = ReputationService(
            complaint_repository,
            calculator=ReputationCalculator(
                trend_window_days=settings.TREND_WINDOW_DAYS,
                trend_min_complaints=settings.TREND_MIN_COMPLAINTS,
                trend_significance=settings.TREND_SIGNIFICANCE,
            ),
            ranking=CategoryRankingAggregator(
                complaint_repository,
                window_days=settings.CATEGORY_RANKING_WINDOW_DAYS,
            ),
        )
        log.info("startup.reputation_service_initialized")
    except Exception:
        log.warning("startup.reputation_service_init_failed", exc_info=True)
        app.state.complaint_repository = None
        app.state.reputation_service = None

    try:
        from src.consumidor.distribution.gateway import ChannelGateway
        from src.consumidor.distribution.orchestrator import DistributionOrchestrator

        if app.state.complaint_repository is None or app.state.channel_scorer is None:
            raise RuntimeError("distribution requires the complaint store and channel scorer")

        gateway = ChannelGateway(
            settings.CHANNEL_API_ENDPOINTS,
            api_token=settings.CHANNEL_API_TOKEN,
            timeout=settings.CHANNEL_API_TIMEOUT,
        )
        app.state.distribution_orchestrator = DistributionOrchestrator(
            app.state.complaint_repository,
            app.state.channel_scorer,
            gateway=gateway,
        )
        log.info(
            "startup.distribution_initialized",
            configured_channels=sorted(settings.CHANNEL_API_ENDPOINTS),
        )
    except Exception:
        log.warning("startup.distribution_init_failed", exc_info=True)
        app.state.distribution_orchestrator = None

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Central do Consumidor API",
        version="0.1.0",
        description="Company reputation scoring and complaint channel recommendation",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    # Outermost -- records Prometheus metrics for all requests
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router, prefix="/api/v1")

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
