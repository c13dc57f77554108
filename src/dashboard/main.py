"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, an allowlisted
CORS policy, Sentry, lifespan events for database initialization, the
repositories used by the endpoints, and the v1 API router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.dashboard.config import get_settings
from src.dashboard.core.database import close_db, get_session, init_db
from src.dashboard.core.errors import register_exception_handlers
from src.dashboard.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.dashboard.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.dashboard.api.v1.router import router as v1_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: init DB, repositories and Sentry on startup, close on shutdown."""
    import structlog

    from src.dashboard.auth.repository import AdminRepository
    from src.dashboard.contacts.repository import ContactRepository
    from src.dashboard.deal_contacts.repository import DealContactRepository

    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()
    await init_db()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    if not settings.JWT_SECRET_KEY:
        # Startup continues; login and protected routes answer 500 until configured.
        log.error("config.jwt_secret_missing")

    app.state.admin_repository = AdminRepository(session_factory=get_session)
    app.state.contact_repository = ContactRepository(session_factory=get_session)
    app.state.deal_contact_repository = DealContactRepository(session_factory=get_session)
    log.info("dashboard.repositories_initialized")

    yield

    await close_db()
    log.info("dashboard.shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        description="Administrative backend for contact requests and deal contacts",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware (explicit allowlist, bearer tokens only -- no cookies)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Service banner."""
        return {"message": f"{settings.PROJECT_NAME} API is running"}

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
