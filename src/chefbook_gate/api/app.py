"""
chefbook_gate.api.app

FastAPI app factory for the chefbook gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Hold the injected Settings and the login rate limiter on app.state.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chefbook_gate import __version__
from chefbook_gate.api.errors import install_error_handlers
from chefbook_gate.api.ratelimit import SlidingWindowLimiter
from chefbook_gate.api.routers.auth import router as auth_router
from chefbook_gate.api.routers.bookings import router as bookings_router
from chefbook_gate.api.routers.chefs import router as chefs_router
from chefbook_gate.api.routers.health import router as health_router
from chefbook_gate.api.routers.payments import router as payments_router
from chefbook_gate.api.routers.profiles import router as profiles_router
from chefbook_gate.db.session import create_engine, create_schema, create_sessionmaker
from chefbook_gate.observability.logging import configure_logging, get_logger
from chefbook_gate.observability.middleware import RequestContextMiddleware
from chefbook_gate.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await create_schema(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Chefbook Gate",
        version=__version__,
        docs_url=None if settings.env == "prod" else "/docs",
        openapi_url=None if settings.env == "prod" else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.login_limiter = SlidingWindowLimiter(
        limit=settings.login_rate_limit,
        window_seconds=settings.login_rate_window_seconds,
    )

    install_error_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(profiles_router)
    app.include_router(chefs_router)
    app.include_router(bookings_router)
    app.include_router(payments_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; policy lives in `gate`, persistence in `db`.
