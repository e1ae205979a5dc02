from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core.middleware import (
    RateLimiter,
    make_rate_limit_middleware,
    security_headers_middleware,
)
from .core import errors
from .db.dal import RateStore
from .routers import health, rates
from .services.currency_names import make_name_resolver
from .services.rate_service import RateAcquisitionService
from .services.rates.base import RateProvider
from .services.rates.providers import make_rate_provider
from .services.scheduler import RefreshScheduler

logger = logging.getLogger("app")


def build_rate_service(
    settings: Settings, provider_override: RateProvider | None = None
) -> RateAcquisitionService:
    provider = provider_override or make_rate_provider(
        settings.exchange_rate_provider, settings
    )
    return RateAcquisitionService(
        provider=provider,
        store=RateStore.from_path(settings.db_path),  # type: ignore[arg-type]
        base_currency=settings.base_currency,
        resolve_name=make_name_resolver(settings.display_locale),
    )


def create_app(
    settings_override: Settings | None = None,
    provider_override: RateProvider | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    provider_override: inject a RateProvider instead of the configured one.
    """
    if settings_override is not None:
        settings_override.init_post_load()
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    service = build_rate_service(settings, provider_override)
    scheduler = RefreshScheduler(service, settings.refresh_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.refresh_on_startup:
            await scheduler.run_once()
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_service = service
    app.state.scheduler = scheduler

    # Middleware: last registered runs first, so request context wraps everything.
    app.middleware("http")(
        make_rate_limit_middleware(
            RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
        )
    )
    app.middleware("http")(security_headers_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "Currency Rates API", "version": settings.version}

    return app


app = create_app()
