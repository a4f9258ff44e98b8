import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.dal import Database
from .db.migrate import apply_migrations
from .core import errors
from .routers import health, currency, parking, geo
from .services.locale import locale_context_middleware
from .services.rates.base import RateFetcher
from .services.rates.currency_service import CurrencyService
from .services.rates.providers import make_rate_fetcher

logger = logging.getLogger("app")


def build_currency_service(
    settings: Settings, rate_fetcher: RateFetcher | None = None
) -> CurrencyService:
    return CurrencyService(
        Database(settings.db_path),  # type: ignore[arg-type]
        rate_fetcher or make_rate_fetcher(settings),
        cache_ttl=timedelta(seconds=settings.rates_cache_ttl_seconds),
        supported_currencies=settings.supported_currencies,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings.initialize_rates_on_startup:
        summary = await app.state.currency_service.initialize_rates()
        missing = [pair for pair, rate in summary.items() if rate is None]
        if missing:
            logger.warning("exchange rates not initialized for %s", ", ".join(missing))
    yield


def create_app(
    settings_override: Settings | None = None,
    rate_fetcher: RateFetcher | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    rate_fetcher: replaces the configured provider (tests, offline runs).
    """
    settings = settings_override or get_settings()
    if settings.db_path is None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    # Ensure database schema (idempotent) so test-injected fresh DBs have tables
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logger.exception("failed to apply migrations on startup")
        raise

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.currency_service = build_currency_service(settings, rate_fetcher)

    # Middleware: the last one added runs first, so request ids wrap locale detection
    app.middleware("http")(locale_context_middleware)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(currency.router)
    app.include_router(parking.router)
    app.include_router(geo.router)

    @app.get("/")
    async def root():
        return {"message": "Airport Parking Pricing API", "version": settings.version}

    return app


app = create_app()
