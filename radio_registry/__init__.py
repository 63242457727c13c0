"""Application factory and top-level wiring for the Radio Registry service.

``create_app`` owns the database engine: it is built here, stored on
``app.state`` for the ``get_db`` dependency, and disposed on shutdown.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import (
    RegistryError,
    http_exception_handler,
    rate_limit_handler,
    registry_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .core.ratelimit import ApiRateLimitMiddleware, build_limiter
from .core.settings import AppSettings, get_settings
from .db.migrate import run_migrations
from .db.session import Base, build_engine, build_session_factory
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the SQLAlchemy models registers them with the metadata. Without
# this step ``Base.metadata.create_all`` would not know about our tables.
from .models import audit_log as _audit_log  # noqa: F401
from .models import radio as _radio  # noqa: F401

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()

    engine = build_engine(settings.database_url)
    # ``create_all`` covers brand-new databases, ``run_migrations`` upgrades
    # registries created by earlier releases.
    Base.metadata.create_all(bind=engine)
    run_migrations(engine)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    limiter = build_limiter(settings)
    app.state.limiter = limiter

    # Last added runs first: request ids wrap everything, the limiter sits
    # closest to the routes.
    app.add_middleware(ApiRateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.APP_ENV == "production")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    from .routers import api_radios as api_radios_router
    from .routers import api_reports as api_reports_router

    app.include_router(api_radios_router.router)
    app.include_router(api_reports_router.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.on_event("shutdown")
    def _dispose_engine() -> None:
        engine.dispose()
        logger.info("Database connection closed.")

    logger.info("Radio registry ready", extra={"extra_data": {"database": engine.url.render_as_string(hide_password=True)}})
    return app


__all__ = ["create_app"]
