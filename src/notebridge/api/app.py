"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    One factory builds every app instance. Tests and the CLI pass their
    own settings; nothing reads the environment behind their back.

Tags:
    notebridge, api, fastapi, app-factory, lifespan

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from notebridge.ai.watsonx import WatsonxClient
from notebridge.api.middleware.errors import (
    http_exception_handler,
    notebridge_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from notebridge.api.middleware.rate_limit import RateLimitMiddleware
from notebridge.api.middleware.request_context import RequestContextMiddleware
from notebridge.core.database import close_engine, create_schema, init_engine
from notebridge.core.errors import NotebridgeError
from notebridge.core.logging import configure_logging, get_logger
from notebridge.core.settings import NotebridgeSettings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: engine and schema on startup, cleanup on shutdown."""
    settings: NotebridgeSettings = app.state.settings
    log = get_logger("notebridge.api")
    log.info("api_starting", version=app.version)

    engine = init_engine(settings)
    create_schema(engine)
    log.info("database_ready", dialect=engine.dialect.name)

    yield

    app.state.watsonx.close()
    close_engine()
    log.info("api_stopped")


def create_app(settings: NotebridgeSettings | None = None) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : NotebridgeSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
    )

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    # Stash settings and the shared WatsonX client (it owns the IAM token cache)
    app.state.settings = settings
    app.state.watsonx = WatsonxClient.from_settings(settings)

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (last added is outermost) ─────────────────────────
    app.add_middleware(
        RateLimitMiddleware,
        enabled=settings.rate_limit_enabled,
        rpm=settings.rate_limit_rpm,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not settings.allow_any_origin,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(NotebridgeError, notebridge_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from notebridge.api.routers import account, ai, auth, cases, documents, health, public

    # Health endpoints at root level for container healthchecks
    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, tags=["auth"])
    app.include_router(account.router, tags=["account"])
    app.include_router(cases.router, tags=["cases"])
    app.include_router(documents.router, tags=["documents"])
    app.include_router(ai.router, tags=["ai"])
    app.include_router(public.router, tags=["public"])

    return app
