"""
FastAPI application for the artwork catalog.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .context import CatalogContext, build_context, connect_overlay, get_context
from .errors import CatalogError
from .routes import admin_router, public_router

# Initialize structured logging
logger = structlog.get_logger()

PACKAGE_NAME = "artwork-catalog"


def _version() -> str:
    try:
        return importlib.metadata.version(PACKAGE_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON"
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid request"))
    # pydantic prefixes messages from custom validators with "Value error, "
    message = message.removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def create_app(context: Optional[CatalogContext] = None) -> FastAPI:
    """Create the catalog app.

    Args:
        context: Pre-built collaborators. When omitted they are built from
            the environment at startup and released at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        owned = app.state.context is None
        if owned:
            settings = get_settings()
            logger.info("Starting Artwork Catalog", environment=settings.environment)
            app.state.context = build_context(settings, overlay=connect_overlay(settings))

        yield

        if owned:
            logger.info("Shutting down Artwork Catalog")
            app.state.context.close()
            app.state.context = None

    settings = context.settings if context is not None else get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Artwork portfolio catalog backed by a filesystem or object store",
        version=_version(),
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                path=request.url.path,
                error=exc.message,
                code=exc.code,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    # Health and Info Endpoints
    @app.get("/health", tags=["system"])
    def health() -> Dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/healthz", tags=["system"])
    def healthz(context: CatalogContext = Depends(get_context)) -> Dict[str, Any]:
        """Health check including storage location and database reachability."""
        if context.overlay is None:
            database = "disabled"
        else:
            database = "ok" if context.overlay.ping() else "unreachable"
        return {
            "status": "ok",
            "storage": context.backend.describe(),
            "database": database,
        }

    @app.get("/version", tags=["system"])
    def version() -> Dict[str, str]:
        """Return the version of the application."""
        return {"version": _version()}

    app.include_router(public_router)
    app.include_router(admin_router)

    return app
