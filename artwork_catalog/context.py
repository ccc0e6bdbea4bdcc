"""
Application wiring.

Everything a request needs is built once from Settings and handed to the
FastAPI app; routes receive it through the ``get_context`` dependency.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from alembic.util import CommandError
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from .assembler import RecordAssembler
from .config import Settings
from .db import DatabaseOverlay, upgrade_database
from .services import AdminService
from .storage import AssetBackend, create_asset_backend

logger = structlog.get_logger()


@dataclass
class CatalogContext:
    settings: Settings
    backend: AssetBackend
    assembler: RecordAssembler
    admin: AdminService
    overlay: Optional[DatabaseOverlay] = None

    def close(self) -> None:
        if self.overlay is not None:
            self.overlay.dispose()


def connect_overlay(settings: Settings) -> Optional[DatabaseOverlay]:
    """Connect to the database and apply pending migrations.

    Returns None when no database is configured or it cannot be reached;
    the catalog then serves storage-derived data only.
    """
    if not settings.database_enabled:
        logger.info("DATABASE_URL not set; running without database overlay")
        return None

    try:
        overlay = DatabaseOverlay.from_settings(settings)
    except SQLAlchemyError as e:
        logger.error("Invalid database configuration", error=str(e))
        return None

    if not overlay.ping():
        logger.error("Database unreachable; running without database overlay")
        overlay.dispose()
        return None

    try:
        upgrade_database(overlay.engine)
    except (SQLAlchemyError, CommandError) as e:
        logger.error("Database migration failed; running without overlay", error=str(e))
        overlay.dispose()
        return None

    logger.info("Database overlay enabled")
    return overlay


def build_context(
    settings: Settings,
    backend: Optional[AssetBackend] = None,
    overlay: Optional[DatabaseOverlay] = None,
) -> CatalogContext:
    """Assemble the collaborators for one application instance.

    ``backend`` and ``overlay`` default to what the settings describe; tests
    pass their own.
    """
    if backend is None:
        backend = create_asset_backend(settings)
        logger.info("Asset backend ready", location=backend.describe())
    assembler = RecordAssembler(backend, overlay)
    admin = AdminService(
        backend, assembler, overlay, max_upload_bytes=settings.max_upload_bytes
    )
    return CatalogContext(
        settings=settings,
        backend=backend,
        assembler=assembler,
        admin=admin,
        overlay=overlay,
    )


def get_context(request: Request) -> CatalogContext:
    """FastAPI dependency returning the app's CatalogContext."""
    return request.app.state.context
