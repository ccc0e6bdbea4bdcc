"""
Database overlay for user-edited artwork fields.

The overlay is authoritative for the fields an admin edits (title, dates,
notes, chosen primary image) and is layered over what the storage backend
derives. It is optional: without ``DATABASE_URL`` the catalog runs from
storage alone.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import Engine, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings
from ..errors import BackendError, Conflict, ValidationError
from ..schemas import ArtworkRow
from .base import create_overlay_engine, create_session_factory
from .models import ArtworkModel

logger = logging.getLogger(__name__)


class DatabaseOverlay:
    """Read-through, write-through store for editable artwork fields."""

    def __init__(
        self,
        engine: Engine,
        session_factory: Optional[sessionmaker] = None,
        write_timeout_seconds: float = 3.0,
    ):
        self.engine = engine
        self.session_factory = session_factory or create_session_factory(engine)
        self.write_timeout_seconds = write_timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseOverlay":
        engine = create_overlay_engine(
            settings.database_url,
            timeout_seconds=settings.db_timeout_seconds,
            max_connections=settings.db_pool_max_connections,
            min_connections=settings.db_pool_min_connections,
            max_lifetime_seconds=settings.db_pool_max_lifetime_seconds,
        )
        return cls(engine, write_timeout_seconds=settings.db_write_timeout_seconds)

    @contextmanager
    def _write_session(self) -> Iterator[Session]:
        with self.session_factory() as session:
            if self.engine.dialect.name == "postgresql":
                # Writes get a slightly longer budget than the engine-wide read timeout
                timeout_ms = max(1, int(self.write_timeout_seconds * 1000))
                session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
            yield session

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def get(self, artwork_id: str) -> Optional[ArtworkRow]:
        """Fetch the overlay row for an artwork.

        Returns:
            The row, or None when the artwork has no row

        Raises:
            BackendError: If the database cannot be queried
        """
        try:
            with self.session_factory() as session:
                model = session.get(ArtworkModel, artwork_id)
                return model.to_row() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read artwork {artwork_id} from database: {e}")
            raise BackendError("Failed to read artwork from database") from e

    def lookup(self, artwork_id: str) -> Optional[ArtworkRow]:
        """Fetch the overlay row, treating any database failure as absent.

        This is the read path used while assembling artworks: a slow or
        unreachable database degrades the response to storage-derived values
        instead of failing it. Failures are logged, never raised.
        """
        try:
            return self.get(artwork_id)
        except BackendError:
            logger.warning(f"Overlay unavailable for {artwork_id}; using storage values")
            return None

    def upsert(self, row: ArtworkRow) -> None:
        """Replace the whole row for ``row.id``, inserting it if missing.

        There is no partial-field patch: callers merge before calling.

        Raises:
            Conflict: If another artwork already uses ``row.title``
            BackendError: If the write fails
        """
        try:
            with self._write_session() as session:
                session.merge(
                    ArtworkModel(
                        id=row.id,
                        title=row.title,
                        painted_location=row.painted_location,
                        start_date=row.start_date,
                        end_date=row.end_date,
                        in_progress=row.in_progress,
                        detalle=row.detalle,
                        bitacora=row.bitacora,
                        primary_image=row.primary_image,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                session.commit()
        except IntegrityError as e:
            logger.info(f"Title conflict while saving artwork {row.id}: {e}")
            raise Conflict("Title already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to save artwork {row.id}: {e}")
            raise BackendError("Failed to save artwork") from e

    def title_is_unique(self, title: str, exclude_id: str = "") -> bool:
        """Check that no other artwork uses ``title``.

        The comparison is exact: titles differing only in case are distinct.

        Raises:
            ValidationError: If the title is blank
            BackendError: If the database cannot be queried
        """
        if not title or not title.strip():
            raise ValidationError("Title cannot be empty")
        try:
            with self.session_factory() as session:
                count = session.scalar(
                    select(func.count())
                    .select_from(ArtworkModel)
                    .where(ArtworkModel.title == title, ArtworkModel.id != exclude_id)
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to check title uniqueness: {e}")
            raise BackendError("Failed to check title uniqueness") from e
        return not count

    def dispose(self) -> None:
        self.engine.dispose()
