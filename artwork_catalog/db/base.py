"""Database configuration and engine setup for the artwork overlay."""

from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _ensure_sync_driver(url: URL) -> URL:
    """Force a synchronous driver for Alembic and the ORM engine."""

    if url.drivername in ("postgres", "postgresql"):
        # Hosted Postgres URLs (postgres://...) carry no driver; use psycopg 3
        url = url.set(drivername="postgresql+psycopg")
    elif url.drivername.startswith("postgresql+"):
        # Normalize any async driver variants to psycopg (sync)
        if any(token in url.drivername for token in ("async", "aiopg")):
            url = url.set(drivername="postgresql+psycopg")
    elif url.drivername.startswith("sqlite+"):
        # Align async SQLite drivers to the synchronous default
        if "aiosqlite" in url.drivername:
            url = url.set(drivername="sqlite")

    return url


def get_database_url(raw_url: str) -> str:
    """Return a database URL with a guaranteed synchronous driver."""

    url = make_url(raw_url)
    # Use render_as_string with hide_password=False to preserve the actual password
    # str(url) would mask the password with *** which breaks authentication
    return _ensure_sync_driver(url).render_as_string(hide_password=False)


def create_overlay_engine(
    raw_url: str,
    timeout_seconds: float = 2.0,
    max_connections: int = 10,
    min_connections: int = 1,
    max_lifetime_seconds: int = 1800,
) -> Engine:
    """Create the engine backing the database overlay.

    Every overlay call must stay short so a slow database never stalls asset
    serving: connection checkout, connecting, and (on PostgreSQL) each
    statement are bounded by ``timeout_seconds``.
    """
    database_url = get_database_url(raw_url)

    if database_url.startswith("sqlite"):
        # SQLite configuration for development/testing
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    timeout_ms = max(1, int(timeout_seconds * 1000))
    # PostgreSQL configuration for production
    return create_engine(
        database_url,
        pool_size=min_connections,
        max_overflow=max(0, max_connections - min_connections),
        pool_recycle=max_lifetime_seconds,
        pool_pre_ping=True,
        pool_timeout=timeout_seconds,
        connect_args={
            "connect_timeout": max(1, int(round(timeout_seconds))),
            "options": f"-c statement_timeout={timeout_ms}",
        },
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Get a sessionmaker bound to ``engine``."""
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


def init_database(engine: Engine) -> None:
    """Create all tables directly from the models (tests and local SQLite)."""
    # Import all models to ensure they're registered with Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def dispose_engine(engine: Optional[Engine]) -> None:
    if engine is not None:
        engine.dispose()
