"""
Database overlay package for Artwork Catalog.
"""

from .base import Base, create_overlay_engine, create_session_factory, init_database
from .migrate import upgrade_database
from .models import ArtworkModel
from .overlay import DatabaseOverlay

__all__ = [
    "ArtworkModel",
    "Base",
    "DatabaseOverlay",
    "create_overlay_engine",
    "create_session_factory",
    "init_database",
    "upgrade_database",
]
