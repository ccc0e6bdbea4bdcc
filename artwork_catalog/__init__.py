"""
Artwork Catalog

Portfolio catalog that assembles artwork records from a local folder tree or
an S3-compatible bucket, with an optional database overlay for edited fields.
"""

import importlib.metadata

__version__ = importlib.metadata.version("artwork-catalog")

from .assembler import RecordAssembler
from .db.overlay import DatabaseOverlay
from .errors import (
    BackendError,
    CatalogError,
    Conflict,
    NotFound,
    Unauthorized,
    Unavailable,
    ValidationError,
)
from .schemas import Artwork, ArtworkRow
from .services import AdminService
from .storage import AssetBackend, FilesystemBackend, ObjectStoreBackend

__all__ = [
    "AdminService",
    "Artwork",
    "ArtworkRow",
    "AssetBackend",
    "BackendError",
    "CatalogError",
    "Conflict",
    "DatabaseOverlay",
    "FilesystemBackend",
    "NotFound",
    "ObjectStoreBackend",
    "RecordAssembler",
    "Unauthorized",
    "Unavailable",
    "ValidationError",
]
