"""
Asset storage backends for Artwork Catalog.

Design principle: choose the backend once from configuration, then treat it
as an opaque capability. Nothing outside this package branches on which
backend is active.
"""

from ..config import Settings
from .base import (
    IMAGE_EXTENSIONS,
    PLACEHOLDER_NAME,
    VIDEO_EXTENSIONS,
    AssetBackend,
    AssetRef,
    content_type_for,
    is_safe_filename,
    is_safe_identifier,
    require_safe_filename,
    require_safe_identifier,
    split_extension,
)
from .filesystem import FilesystemBackend
from .object_store import ObjectStoreBackend, create_s3_client


def create_asset_backend(settings: Settings) -> AssetBackend:
    """Factory function to create the configured AssetBackend.

    Args:
        settings: Application settings

    Returns:
        ObjectStoreBackend when a bucket is configured, otherwise a
        FilesystemBackend rooted at ``settings.artworks_dir``
    """
    if settings.object_store_enabled:
        return ObjectStoreBackend.from_settings(settings)
    return FilesystemBackend(settings.artworks_dir)


__all__ = [
    "AssetBackend",
    "AssetRef",
    "FilesystemBackend",
    "IMAGE_EXTENSIONS",
    "ObjectStoreBackend",
    "PLACEHOLDER_NAME",
    "VIDEO_EXTENSIONS",
    "content_type_for",
    "create_asset_backend",
    "create_s3_client",
    "is_safe_filename",
    "is_safe_identifier",
    "require_safe_filename",
    "require_safe_identifier",
    "split_extension",
]
