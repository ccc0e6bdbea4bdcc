"""
Local filesystem asset backend.

Structure:
    {root}/
    ├── {artwork_id}/
    │   ├── 01.jpg
    │   ├── meta.json
    │   ├── detalle.txt
    │   └── bitacora.txt
    └── ...
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..errors import BackendError, NotFound, ValidationError
from .base import (
    AssetBackend,
    AssetRef,
    content_type_for,
    require_safe_filename,
    require_safe_identifier,
)

logger = logging.getLogger(__name__)


class FilesystemBackend(AssetBackend):
    """Artwork namespaces are directories under ``root``."""

    def __init__(self, root: Path | str):
        """Initialize with the directory holding one subdirectory per artwork.

        Args:
            root: Artworks directory. It does not have to exist yet; listing
                a missing root raises BackendError.
        """
        self.root = Path(root)

    def _artwork_dir(self, artwork_id: str) -> Path:
        return self.root / require_safe_identifier(artwork_id)

    def _file_path(self, artwork_id: str, filename: str) -> Path:
        return self._artwork_dir(artwork_id) / require_safe_filename(filename)

    def list_identifiers(self) -> List[str]:
        try:
            return sorted(entry.name for entry in self.root.iterdir() if entry.is_dir())
        except OSError as e:
            logger.error(f"Failed to read artworks directory {self.root}: {e}")
            raise BackendError("Failed to read artworks directory") from e

    def list_files(self, artwork_id: str) -> List[str]:
        artwork_dir = self._artwork_dir(artwork_id)
        if not artwork_dir.is_dir():
            raise NotFound("Artwork not found")
        try:
            return sorted(entry.name for entry in artwork_dir.iterdir() if entry.is_file())
        except OSError as e:
            logger.error(f"Failed to list {artwork_dir}: {e}")
            raise BackendError("Failed to read artwork directory") from e

    def read_file(
        self, artwork_id: str, filename: str, max_bytes: Optional[int] = None
    ) -> bytes:
        path = self._file_path(artwork_id, filename)
        try:
            with open(path, "rb") as f:
                return f.read() if max_bytes is None else f.read(max_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFound("File not found") from e
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise BackendError("Failed to read file") from e

    def write_file(
        self, artwork_id: str, filename: str, data: bytes, content_type: str
    ) -> None:
        path = self._file_path(artwork_id, filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise BackendError(f"Failed to write {filename}") from e

    def delete_file(self, artwork_id: str, filename: str) -> None:
        path = self._file_path(artwork_id, filename)
        if not path.is_file():
            raise NotFound("File not found")
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFound("File not found") from e
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise BackendError(f"Failed to delete {filename}") from e

    def has_file(self, artwork_id: str, filename: str) -> bool:
        return self._file_path(artwork_id, filename).is_file()

    def exists(self, artwork_id: str) -> bool:
        return self._artwork_dir(artwork_id).is_dir()

    def create_namespace(self, artwork_id: str) -> None:
        artwork_dir = self._artwork_dir(artwork_id)
        try:
            artwork_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create {artwork_dir}: {e}")
            raise BackendError("Failed to create artwork folder") from e

    def resolve_ref(self, artwork_id: str, filename: str) -> AssetRef:
        path = self._file_path(artwork_id, filename)
        root = self.root.resolve()
        resolved = path.resolve()
        # Symlinks may still point outside the root after the segment checks.
        if root not in resolved.parents:
            raise ValidationError("Invalid path")
        if not resolved.is_file():
            raise NotFound("File not found")
        return AssetRef(content_type=content_type_for(filename), path=str(resolved))

    def describe(self) -> str:
        return f"file://{self.root.resolve()}"
