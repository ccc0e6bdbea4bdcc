"""
Asset storage abstraction.

An artwork's files live in a flat namespace named after its identifier: a
directory on the local filesystem, or a ``{id}/`` key prefix in an
S3-compatible bucket. Business logic depends only on :class:`AssetBackend`;
the concrete backend is chosen once at startup.
"""
from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..errors import ValidationError

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".webm", ".mov"})

PLACEHOLDER_NAME = ".placeholder"

_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".json": "application/json",
    ".txt": "text/plain; charset=utf-8",
    ".md": "text/markdown; charset=utf-8",
}


def split_extension(filename: str) -> tuple[str, str]:
    """Split ``filename`` into (base, lowercased extension)."""
    base, ext = posixpath.splitext(filename)
    return base, ext.lower()


def content_type_for(filename: str) -> str:
    """Content type derived from the file extension."""
    return _CONTENT_TYPES.get(split_extension(filename)[1], "application/octet-stream")


def is_safe_segment(value: Optional[str]) -> bool:
    """Whether ``value`` can be used as one path segment of a storage key.

    Non-empty, with no ``/``, ``\\`` or ``..``.
    """
    if not value:
        return False
    return "/" not in value and "\\" not in value and ".." not in value


def is_safe_identifier(artwork_id: Optional[str]) -> bool:
    return is_safe_segment(artwork_id)


def is_safe_filename(filename: Optional[str]) -> bool:
    return is_safe_segment(filename)


def require_safe_identifier(artwork_id: Optional[str]) -> str:
    if not is_safe_identifier(artwork_id):
        raise ValidationError("Invalid artwork id")
    return artwork_id


def require_safe_filename(filename: Optional[str]) -> str:
    if not is_safe_filename(filename):
        raise ValidationError("Invalid filename")
    return filename


@dataclass(frozen=True)
class AssetRef:
    """Where a client can read a stored file from.

    Exactly one of ``path`` (served by this process) or ``url`` (client is
    redirected) is set.
    """

    content_type: str
    path: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.url is not None


class AssetBackend(ABC):
    """Abstract base class for artwork asset storage."""

    @abstractmethod
    def list_identifiers(self) -> List[str]:
        """Return the sorted identifiers of every artwork namespace."""
        pass

    @abstractmethod
    def list_files(self, artwork_id: str) -> List[str]:
        """Return the sorted filenames directly under an artwork namespace."""
        pass

    @abstractmethod
    def read_file(
        self, artwork_id: str, filename: str, max_bytes: Optional[int] = None
    ) -> bytes:
        """Read a file, at most ``max_bytes`` when given. Raises NotFound."""
        pass

    @abstractmethod
    def write_file(
        self, artwork_id: str, filename: str, data: bytes, content_type: str
    ) -> None:
        """Create or overwrite a file."""
        pass

    @abstractmethod
    def delete_file(self, artwork_id: str, filename: str) -> None:
        """Remove a file."""
        pass

    @abstractmethod
    def has_file(self, artwork_id: str, filename: str) -> bool:
        """Metadata-only existence probe for one file."""
        pass

    @abstractmethod
    def exists(self, artwork_id: str) -> bool:
        """Whether the artwork namespace exists."""
        pass

    @abstractmethod
    def create_namespace(self, artwork_id: str) -> None:
        """Establish an empty namespace for a new artwork."""
        pass

    @abstractmethod
    def resolve_ref(self, artwork_id: str, filename: str) -> AssetRef:
        """Resolve a servable reference to a stored file."""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location of this backend, for logs."""
        pass

    def key_for(self, artwork_id: str, filename: str) -> str:
        """Storage key of a file: ``{id}/{filename}``."""
        require_safe_identifier(artwork_id)
        require_safe_filename(filename)
        return f"{artwork_id}/{filename}"
