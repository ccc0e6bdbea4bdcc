"""
Admin workflows for the artwork catalog.

Each operation validates the identifier before touching storage, applies its
writes to the AssetBackend and the DatabaseOverlay, and answers with the
freshly re-assembled record so callers always see the resulting state.
"""
from __future__ import annotations

import json
import secrets
from typing import List, Optional

import structlog

from .assembler import RecordAssembler
from .db.overlay import DatabaseOverlay
from .errors import BackendError, CatalogError, Conflict, NotFound, Unavailable, ValidationError
from .metadata import BITACORA, DETALLE, META_FILENAME, text_sidecar_role
from .schemas import Artwork, ArtworkRow, ArtworkUpdate
from .storage import AssetBackend, require_safe_filename, require_safe_identifier
from .uploads import generate_upload_filename, is_valid_image_type

logger = structlog.get_logger()

DETALLE_FILENAME = "detalle.txt"
BITACORA_FILENAME = "bitacora.txt"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"


def generate_artwork_id() -> str:
    """Random 8-byte identifier rendered as 16 hex characters."""
    return secrets.token_hex(8)


class AdminService:
    """Write-side operations behind the admin routes."""

    def __init__(
        self,
        backend: AssetBackend,
        assembler: RecordAssembler,
        overlay: Optional[DatabaseOverlay] = None,
        max_upload_bytes: int = 10 * 1024 * 1024,
    ):
        self.backend = backend
        self.assembler = assembler
        self.overlay = overlay
        self.max_upload_bytes = max_upload_bytes

    def _require_overlay(self) -> DatabaseOverlay:
        if self.overlay is None:
            raise Unavailable("Database not configured")
        return self.overlay

    def _require_existing(self, artwork_id: str) -> None:
        require_safe_identifier(artwork_id)
        if not self.backend.exists(artwork_id):
            raise NotFound("Artwork not found")

    def check_title(self, title: str, exclude_id: str = "") -> bool:
        """Whether ``title`` is free for use, ignoring ``exclude_id``'s own row."""
        overlay = self._require_overlay()
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title parameter is required")
        return overlay.title_is_unique(title, (exclude_id or "").strip())

    def create_artwork(self, title: str) -> Artwork:
        """Create an empty artwork namespace plus its overlay row.

        Raises:
            Unavailable: If no database is configured
            ValidationError: If the title is blank
            Conflict: If the title is already used
        """
        overlay = self._require_overlay()
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not overlay.title_is_unique(title):
            raise Conflict("Title already exists")

        artwork_id = generate_artwork_id()
        self.backend.create_namespace(artwork_id)
        overlay.upsert(ArtworkRow(id=artwork_id, title=title))
        logger.info("Artwork created", artwork_id=artwork_id, title=title)
        return self.assembler.assemble(artwork_id)

    def _write_text_sidecar(
        self, artwork_id: str, existing: List[str], role: str, filename: str, text: str
    ) -> None:
        # Any other file read for this role would shadow the canonical one
        for name in existing:
            if name != filename and text_sidecar_role(name) == role:
                self.backend.delete_file(artwork_id, name)
        if text.strip():
            self.backend.write_file(
                artwork_id, filename, text.encode("utf-8"), TEXT_CONTENT_TYPE
            )
            return
        try:
            self.backend.delete_file(artwork_id, filename)
        except NotFound:
            pass

    def upsert_artwork(self, artwork_id: str, update: ArtworkUpdate) -> Artwork:
        """Replace the editable fields of an artwork.

        Sidecar files are written first and are not rolled back: when the
        database write then fails, the raised BackendError carries the
        re-assembled record describing what was actually stored.

        Raises:
            ValidationError: If the identifier is unsafe
            NotFound: If the artwork does not exist
            Conflict: If another artwork already uses the title
            BackendError: If a storage or database write fails
        """
        self._require_existing(artwork_id)
        title = update.title.strip()
        if title and self.overlay is not None:
            if not self.overlay.title_is_unique(title, artwork_id):
                raise Conflict("Title already exists")

        meta = json.dumps(update.to_meta().to_json_dict(), indent=2) + "\n"
        self.backend.write_file(
            artwork_id, META_FILENAME, meta.encode("utf-8"), JSON_CONTENT_TYPE
        )
        existing = self.backend.list_files(artwork_id)
        self._write_text_sidecar(
            artwork_id, existing, DETALLE, DETALLE_FILENAME, update.detalle
        )
        self._write_text_sidecar(
            artwork_id, existing, BITACORA, BITACORA_FILENAME, update.bitacora
        )

        if self.overlay is not None:
            row = ArtworkRow(
                id=artwork_id,
                title=title,
                painted_location=update.painted_location,
                start_date=update.parsed_start_date(),
                end_date=update.parsed_end_date(),
                in_progress=update.in_progress,
                detalle=update.detalle,
                bitacora=update.bitacora,
                primary_image=update.primary_image,
            )
            try:
                self.overlay.upsert(row)
            except Conflict:
                raise
            except CatalogError as e:
                logger.error(
                    "Sidecars saved but database update failed",
                    artwork_id=artwork_id,
                    error=e.message,
                )
                artwork = self.assembler.assemble(artwork_id)
                raise BackendError(
                    "Files saved but database update failed", artwork=artwork.to_dict()
                ) from e

        logger.info("Artwork updated", artwork_id=artwork_id)
        return self.assembler.assemble(artwork_id)

    def upload_image(
        self,
        artwork_id: str,
        original_filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> Artwork:
        """Store an uploaded image under a generated, collision-free name.

        Raises:
            ValidationError: If the payload is too large or not an image
            NotFound: If the artwork does not exist
        """
        self._require_existing(artwork_id)
        if len(data) > self.max_upload_bytes:
            raise ValidationError(
                f"File too large (max {self.max_upload_bytes // (1024 * 1024)}MB)"
            )
        if not is_valid_image_type(content_type):
            raise ValidationError("Invalid file type. Allowed: JPEG, PNG, GIF")

        filename = generate_upload_filename(original_filename, content_type)
        self.backend.write_file(artwork_id, filename, data, content_type)
        logger.info("Image uploaded", artwork_id=artwork_id, filename=filename, size=len(data))
        return self.assembler.assemble(artwork_id)

    def _clear_primary_image(
        self, overlay: DatabaseOverlay, artwork_id: str, filename: str
    ) -> None:
        row = overlay.get(artwork_id)
        if row is not None and row.primary_image == filename:
            overlay.upsert(row.model_copy(update={"primary_image": ""}))
            logger.info("Primary image cleared", artwork_id=artwork_id, filename=filename)

    def delete_image(self, artwork_id: str, filename: str, delete_file: bool = False) -> Artwork:
        """Remove an image from an artwork.

        With ``delete_file`` the stored object is removed; without it the
        deletion is metadata-only. Either way a primary image pointing at
        ``filename`` is cleared from the overlay row.

        Raises:
            ValidationError: If the identifier or filename is unsafe
            NotFound: If the file does not exist
            BackendError: If the database update fails; carries the
                re-assembled record
        """
        require_safe_identifier(artwork_id)
        require_safe_filename(filename)
        if not self.backend.has_file(artwork_id, filename):
            raise NotFound("Image not found")

        if delete_file:
            self.backend.delete_file(artwork_id, filename)
            logger.info("Image deleted", artwork_id=artwork_id, filename=filename)
        if self.overlay is not None:
            try:
                self._clear_primary_image(self.overlay, artwork_id, filename)
            except CatalogError as e:
                logger.error(
                    "Image removed but database update failed",
                    artwork_id=artwork_id,
                    error=e.message,
                )
                artwork = self.assembler.assemble(artwork_id)
                raise BackendError(
                    "Image removed but database update failed", artwork=artwork.to_dict()
                ) from e

        return self.assembler.assemble(artwork_id)
