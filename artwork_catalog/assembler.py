"""
Artwork record assembly.

Builds the ``Artwork`` view of one identifier from three sources, in
increasing precedence:

1. defaults derived from the identifier (title, first image as cover)
2. files and sidecars found in the storage namespace
3. the database overlay row, when an overlay is configured
"""
from __future__ import annotations

from functools import partial
from typing import List, Optional

import structlog

from .db.overlay import DatabaseOverlay
from .errors import CatalogError, NotFound
from .metadata import SIDECAR_MAX_BYTES, ExtractedMetadata, extract_metadata, is_sidecar
from .schemas import DATE_FORMAT, Artwork, ArtworkRow
from .storage import AssetBackend, require_safe_identifier

logger = structlog.get_logger()


def format_title(artwork_id: str) -> str:
    """Humanize an identifier: ``la-casa-azul`` -> ``La Casa Azul``."""
    words = artwork_id.split("-")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def apply_overlay(artwork: Artwork, row: ArtworkRow) -> None:
    """Layer database fields over storage-derived values.

    Text fields win only when non-empty. ``paintedLocation`` and
    ``inProgress`` are taken verbatim whenever a row exists, even when empty.
    """
    if row.title:
        artwork.title = row.title
    artwork.painted_location = row.painted_location
    if row.start_date is not None:
        artwork.start_date = row.start_date.strftime(DATE_FORMAT)
    if row.end_date is not None:
        artwork.end_date = row.end_date.strftime(DATE_FORMAT)
    artwork.in_progress = row.in_progress
    if row.detalle:
        artwork.detalle = row.detalle
    if row.bitacora:
        artwork.bitacora = row.bitacora
    if row.primary_image:
        artwork.primary_image = row.primary_image


def sort_for_admin(artworks: List[Artwork]) -> List[Artwork]:
    """Newest ``startDate`` first, undated last, then title (case-insensitive)."""
    by_title = sorted(artworks, key=lambda a: a.title.lower())
    dated = [a for a in by_title if a.start_date]
    undated = [a for a in by_title if not a.start_date]
    # sorted() is stable, so equal dates keep the title order
    dated = sorted(dated, key=lambda a: a.start_date, reverse=True)
    return dated + undated


class RecordAssembler:
    """Compose Artwork records from an AssetBackend and optional overlay."""

    def __init__(
        self,
        backend: AssetBackend,
        overlay: Optional[DatabaseOverlay] = None,
        sidecar_max_bytes: int = SIDECAR_MAX_BYTES,
    ):
        self.backend = backend
        self.overlay = overlay
        self.sidecar_max_bytes = sidecar_max_bytes

    def _scan(self, artwork_id: str) -> ExtractedMetadata:
        filenames = self.backend.list_files(artwork_id)
        if not filenames and not self.backend.exists(artwork_id):
            raise NotFound("Artwork not found")

        entries = []
        for filename in filenames:
            if is_sidecar(filename):
                loader = partial(
                    self.backend.read_file,
                    artwork_id,
                    filename,
                    max_bytes=self.sidecar_max_bytes,
                )
                entries.append((filename, loader))
            else:
                entries.append((filename, b""))
        return extract_metadata(entries)

    def assemble(self, artwork_id: str) -> Artwork:
        """Build the Artwork for one identifier.

        Raises:
            ValidationError: If the identifier is unsafe
            NotFound: If the backend has no such artwork
            BackendError: If the storage listing fails
        """
        require_safe_identifier(artwork_id)
        scanned = self._scan(artwork_id)

        artwork = Artwork(
            id=artwork_id,
            title=format_title(artwork_id),
            images=scanned.images,
            videos=scanned.videos,
            detalle=scanned.detalle,
            painted_location=scanned.painted_location,
            start_date=scanned.start_date,
            end_date=scanned.end_date,
            in_progress=scanned.in_progress,
            bitacora=scanned.bitacora,
        )

        if self.overlay is not None:
            row = self.overlay.lookup(artwork_id)
            if row is not None:
                apply_overlay(artwork, row)

        if not artwork.primary_image and artwork.images:
            artwork.primary_image = artwork.images[0]

        return artwork

    def list_all(self) -> List[Artwork]:
        """Assemble every artwork that has at least one image or video.

        Artworks that fail to assemble are logged and skipped so one broken
        namespace never hides the rest of the catalog.
        """
        artworks = []
        for artwork_id in self.backend.list_identifiers():
            try:
                artwork = self.assemble(artwork_id)
            except CatalogError as e:
                logger.warning(
                    "Skipping artwork that failed to assemble",
                    artwork_id=artwork_id,
                    error=e.message,
                )
                continue
            if artwork.has_media:
                artworks.append(artwork)
        return artworks

    def list_for_admin(self) -> List[Artwork]:
        return sort_for_admin(self.list_all())
