"""
Sidecar metadata extraction.

Classifies the files of one artwork namespace and parses the sidecar files
that travel next to the media:

- ``meta.json``: ``{paintedLocation, startDate, endDate, inProgress}``
- ``bitacora.*`` (``.txt`` / ``.md``): the working log
- ``detalle.*`` / ``detail.*``: the description

A single unnamed ``.txt`` / ``.md`` file is read as the bitácora when no
explicitly named text file has been seen, for folders written before the
named sidecars existed.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import CatalogError
from .schemas import ArtworkMeta
from .storage.base import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, split_extension

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md"})
META_FILENAME = "meta.json"
BITACORA = "bitacora"
DETALLE = "detalle"

# Upper bound for sidecar reads; notes and meta.json are small.
SIDECAR_MAX_BYTES = 1 << 20

Loader = Callable[[], bytes]
Entry = Tuple[str, Union[bytes, Loader]]


@dataclass
class ExtractedMetadata:
    """Storage-derived fields of one artwork."""

    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    painted_location: str = ""
    start_date: str = ""
    end_date: str = ""
    in_progress: bool = False
    detalle: str = ""
    bitacora: str = ""


def is_sidecar(filename: str) -> bool:
    """Whether ``filename`` is read for metadata (as opposed to media)."""
    base, ext = split_extension(filename)
    return ext in TEXT_EXTENSIONS or (ext == ".json" and base.lower() == "meta")


def _load(filename: str, content: Union[bytes, Loader]) -> Union[bytes, None]:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    try:
        return content()
    except CatalogError as e:
        logger.warning(f"Skipping unreadable sidecar {filename}: {e.message}")
        return None


def _apply_meta(result: ExtractedMetadata, filename: str, raw: bytes) -> None:
    try:
        meta = ArtworkMeta.model_validate(json.loads(raw))
    except (ValueError, PydanticValidationError) as e:
        logger.warning(f"Skipping malformed {filename}: {e}")
        return

    if not result.painted_location:
        result.painted_location = meta.painted_location
    if not result.start_date:
        result.start_date = meta.start_date
    if not result.end_date:
        result.end_date = meta.end_date
    result.in_progress = meta.in_progress


def _named_text_role(base: str) -> Optional[str]:
    base = base.lower()
    if base.startswith("bitacora"):
        return BITACORA
    if base.startswith(("detalle", "detail")):
        return DETALLE
    return None


def text_sidecar_role(filename: str) -> Optional[str]:
    """Which text field ``filename`` can feed, or None for non-text files.

    Unnamed notes count towards the bitácora.
    """
    base, ext = split_extension(filename)
    if ext not in TEXT_EXTENSIONS:
        return None
    return _named_text_role(base) or BITACORA


def _apply_text(result: ExtractedMetadata, base: str, text: str) -> None:
    role = _named_text_role(base)
    if not result.bitacora and role == BITACORA:
        result.bitacora = text
        return
    if not result.detalle and role == DETALLE:
        result.detalle = text
        return
    if not result.bitacora and not result.detalle:
        result.bitacora = text


def extract_metadata(entries: Iterable[Entry]) -> ExtractedMetadata:
    """Partition one namespace's files into media lists and sidecar fields.

    Args:
        entries: ``(filename, content)`` pairs where content is either the
            file's bytes or a zero-argument loader returning them. Loaders
            are only called for sidecar files.

    Returns:
        ExtractedMetadata with images and videos sorted by filename
    """
    result = ExtractedMetadata()

    for filename, content in sorted(entries, key=lambda entry: entry[0]):
        base, ext = split_extension(filename)

        if ext in IMAGE_EXTENSIONS:
            result.images.append(filename)
        elif ext in VIDEO_EXTENSIONS:
            result.videos.append(filename)
        elif ext == ".json" and base.lower() == "meta":
            raw = _load(filename, content)
            if raw is not None:
                _apply_meta(result, filename, raw)
        elif ext in TEXT_EXTENSIONS:
            raw = _load(filename, content)
            if raw is not None:
                _apply_text(result, base, raw.decode("utf-8", errors="replace"))

    result.images.sort()
    result.videos.sort()
    return result
