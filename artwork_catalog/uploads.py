"""
Image upload validation and naming.
"""

import re
import time
from typing import Optional

from .storage.base import IMAGE_EXTENSIONS, split_extension

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

MAX_SANITIZED_LENGTH = 50
DEFAULT_UPLOAD_NAME = "image"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def _media_type(content_type: Optional[str]) -> str:
    # "image/jpeg; charset=..." -> "image/jpeg"
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_valid_image_type(content_type: Optional[str]) -> bool:
    return _media_type(content_type) in ALLOWED_IMAGE_TYPES


def extension_from_mime(content_type: Optional[str]) -> str:
    return ALLOWED_IMAGE_TYPES.get(_media_type(content_type), "")


def sanitize_filename(name: str) -> str:
    """Keep ``[A-Za-z0-9_-]``, cap the length, and never return an empty name."""
    cleaned = _UNSAFE_CHARS.sub("", name)[:MAX_SANITIZED_LENGTH]
    return cleaned or DEFAULT_UPLOAD_NAME


def generate_upload_filename(original: Optional[str], content_type: Optional[str]) -> str:
    """Build the stored name ``<ns-timestamp>_<sanitized-base><ext>``.

    The extension of the uploaded name is kept when it is an image extension,
    otherwise it is derived from the content type.
    """
    # Browsers may send a full client path; keep only the last segment
    name = (original or "").replace("\\", "/").rsplit("/", 1)[-1]
    base, ext = split_extension(name)
    if ext not in IMAGE_EXTENSIONS:
        ext = extension_from_mime(content_type)
    return f"{time.time_ns()}_{sanitize_filename(base)}{ext}"
