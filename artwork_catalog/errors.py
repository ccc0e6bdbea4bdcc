"""
Error types shared by the storage, overlay, and API layers.

Every error carries the HTTP status the API answers with and a message that
is safe to show to clients. Internal details (stack traces, driver errors)
are logged where the error is raised and never placed in ``message``.
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base class for errors raised by the artwork catalog."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {"error": self.message}


class NotFound(CatalogError):
    """Artwork or file is absent."""

    status_code = 404
    code = "NOT_FOUND"


class ValidationError(CatalogError):
    """Bad identifier, filename, title, content type, or request body."""

    status_code = 400
    code = "VALIDATION_ERROR"


class Conflict(CatalogError):
    """Duplicate title."""

    status_code = 409
    code = "CONFLICT"


class Unauthorized(CatalogError):
    """Missing or incorrect bearer token."""

    status_code = 401
    code = "UNAUTHORIZED"


class Unavailable(CatalogError):
    """A required collaborator (database, admin token) is not configured."""

    status_code = 500
    code = "UNAVAILABLE"


class BackendError(CatalogError):
    """I/O failure from the filesystem, the object store, or the database.

    Attributes:
        artwork: Optional re-assembled record describing the state left
            behind by a partially applied write.
    """

    status_code = 500
    code = "BACKEND_ERROR"

    def __init__(self, message: str, artwork: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.artwork = artwork

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.artwork is not None:
            data["artwork"] = self.artwork
        return data
