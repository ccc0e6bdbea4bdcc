"""
Catalog API routes.

Public endpoints are prefixed with /api/v1; admin endpoints with
/api/v1/admin and require ``Authorization: Bearer <ADMIN_TOKEN>``.
"""

import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Header, Query, UploadFile
from fastapi.responses import FileResponse, RedirectResponse, Response

from .context import CatalogContext, get_context
from .errors import Unauthorized, Unavailable, ValidationError
from .schemas import ArtworkCreate, ArtworkListResponse, ArtworkUpdate
from .storage import require_safe_filename, require_safe_identifier

BEARER_PREFIX = "Bearer "


def require_admin(
    authorization: Optional[str] = Header(None),
    context: CatalogContext = Depends(get_context),
) -> None:
    """Reject requests without the configured admin bearer token."""
    expected = context.settings.admin_token
    if not expected:
        raise Unavailable("ADMIN_TOKEN is not configured")
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("Unauthorized")
    supplied = authorization[len(BEARER_PREFIX):].strip()
    if not secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized("Unauthorized")


public_router = APIRouter(prefix="/api/v1", tags=["artworks"])
admin_router = APIRouter(
    prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


def _serve_file(context: CatalogContext, artwork_id: str, filename: str) -> Response:
    require_safe_identifier(artwork_id)
    require_safe_filename(filename)
    ref = context.backend.resolve_ref(artwork_id, filename)
    if ref.is_redirect:
        return RedirectResponse(ref.url, status_code=307)
    return FileResponse(ref.path, media_type=ref.content_type)


# =============================================================================
# Public Endpoints
# =============================================================================


@public_router.get("/artworks")
def list_artworks(context: CatalogContext = Depends(get_context)) -> Dict[str, Any]:
    """List every artwork that has at least one image or video."""
    artworks = context.assembler.list_all()
    return ArtworkListResponse(artworks=artworks, total=len(artworks)).to_dict()


@public_router.get("/artworks/{artwork_id}")
def get_artwork(
    artwork_id: str, context: CatalogContext = Depends(get_context)
) -> Dict[str, Any]:
    return context.assembler.assemble(artwork_id).to_dict()


@public_router.get("/artworks/{artwork_id}/images/{filename}")
def serve_image(
    artwork_id: str, filename: str, context: CatalogContext = Depends(get_context)
) -> Response:
    """Stream an image, or redirect to the object store."""
    return _serve_file(context, artwork_id, filename)


@public_router.get("/artworks/{artwork_id}/videos/{filename}")
def serve_video(
    artwork_id: str, filename: str, context: CatalogContext = Depends(get_context)
) -> Response:
    """Stream a video, or redirect to the object store."""
    return _serve_file(context, artwork_id, filename)


# =============================================================================
# Admin Endpoints
# =============================================================================


@admin_router.get("/artworks")
def admin_list_artworks(
    context: CatalogContext = Depends(get_context),
) -> Dict[str, Any]:
    """List artworks newest first, undated last."""
    artworks = context.assembler.list_for_admin()
    return ArtworkListResponse(artworks=artworks, total=len(artworks)).to_dict()


@admin_router.post("/artworks", status_code=201)
def admin_create_artwork(
    body: ArtworkCreate, context: CatalogContext = Depends(get_context)
) -> Dict[str, Any]:
    return context.admin.create_artwork(body.title).to_dict()


# Declared before /artworks/{artwork_id} so "check-title" is not taken for an id
@admin_router.get("/artworks/check-title")
def admin_check_title(
    title: str = Query(""),
    exclude_id: str = Query("", alias="excludeId"),
    context: CatalogContext = Depends(get_context),
) -> Dict[str, bool]:
    return {"available": context.admin.check_title(title, exclude_id)}


@admin_router.get("/artworks/{artwork_id}")
def admin_get_artwork(
    artwork_id: str, context: CatalogContext = Depends(get_context)
) -> Dict[str, Any]:
    return context.assembler.assemble(artwork_id).to_dict()


@admin_router.put("/artworks/{artwork_id}")
def admin_upsert_artwork(
    artwork_id: str,
    body: ArtworkUpdate,
    context: CatalogContext = Depends(get_context),
) -> Dict[str, Any]:
    """Replace the editable fields of an artwork."""
    return context.admin.upsert_artwork(artwork_id, body).to_dict()


@admin_router.post("/artworks/{artwork_id}/images")
def admin_upload_image(
    artwork_id: str,
    image: Optional[UploadFile] = File(None),
    context: CatalogContext = Depends(get_context),
) -> Dict[str, Any]:
    """Store one uploaded image (multipart field ``image``)."""
    require_safe_identifier(artwork_id)
    if image is None:
        raise ValidationError("No image file provided")
    # One byte past the limit is enough to tell the upload is too large
    data = image.file.read(context.admin.max_upload_bytes + 1)
    artwork = context.admin.upload_image(
        artwork_id, image.filename, image.content_type, data
    )
    return artwork.to_dict()


@admin_router.delete("/artworks/{artwork_id}/images/{filename}")
def admin_delete_image(
    artwork_id: str,
    filename: str,
    delete_file: str = Query("", alias="deleteFile"),
    context: CatalogContext = Depends(get_context),
) -> Dict[str, Any]:
    """Remove an image; ``deleteFile=true`` also deletes the stored file."""
    artwork = context.admin.delete_image(
        artwork_id, filename, delete_file=delete_file == "true"
    )
    return artwork.to_dict()
