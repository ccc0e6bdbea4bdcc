"""
S3-compatible object store asset backend.

Artwork namespaces are ``{artwork_id}/`` key prefixes inside one bucket. The
namespace is flat: keys nested deeper than ``{artwork_id}/{filename}`` are
ignored. Media is never streamed through this service; reads resolve to a
public URL or a presigned GET URL and the client is redirected there.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import DEFAULT_PRESIGN_TTL_SECONDS, Settings
from ..errors import BackendError, NotFound
from .base import (
    PLACEHOLDER_NAME,
    AssetBackend,
    AssetRef,
    content_type_for,
    require_safe_identifier,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}


def _is_not_found(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in _NOT_FOUND_CODES


def create_s3_client(settings: Settings) -> Any:
    """Build a boto3 S3 client from settings.

    Path-style addressing is used because most S3-compatible providers
    (MinIO, Railway buckets, R2) expect it. When no static credentials are
    configured, boto3's default credential chain applies.
    """
    kwargs: Dict[str, Any] = {
        "region_name": settings.bucket_region,
        "config": BotoConfig(s3={"addressing_style": "path"}),
    }
    if settings.bucket_endpoint:
        kwargs["endpoint_url"] = settings.bucket_endpoint.rstrip("/")
    if settings.bucket_access_key_id and settings.bucket_secret_access_key:
        kwargs["aws_access_key_id"] = settings.bucket_access_key_id
        kwargs["aws_secret_access_key"] = settings.bucket_secret_access_key
    return boto3.client("s3", **kwargs)


class ObjectStoreBackend(AssetBackend):
    """Artwork namespaces are key prefixes in an S3-compatible bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        public_base_url: Optional[str] = None,
        presign_ttl_seconds: int = DEFAULT_PRESIGN_TTL_SECONDS,
    ):
        """Initialize the backend.

        Args:
            client: boto3 S3 client (safe for concurrent use)
            bucket: Bucket holding one prefix per artwork
            public_base_url: When set, files resolve to plain public URLs
                under this base instead of presigned URLs
            presign_ttl_seconds: Lifetime of presigned URLs
        """
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.presign_ttl_seconds = presign_ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStoreBackend":
        return cls(
            client=create_s3_client(settings),
            bucket=settings.bucket_name,
            public_base_url=settings.public_base_url,
            presign_ttl_seconds=settings.presign_ttl_seconds,
        )

    def _paginate(self, **params: Any) -> Iterator[Dict[str, Any]]:
        """Yield ListObjectsV2 pages until the listing is exhausted.

        Stops as well when the store hands back a continuation token already
        used in this listing, which would otherwise loop forever.
        """
        seen_tokens = set()
        token: Optional[str] = None
        while True:
            request = dict(Bucket=self.bucket, **params)
            if token:
                request["ContinuationToken"] = token
            try:
                page = self.client.list_objects_v2(**request)
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Failed to list objects in {self.bucket}: {e}")
                raise BackendError("Failed to list objects") from e
            yield page

            token = page.get("NextContinuationToken")
            if not page.get("IsTruncated") or not token:
                return
            if token in seen_tokens:
                logger.warning(
                    f"Listing of {self.bucket} returned a repeated continuation token; stopping"
                )
                return
            seen_tokens.add(token)

    def list_identifiers(self) -> List[str]:
        ids = set()
        for page in self._paginate(Delimiter="/"):
            for common in page.get("CommonPrefixes") or []:
                artwork_id = (common.get("Prefix") or "").rstrip("/")
                if artwork_id:
                    ids.add(artwork_id)
        return sorted(ids)

    def list_files(self, artwork_id: str) -> List[str]:
        prefix = f"{require_safe_identifier(artwork_id)}/"
        filenames = []
        for page in self._paginate(Prefix=prefix):
            for obj in page.get("Contents") or []:
                key = obj.get("Key") or ""
                if not key.startswith(prefix):
                    continue
                name = key[len(prefix):]
                if not name or "/" in name:
                    continue
                filenames.append(name)
        return sorted(filenames)

    def read_file(
        self, artwork_id: str, filename: str, max_bytes: Optional[int] = None
    ) -> bytes:
        key = self.key_for(artwork_id, filename)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise NotFound("File not found") from e
            logger.error(f"Failed to get {key}: {e}")
            raise BackendError("Failed to read file") from e
        except BotoCoreError as e:
            logger.error(f"Failed to get {key}: {e}")
            raise BackendError("Failed to read file") from e

        body = response["Body"]
        try:
            return body.read() if max_bytes is None else body.read(max_bytes)
        except (BotoCoreError, OSError) as e:
            logger.error(f"Failed to read body of {key}: {e}")
            raise BackendError("Failed to read file") from e
        finally:
            body.close()

    def write_file(
        self, artwork_id: str, filename: str, data: bytes, content_type: str
    ) -> None:
        key = self.key_for(artwork_id, filename)
        try:
            self.client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to put {key}: {e}")
            raise BackendError(f"Failed to write {filename}") from e

    def delete_file(self, artwork_id: str, filename: str) -> None:
        key = self.key_for(artwork_id, filename)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete {key}: {e}")
            raise BackendError(f"Failed to delete {filename}") from e

    def has_file(self, artwork_id: str, filename: str) -> bool:
        key = self.key_for(artwork_id, filename)
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            logger.error(f"Failed to head {key}: {e}")
            raise BackendError("Failed to check file") from e
        except BotoCoreError as e:
            logger.error(f"Failed to head {key}: {e}")
            raise BackendError("Failed to check file") from e
        return True

    def exists(self, artwork_id: str) -> bool:
        # Buckets have no folders: an artwork exists while any object lives
        # under its prefix. create_namespace() leaves a placeholder for that.
        prefix = f"{require_safe_identifier(artwork_id)}/"
        try:
            response = self.client.list_objects_v2(
                Bucket=self.bucket, Prefix=prefix, MaxKeys=1
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to probe prefix {prefix}: {e}")
            raise BackendError("Failed to check artwork") from e
        return bool(response.get("Contents"))

    def create_namespace(self, artwork_id: str) -> None:
        try:
            self.write_file(artwork_id, PLACEHOLDER_NAME, b"", "text/plain")
        except BackendError as e:
            raise BackendError("Failed to create artwork folder") from e

    def public_url_for(self, key: str) -> Optional[str]:
        if not self.public_base_url:
            return None
        escaped = "/".join(quote(segment, safe="") for segment in key.split("/"))
        return f"{self.public_base_url}/{escaped}"

    def presigned_url_for(self, key: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.presign_ttl_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to presign {key}: {e}")
            raise BackendError("Failed to resolve file URL") from e

    def resolve_ref(self, artwork_id: str, filename: str) -> AssetRef:
        key = self.key_for(artwork_id, filename)
        url = self.public_url_for(key) or self.presigned_url_for(key)
        return AssetRef(content_type=content_type_for(filename), url=url)

    def describe(self) -> str:
        return f"s3://{self.bucket}"
