# =============================================================================
# core/services/object_storage_service.py - Image Object Storage
# =============================================================================
# Maps the client-facing "/objects/{id}" path space onto (bucket, key)
# addresses in an S3-compatible store:
#
#   PRIVATE_OBJECT_DIR = /guitar-media/.private
#   /objects/uploads/abc  <->  bucket "guitar-media", key ".private/uploads/abc"
#
# Also issues short-lived signed upload URLs, reads/writes the access
# policy stored in object metadata, and prepares gated downloads.
# =============================================================================

import logging
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote, urlsplit

from botocore.exceptions import BotoCoreError, ClientError

from app.exceptions import (
    ObjectNotFoundError,
    ObjectStorageConfigError,
    StorageDownloadError,
    StorageUploadError,
)
from core.models.object_acl import ObjectAclPolicy, ObjectPermission, ObjectVisibility
from core.services.object_acl import AccessGroupRegistry, can_access_object
from lib.object_storage_client import is_missing_object_error
from lib.utils import parse_object_path, with_trailing_slash

logger = logging.getLogger(__name__)

# S3 user metadata key holding the JSON policy (S3 lowercases keys)
ACL_POLICY_METADATA_KEY = "aclpolicy"

OBJECTS_PREFIX = "/objects/"
UPLOADS_DIR = "uploads"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
STREAM_CHUNK_SIZE = 64 * 1024

# HTTP verb -> boto3 client method for presigned URLs
SIGNED_URL_METHODS = {
    "GET": "get_object",
    "HEAD": "head_object",
    "PUT": "put_object",
    "DELETE": "delete_object",
}


@dataclass
class ObjectHandle:
    """A stored object that is known to exist."""
    bucket: str
    key: str
    content_type: str = DEFAULT_CONTENT_TYPE
    size: int = 0
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class ObjectDownload:
    """Headers plus a chunk iterator, ready to hand to a streaming response."""
    media_type: str
    headers: dict[str, str]
    chunks: Iterator[bytes]


def sign_object_url(client: Any, bucket: str, key: str, method: str, ttl_seconds: int) -> str:
    """
    Create a presigned URL allowing one HTTP verb on one object.

    Raises:
        ValueError: If the method is not GET, HEAD, PUT, or DELETE
    """
    client_method = SIGNED_URL_METHODS.get(method)
    if client_method is None:
        raise ValueError(f"Unsupported HTTP method for signing URL: {method}")

    return client.generate_presigned_url(
        ClientMethod=client_method,
        Params={"Bucket": bucket, "Key": key},
        ExpiresIn=ttl_seconds,
        HttpMethod=method,
    )


class ObjectStorageService:
    """
    Service for image objects.

    Built once per process. Construction fails with ObjectStorageConfigError
    when PRIVATE_OBJECT_DIR is missing or no public URL can be determined
    (OBJECT_STORAGE_PUBLIC_URL, else the client endpoint). Public search
    paths are only required by search_public_object().
    """

    def __init__(
        self,
        client: Any,
        groups: AccessGroupRegistry,
        private_object_dir: str,
        public_search_paths: list[str] | None = None,
        public_url: str | None = None,
        upload_url_ttl_seconds: int = 900,
    ):
        if not private_object_dir:
            raise ObjectStorageConfigError(
                "PRIVATE_OBJECT_DIR",
                "Create a bucket and set PRIVATE_OBJECT_DIR to /<bucket>/<prefix>",
            )

        self.client = client
        self.groups = groups
        # Stored as "/bucket/prefix/" so prefix checks and joins are uniform
        self.private_object_dir = with_trailing_slash(
            private_object_dir if private_object_dir.startswith("/") else f"/{private_object_dir}"
        )
        self.public_search_paths = public_search_paths or []

        # Full object URLs start with this; normalize() needs it to shorten them
        public_url = public_url or client.meta.endpoint_url
        if not public_url:
            raise ObjectStorageConfigError(
                "OBJECT_STORAGE_PUBLIC_URL",
                "Set OBJECT_STORAGE_PUBLIC_URL or OBJECT_STORAGE_ENDPOINT_URL",
            )
        self.public_url = public_url.rstrip("/")
        self.upload_url_ttl_seconds = upload_url_ttl_seconds

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_public_object_search_paths(self) -> list[str]:
        """
        Raises:
            ObjectStorageConfigError: If no public search path is configured
        """
        if not self.public_search_paths:
            raise ObjectStorageConfigError(
                "PUBLIC_OBJECT_SEARCH_PATHS",
                "Set PUBLIC_OBJECT_SEARCH_PATHS to comma-separated /<bucket>/<prefix> paths",
            )
        return self.public_search_paths

    def head_object(self, bucket: str, key: str) -> ObjectHandle | None:
        """Fetch object metadata, or None if the object does not exist."""
        try:
            response = self.client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if is_missing_object_error(e):
                return None
            raise

        return ObjectHandle(
            bucket=bucket,
            key=key,
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            size=response.get("ContentLength", 0),
            metadata=response.get("Metadata") or {},
        )

    def search_public_object(self, file_path: str) -> ObjectHandle | None:
        """Return the first match under the public search paths, in order."""
        for search_path in self.get_public_object_search_paths():
            bucket, key = parse_object_path(f"{search_path.rstrip('/')}/{file_path}")
            handle = self.head_object(bucket, key)
            if handle is not None:
                return handle
        return None

    def resolve(self, object_path: str) -> ObjectHandle:
        """
        Resolve "/objects/{id}" to the stored object.

        Raises:
            ObjectNotFoundError: If the path is malformed or nothing is stored there
        """
        if not object_path.startswith(OBJECTS_PREFIX):
            raise ObjectNotFoundError(object_path)

        parts = object_path[1:].split("/")
        entity_id = "/".join(parts[1:])
        if len(parts) < 2 or not entity_id:
            raise ObjectNotFoundError(object_path)

        bucket, key = parse_object_path(f"{self.private_object_dir}{entity_id}")
        handle = self.head_object(bucket, key)
        if handle is None:
            raise ObjectNotFoundError(object_path)

        return handle

    # -------------------------------------------------------------------------
    # Uploads and Paths
    # -------------------------------------------------------------------------

    def issue_upload_url(self) -> str:
        """
        Allocate a new object ID and return a signed PUT URL for it.

        Raises:
            StorageUploadError: If signing fails
        """
        object_id = str(uuid.uuid4())
        bucket, key = parse_object_path(f"{self.private_object_dir}{UPLOADS_DIR}/{object_id}")

        try:
            url = sign_object_url(self.client, bucket, key, "PUT", self.upload_url_ttl_seconds)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to sign upload URL: {e}")
            raise StorageUploadError() from e

        logger.info(f"Issued upload URL for object: {UPLOADS_DIR}/{object_id}")
        return url

    def normalize(self, raw_path: str) -> str:
        """
        Rewrite a full storage URL under the private dir to "/objects/{id}".

        Anything else (already-short paths, other URLs) is returned
        unchanged, so normalize(normalize(x)) == normalize(x).

        Example:
            normalize("https://s3.example.com/media/.private/uploads/abc?X-Amz-Signature=...")
            # -> "/objects/uploads/abc"
        """
        if not raw_path.startswith(f"{self.public_url}/"):
            return raw_path

        object_path = unquote(urlsplit(raw_path[len(self.public_url):]).path)
        if not object_path.startswith(self.private_object_dir):
            return raw_path

        entity_id = object_path[len(self.private_object_dir):]
        return f"{OBJECTS_PREFIX}{entity_id}"

    # -------------------------------------------------------------------------
    # Access Policies
    # -------------------------------------------------------------------------

    def get_acl_policy(self, handle: ObjectHandle) -> ObjectAclPolicy | None:
        """Policy attached to the object, or None if none was ever set."""
        value = handle.metadata.get(ACL_POLICY_METADATA_KEY)
        if not value:
            return None
        return ObjectAclPolicy.from_metadata_value(value)

    def set_acl_policy(self, handle: ObjectHandle, policy: ObjectAclPolicy) -> ObjectHandle:
        """
        Attach a policy to an existing object (other metadata is kept).

        Raises:
            ObjectNotFoundError: If the object no longer exists
            StorageUploadError: If the metadata write fails
        """
        current = self.head_object(handle.bucket, handle.key)
        if current is None:
            raise ObjectNotFoundError(f"/{handle.bucket}/{handle.key}")

        metadata = {**current.metadata, ACL_POLICY_METADATA_KEY: policy.to_metadata_value()}

        try:
            # S3 metadata is immutable; copy the object onto itself to replace it
            self.client.copy_object(
                Bucket=current.bucket,
                Key=current.key,
                CopySource={"Bucket": current.bucket, "Key": current.key},
                Metadata=metadata,
                MetadataDirective="REPLACE",
                ContentType=current.content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to set ACL policy on {current.key}: {e}")
            raise StorageUploadError() from e

        logger.info(f"Set ACL policy on {current.key} (owner={policy.owner}, visibility={policy.visibility.value})")
        current.metadata = metadata
        return current

    def try_set_acl_policy(self, raw_path: str, policy: ObjectAclPolicy) -> str:
        """
        Normalize a client-supplied image reference and tag it with a policy.

        Only "/objects/..." references are tagged; other values are
        returned as-is.

        Raises:
            ObjectNotFoundError: If an "/objects/..." reference does not exist
        """
        normalized = self.normalize(raw_path)
        if not normalized.startswith(OBJECTS_PREFIX):
            return normalized

        handle = self.resolve(normalized)
        self.set_acl_policy(handle, policy)
        return normalized

    def can_access(
        self,
        handle: ObjectHandle,
        user_id: str | None,
        requested_permission: ObjectPermission = ObjectPermission.READ,
    ) -> bool:
        """Evaluate the object's policy for a caller (None = anonymous)."""
        return can_access_object(
            self.get_acl_policy(handle),
            user_id,
            requested_permission,
            self.groups,
        )

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------

    def download(self, handle: ObjectHandle, cache_ttl_seconds: int = 3600) -> ObjectDownload:
        """
        Open an object for streaming.

        Failures before any bytes are produced raise StorageDownloadError.
        Failures while streaming are logged and end the stream, since the
        status line has already been sent.
        """
        policy = self.get_acl_policy(handle)
        is_public = policy is not None and policy.visibility == ObjectVisibility.PUBLIC

        try:
            response = self.client.get_object(Bucket=handle.bucket, Key=handle.key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error downloading file {handle.key}: {e}")
            raise StorageDownloadError(handle.key) from e

        headers = {
            "Content-Type": handle.content_type,
            "Content-Length": str(response.get("ContentLength", handle.size)),
            "Cache-Control": f"{'public' if is_public else 'private'}, max-age={cache_ttl_seconds}",
        }

        return ObjectDownload(
            media_type=handle.content_type,
            headers=headers,
            chunks=self._stream(response["Body"], handle.key),
        )

    @staticmethod
    def _stream(body: Any, key: str) -> Iterator[bytes]:
        try:
            for chunk in body.iter_chunks(chunk_size=STREAM_CHUNK_SIZE):
                yield chunk
        except Exception as e:
            logger.error(f"Stream error for {key}: {e}")
        finally:
            body.close()

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def check_bucket(self) -> None:
        """Raise if the private bucket is unreachable."""
        bucket = self.private_object_dir.split("/")[1]
        self.client.head_bucket(Bucket=bucket)
