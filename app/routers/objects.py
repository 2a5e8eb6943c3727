# =============================================================================
# app/routers/objects.py - Image Upload and Download Endpoints
# =============================================================================
# - POST /api/objects/upload       -> signed PUT URL for a new image
# - GET  /objects/{path}           -> uploaded image, gated by its policy
# - GET  /public-objects/{path}    -> file from the public search paths
#
# There is no authentication, so downloads are evaluated for an anonymous
# caller: only objects with a public policy can be read.
# Handlers are plain `def` so blocking S3 calls run in the threadpool.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from app.config import settings
from app.dependencies import ObjectStorageDep
from app.exceptions import ObjectNotFoundError
from core.models.object_acl import ObjectPermission
from core.services.object_storage_service import ObjectHandle, ObjectStorageService

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadURLResponse(BaseModel):
    """Signed upload URL for a new image."""
    uploadURL: str = Field(..., description="Presigned PUT URL, valid for UPLOAD_URL_TTL_SECONDS")


def _stream(storage: ObjectStorageService, handle: ObjectHandle) -> StreamingResponse:
    download = storage.download(handle, cache_ttl_seconds=settings.OBJECT_CACHE_TTL_SECONDS)
    return StreamingResponse(
        download.chunks,
        media_type=download.media_type,
        headers=download.headers,
    )


@router.post("/api/objects/upload", response_model=UploadURLResponse)
def get_upload_url(storage: ObjectStorageDep):
    """
    Get a signed URL for uploading a guitar image.

    The client PUTs the file to the URL, then sends the URL back as an
    image reference when creating or updating a guitar.
    """
    return UploadURLResponse(uploadURL=storage.issue_upload_url())


@router.get("/objects/{object_path:path}")
def download_object(
    object_path: Annotated[str, Path(description="Object ID under /objects/")],
    storage: ObjectStorageDep,
):
    """
    Serve an uploaded image.

    Objects the caller may not read are reported as not found.
    """
    handle = storage.resolve(f"/objects/{object_path}")

    if not storage.can_access(handle, user_id=None, requested_permission=ObjectPermission.READ):
        logger.info(f"Denied anonymous read of /objects/{object_path}")
        raise ObjectNotFoundError(f"/objects/{object_path}")

    return _stream(storage, handle)


@router.get("/public-objects/{file_path:path}")
def download_public_object(
    file_path: Annotated[str, Path(description="Path under a public search path")],
    storage: ObjectStorageDep,
):
    """Serve a file from the first public search path that has it."""
    handle = storage.search_public_object(file_path)
    if handle is None:
        raise ObjectNotFoundError(f"/public-objects/{file_path}")

    return _stream(storage, handle)
