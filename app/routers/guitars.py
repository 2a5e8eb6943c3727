# =============================================================================
# app/routers/guitars.py - Guitar Listing Endpoints
# =============================================================================
# CRUD plus search/filter for the catalog.
# Bodies and query strings are validated by core.models.guitar, so bad
# input is reported as 400 with field-level errors.
#
# Handlers are plain `def`: the supabase and boto3 clients block, so
# FastAPI runs them in its threadpool.
# =============================================================================

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Query, Response, status

from app.config import settings
from app.dependencies import GuitarServiceDep, ObjectStorageProviderDep
from app.exceptions import GuitarValidationError, ObjectNotFoundError
from core.models.guitar import (
    Guitar,
    GuitarCreate,
    GuitarUpdate,
    validate_filters,
    validate_guitar_create,
    validate_guitar_update,
)
from core.models.object_acl import ObjectAclPolicy, ObjectVisibility
from core.services.object_storage_service import ObjectStorageService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def _catalog_image_policy() -> ObjectAclPolicy:
    """Listing photos are public and owned by the store."""
    return ObjectAclPolicy(
        owner=settings.CATALOG_OWNER_ID,
        visibility=ObjectVisibility.PUBLIC,
    )


def _prepare_images(
    data: GuitarCreate | GuitarUpdate,
    storage_provider: Callable[[], ObjectStorageService],
) -> None:
    """
    Normalize image references in place and make uploaded ones public.

    Runs before the record is written. If the write then fails, the
    images stay tagged public; the record is never written with
    references that were not checked.
    """
    if not data.image_url and not data.image_urls:
        return

    storage = storage_provider()
    policy = _catalog_image_policy()

    def prepare(field: str, reference: str) -> str:
        try:
            return storage.try_set_acl_policy(reference, policy)
        except ObjectNotFoundError as e:
            raise GuitarValidationError(
                [{"field": field, "message": f"Image not found: {reference}"}]
            ) from e

    if data.image_url:
        data.image_url = prepare("imageUrl", data.image_url)
    if data.image_urls:
        data.image_urls = [
            prepare(f"imageUrls.{index}", reference)
            for index, reference in enumerate(data.image_urls)
        ]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[Guitar])
def list_guitars(
    service: GuitarServiceDep,
    search: Annotated[str | None, Query(description="Text matched against brand, model, color, description")] = None,
    type: Annotated[str | None, Query(description="electric, acoustic, classical, or bass")] = None,
    brand: Annotated[str | None, Query(description="Exact brand")] = None,
    status_: Annotated[str | None, Query(alias="status", description="available, reserved, or sold")] = None,
    min_price: Annotated[str | None, Query(alias="minPrice", description="Lowest price, inclusive")] = None,
    max_price: Annotated[str | None, Query(alias="maxPrice", description="Highest price, inclusive")] = None,
):
    """
    List, search, or filter guitars.

    When `search` is given, the structured filters are ignored.
    """
    if search:
        return service.find_guitars(search=search)

    filters = validate_filters({
        "type": type,
        "brand": brand,
        "status": status_,
        "minPrice": min_price,
        "maxPrice": max_price,
    })
    return service.find_guitars(filters=filters)


@router.get("/{guitar_id}", response_model=Guitar)
def get_guitar(
    guitar_id: Annotated[str, Path(description="Guitar ID")],
    service: GuitarServiceDep,
):
    """Get one guitar."""
    return service.get_guitar(guitar_id)


@router.post("", response_model=Guitar, status_code=status.HTTP_201_CREATED)
def create_guitar(
    payload: Annotated[Any, Body()],
    service: GuitarServiceDep,
    storage_provider: ObjectStorageProviderDep,
):
    """
    Create a guitar listing.

    Image URLs from a direct upload are stored in the short
    "/objects/{id}" form and made publicly readable.
    """
    data = validate_guitar_create(payload)
    _prepare_images(data, storage_provider)
    return service.create_guitar(data)


@router.put("/{guitar_id}", response_model=Guitar)
def update_guitar(
    guitar_id: Annotated[str, Path(description="Guitar ID")],
    payload: Annotated[Any, Body()],
    service: GuitarServiceDep,
    storage_provider: ObjectStorageProviderDep,
):
    """
    Partially update a guitar listing.

    Only the fields present in the body change.
    """
    updates = validate_guitar_update(payload)

    # 404 before touching any images
    service.get_guitar(guitar_id)

    _prepare_images(updates, storage_provider)
    return service.update_guitar(guitar_id, updates)


@router.delete("/{guitar_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guitar(
    guitar_id: Annotated[str, Path(description="Guitar ID")],
    service: GuitarServiceDep,
):
    """Permanently delete a guitar listing."""
    service.delete_guitar(guitar_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
