# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# Clients and services are built once per process (lru_cache) and injected
# into route handlers using Depends(). Tests replace them through
# app.dependency_overrides.
# =============================================================================

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends

from app.config import settings
from core.services.guitar_service import GuitarService
from core.services.object_acl import create_access_group_registry
from core.services.object_storage_service import ObjectStorageService
from lib.object_storage_client import create_object_storage_client
from lib.supabase_client import create_supabase_client


@lru_cache
def get_supabase_client() -> Any:
    """Process-wide Supabase client."""
    return create_supabase_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


@lru_cache
def get_object_storage_client() -> Any:
    """Process-wide S3 client."""
    return create_object_storage_client(
        endpoint_url=settings.OBJECT_STORAGE_ENDPOINT_URL,
        access_key_id=settings.OBJECT_STORAGE_ACCESS_KEY_ID,
        secret_access_key=settings.OBJECT_STORAGE_SECRET_ACCESS_KEY,
        region=settings.OBJECT_STORAGE_REGION,
    )


@lru_cache
def get_guitar_service() -> GuitarService:
    return GuitarService(get_supabase_client(), settings.GUITARS_TABLE)


@lru_cache
def get_object_storage_service() -> ObjectStorageService:
    """
    Process-wide object storage service.

    Raises ObjectStorageConfigError when PRIVATE_OBJECT_DIR is missing.
    lru_cache does not cache exceptions, so every request that needs the
    service fails the same way until the configuration is fixed.
    """
    return ObjectStorageService(
        client=get_object_storage_client(),
        groups=create_access_group_registry(
            get_supabase_client(),
            settings.ACCESS_GROUP_MEMBERS_TABLE,
        ),
        private_object_dir=settings.PRIVATE_OBJECT_DIR,
        public_search_paths=settings.public_object_search_paths_list,
        public_url=settings.object_storage_public_url,
        upload_url_ttl_seconds=settings.UPLOAD_URL_TTL_SECONDS,
    )


def get_object_storage_provider() -> Callable[[], ObjectStorageService]:
    """
    Deferred access to the object storage service.

    Guitar writes only need object storage when the payload carries image
    references, so they take a provider instead of the service itself.
    """
    return get_object_storage_service


# Type aliases for dependency injection
GuitarServiceDep = Annotated[GuitarService, Depends(get_guitar_service)]
ObjectStorageDep = Annotated[ObjectStorageService, Depends(get_object_storage_service)]
ObjectStorageProviderDep = Annotated[
    Callable[[], ObjectStorageService],
    Depends(get_object_storage_provider),
]
