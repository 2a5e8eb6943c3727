# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .guitar_service import GuitarService
from .object_acl import (
    AccessGroup,
    AccessGroupRegistry,
    UserListAccessGroup,
    can_access_object,
    create_access_group_registry,
    is_permission_allowed,
)
from .object_storage_service import ObjectHandle, ObjectStorageService

__all__ = [
    "GuitarService",
    "AccessGroup",
    "AccessGroupRegistry",
    "UserListAccessGroup",
    "can_access_object",
    "create_access_group_registry",
    "is_permission_allowed",
    "ObjectHandle",
    "ObjectStorageService",
]
