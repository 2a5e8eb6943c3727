# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - guitar.py: Guitar listing schemas, filters, and validation entry points
# - object_acl.py: Access policy schemas attached to stored images
#
# These models define the "contract" between API and clients.
# =============================================================================

from .guitar import (
    Guitar,
    GuitarCondition,
    GuitarCreate,
    GuitarFilters,
    GuitarStatus,
    GuitarType,
    GuitarUpdate,
    validate_filters,
    validate_guitar_create,
    validate_guitar_update,
)

from .object_acl import (
    ObjectAccessGroup,
    ObjectAccessGroupType,
    ObjectAclPolicy,
    ObjectAclRule,
    ObjectPermission,
    ObjectVisibility,
)

__all__ = [
    # Guitar
    "Guitar",
    "GuitarCondition",
    "GuitarCreate",
    "GuitarFilters",
    "GuitarStatus",
    "GuitarType",
    "GuitarUpdate",
    "validate_filters",
    "validate_guitar_create",
    "validate_guitar_update",
    # Object ACL
    "ObjectAccessGroup",
    "ObjectAccessGroupType",
    "ObjectAclPolicy",
    "ObjectAclRule",
    "ObjectPermission",
    "ObjectVisibility",
]
