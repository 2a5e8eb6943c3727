# =============================================================================
# core/models/object_acl.py - Object Access Policy Schemas
# =============================================================================
# An access policy is attached to a stored object (an uploaded image) as
# object metadata. It names an owner, a visibility, and an ordered list of
# rules granting a permission to an access group.
#
# Example policy (as stored):
#   {"owner": "user-1", "visibility": "private",
#    "aclRules": [{"group": {"type": "USER_LIST", "id": "staff"},
#                  "permission": "write"}]}
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ObjectPermission(str, Enum):
    """Permission on an object. WRITE implies READ."""
    READ = "read"
    WRITE = "write"


class ObjectVisibility(str, Enum):
    """Public objects are readable by anyone, including anonymous callers."""
    PUBLIC = "public"
    PRIVATE = "private"


class ObjectAccessGroupType(str, Enum):
    """
    Kinds of access group.

    Each kind needs a registered resolver (see core.services.object_acl);
    kinds without one never grant access.
    """
    USER_LIST = "USER_LIST"


class ObjectAccessGroup(BaseModel):
    """
    Reference to a named set of caller identities.

    `type` is kept as a plain string so policies written with kinds this
    build does not know still load (and fail closed).
    """
    type: str
    id: str


class ObjectAclRule(BaseModel):
    """Grant `permission` to every member of `group`."""
    group: ObjectAccessGroup
    permission: ObjectPermission


class ObjectAclPolicy(BaseModel):
    """Access policy attached to a stored object."""

    model_config = ConfigDict(populate_by_name=True)

    owner: str
    visibility: ObjectVisibility
    acl_rules: list[ObjectAclRule] = Field(default_factory=list, alias="aclRules")

    def to_metadata_value(self) -> str:
        """Compact JSON for storing in object metadata."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_metadata_value(cls, value: str) -> "ObjectAclPolicy":
        return cls.model_validate_json(value)
