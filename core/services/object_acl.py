# =============================================================================
# core/services/object_acl.py - Object Access Policy Evaluation
# =============================================================================
# Answers "may caller U perform permission P on an object with policy X?"
#
# Evaluation order:
# 1. No policy                         -> deny
# 2. Public policy and READ requested  -> allow
# 3. Anonymous caller                  -> deny
# 4. Caller is the owner               -> allow
# 5. First rule whose group contains the caller and whose permission
#    covers the request                -> allow; otherwise deny
#
# Access group kinds are resolved through a registry keyed by kind tag.
# A kind with no registered resolver never grants access.
# =============================================================================

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from core.models.object_acl import (
    ObjectAccessGroup,
    ObjectAccessGroupType,
    ObjectAclPolicy,
    ObjectPermission,
    ObjectVisibility,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Access Groups
# =============================================================================

class AccessGroup(ABC):
    """A resolvable set of caller identities."""

    def __init__(self, group_id: str):
        self.group_id = group_id

    @abstractmethod
    def has_member(self, user_id: str) -> bool:
        """Check if `user_id` belongs to this group."""


class UserListAccessGroup(AccessGroup):
    """
    Explicit list of users, stored as (group_id, user_id) rows.

    Lookup errors propagate to the caller.
    """

    def __init__(self, group_id: str, client: Any, table: str = "access_group_members"):
        super().__init__(group_id)
        self.client = client
        self.table = table

    def has_member(self, user_id: str) -> bool:
        response = (
            self.client.table(self.table)
            .select("user_id")
            .eq("group_id", self.group_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return bool(response.data)


AccessGroupFactory = Callable[[ObjectAccessGroup], AccessGroup]


class AccessGroupRegistry:
    """
    Maps access group kinds to factories.

    Example:
        registry = AccessGroupRegistry()
        registry.register("USER_LIST", lambda g: UserListAccessGroup(g.id, client))
        group = registry.resolve(ObjectAccessGroup(type="USER_LIST", id="staff"))
    """

    def __init__(self) -> None:
        self._factories: dict[str, AccessGroupFactory] = {}

    def register(self, group_type: str | ObjectAccessGroupType, factory: AccessGroupFactory) -> None:
        key = group_type.value if isinstance(group_type, ObjectAccessGroupType) else group_type
        self._factories[key] = factory

    def resolve(self, group: ObjectAccessGroup) -> AccessGroup | None:
        """Build the group, or None if its kind is not registered."""
        factory = self._factories.get(group.type)
        if factory is None:
            logger.warning(f"Unknown access group type: {group.type} (group {group.id}); denying")
            return None
        return factory(group)


def create_access_group_registry(client: Any, members_table: str = "access_group_members") -> AccessGroupRegistry:
    """Registry with every group kind this service knows how to resolve."""
    registry = AccessGroupRegistry()
    registry.register(
        ObjectAccessGroupType.USER_LIST,
        lambda group: UserListAccessGroup(group.id, client, members_table),
    )
    return registry


# =============================================================================
# Policy Evaluation
# =============================================================================

def is_permission_allowed(requested: ObjectPermission, granted: ObjectPermission) -> bool:
    """WRITE covers READ and WRITE; READ covers only READ."""
    if requested == ObjectPermission.READ:
        return granted in (ObjectPermission.READ, ObjectPermission.WRITE)
    return granted == ObjectPermission.WRITE


def can_access_object(
    policy: ObjectAclPolicy | None,
    user_id: str | None,
    requested_permission: ObjectPermission,
    groups: AccessGroupRegistry,
) -> bool:
    """
    Decide whether `user_id` may perform `requested_permission`.

    Args:
        policy: The object's policy, or None if it never had one
        user_id: Caller identity, or None for an anonymous caller
        requested_permission: READ or WRITE
        groups: Resolver for the groups named in the policy's rules

    Returns:
        True if access is allowed
    """
    if policy is None:
        return False

    if policy.visibility == ObjectVisibility.PUBLIC and requested_permission == ObjectPermission.READ:
        return True

    if not user_id:
        return False

    if policy.owner == user_id:
        return True

    for rule in policy.acl_rules:
        # Check the grant first; membership may need a lookup
        if not is_permission_allowed(requested_permission, rule.permission):
            continue
        group = groups.resolve(rule.group)
        if group is not None and group.has_member(user_id):
            return True

    return False
