"""
Permission resolution over the role matrix and per-principal custom grants.

Every function here is total: malformed or unknown input resolves to False or
an empty set, never an exception. Custom permissions only ever add to the
role's baseline.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..auth import role_hierarchy
from ..auth.permission_contract import (
    ADMIN_ROLES,
    OWNERSHIP_BYPASS_ROLES,
    ROLE_PERMISSIONS,
    Role,
    coerce_role,
    permissions_for_role,
)

CustomPermissions = Iterable[str] | None


def _custom_set(custom_permissions: CustomPermissions) -> frozenset[str]:
    if custom_permissions is None:
        return frozenset()
    if isinstance(custom_permissions, str):
        return frozenset({custom_permissions})
    if not isinstance(custom_permissions, Iterable):
        return frozenset()
    return frozenset(p for p in custom_permissions if isinstance(p, str))


def has_permission(
    role: Role | str,
    permission: str,
    custom_permissions: CustomPermissions = None,
) -> bool:
    """Check if a role, plus its custom grants, holds an exact permission.

    Matching is case-sensitive with no wildcard expansion.
    """
    if not isinstance(permission, str) or not permission:
        return False
    if permission in permissions_for_role(role):
        return True
    return permission in _custom_set(custom_permissions)


def has_any_permission(
    role: Role | str,
    permissions: Iterable[str],
    custom_permissions: CustomPermissions = None,
) -> bool:
    custom = _custom_set(custom_permissions)
    return any(has_permission(role, p, custom) for p in permissions)


def first_missing_permission(
    role: Role | str,
    permissions: Iterable[str],
    custom_permissions: CustomPermissions = None,
) -> str | None:
    """Return the first permission in order that is not held, or None."""
    custom = _custom_set(custom_permissions)
    for permission in permissions:
        if not has_permission(role, permission, custom):
            return permission
    return None


def has_all_permissions(
    role: Role | str,
    permissions: Iterable[str],
    custom_permissions: CustomPermissions = None,
) -> bool:
    return first_missing_permission(role, permissions, custom_permissions) is None


def get_effective_permissions(
    role: Role | str,
    custom_permissions: CustomPermissions = None,
) -> frozenset[str]:
    """Union of the role's baseline and the custom grants.

    Meant for introspection; authorization checks go through has_permission.
    """
    return permissions_for_role(role) | _custom_set(custom_permissions)


def can_access_resource(
    role: Role | str,
    resource: str,
    action: str,
    custom_permissions: CustomPermissions = None,
) -> bool:
    if not isinstance(resource, str) or not isinstance(action, str):
        return False
    if not resource or not action:
        return False
    return has_permission(role, f"{resource}:{action}", custom_permissions)


def can_edit_own_resource(
    role: Role | str,
    resource_owner_id: str | None,
    principal_id: str | None,
    custom_permissions: CustomPermissions = None,
) -> bool:
    """
    Ownership rule for editing a resource.

    super-admin, tenant-admin and content-manager may edit anything. An
    instructor may edit only what they own. Every other role is refused.
    Custom permissions do not change the outcome; ownership is a relationship,
    not a grant.
    """
    resolved = coerce_role(role)
    if resolved is None:
        return False
    if resolved in OWNERSHIP_BYPASS_ROLES:
        return True
    if resolved is Role.INSTRUCTOR:
        return (
            resource_owner_id is not None
            and principal_id is not None
            and resource_owner_id == principal_id
        )
    return False


def is_admin_role(role: Role | str) -> bool:
    resolved = coerce_role(role)
    return resolved is not None and resolved in ADMIN_ROLES


def can_change_role(
    actor_role: Role | str,
    target_current_role: Role | str,
    new_role: Role | str,
) -> bool:
    return role_hierarchy.can_change_role(actor_role, target_current_role, new_role)


def can_create_content(role: Role | str, custom_permissions: CustomPermissions = None) -> bool:
    return has_permission(role, "courses:create", custom_permissions)


def can_view_analytics(role: Role | str, custom_permissions: CustomPermissions = None) -> bool:
    return has_any_permission(
        role, ("analytics:view-all", "analytics:view-own"), custom_permissions
    )


def get_permission_matrix() -> Mapping[Role, frozenset[str]]:
    """Read-only view of the whole role matrix, for documentation and debugging."""
    return ROLE_PERMISSIONS
