"""
Permission Contract - compiled-in catalog, roles and role matrix.

This module defines the complete authorization data model for Kaido:
- The closed set of roles a principal can hold
- The closed catalog of "resource:action" permissions
- The role matrix granting each role its baseline permissions

Nothing here is configurable at runtime. The matrix is validated once at
import time and exposed only through read-only views.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


# ============================================================================
# ROLES - CLOSED ENUMERATION
# ============================================================================

class Role(str, Enum):
    """The eight roles a principal can hold, highest privilege first."""
    SUPER_ADMIN = "super-admin"            # Platform-level admin (multi-tenant)
    TENANT_ADMIN = "tenant-admin"          # Organization admin
    CONTENT_MANAGER = "content-manager"    # Course & content management
    USER_MANAGER = "user-manager"          # User & team management
    ANALYTICS_VIEWER = "analytics-viewer"  # Read-only analytics access
    INSTRUCTOR = "instructor"              # Course creator (needs approval)
    MENTOR = "mentor"                      # Student guidance
    STUDENT = "student"                    # Learning experience


# Roles that may edit any resource regardless of who owns it
OWNERSHIP_BYPASS_ROLES: Final[frozenset[Role]] = frozenset({
    Role.SUPER_ADMIN,
    Role.TENANT_ADMIN,
    Role.CONTENT_MANAGER,
})

# Administrative roles (classification only, not a security gate)
ADMIN_ROLES: Final[frozenset[Role]] = frozenset({
    Role.SUPER_ADMIN,
    Role.TENANT_ADMIN,
    Role.CONTENT_MANAGER,
    Role.USER_MANAGER,
})


# ============================================================================
# PERMISSION CATALOG - EXPLICIT ONLY, NO WILDCARDS
# ============================================================================

TENANT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "tenants:create",
    "tenants:read",
    "tenants:update",
    "tenants:delete",
    "tenants:list-all",
})

USER_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "users:create",
    "users:read",
    "users:update",
    "users:delete",
    "users:list",
    "users:change-role",
    "users:change-status",
})

COURSE_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "courses:create",
    "courses:read",
    "courses:update",
    "courses:delete",
    "courses:publish",
    "courses:archive",
    "courses:list-all",
    "courses:list-own",
})

CONTENT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "content:create",
    "content:edit",
    "content:archive",
    "content:delete",
    "content:review",
    "content:approve",
    "content:reject",
    "content:request-changes",
})

ENROLLMENT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "enrollment:assign-individual",
    "enrollment:assign-bulk",
    "enrollment:remove",
    "enrollment:view",
})

GROUP_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "groups:create",
    "groups:read",
    "groups:update",
    "groups:delete",
    "groups:assign-users",
    "groups:assign-courses",
})

ANALYTICS_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "analytics:view-all",
    "analytics:view-own",
    "analytics:export",
    "analytics:view-user-progress",
    "analytics:view-course-stats",
    "analytics:view-team-stats",
})

GAMIFICATION_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "gamification:configure-xp",
    "gamification:create-badges",
    "gamification:manage-leaderboards",
})

MENTORSHIP_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "mentorship:configure",
    "mentorship:view-all-sessions",
    "mentorship:view-own-sessions",
    "mentorship:accept-requests",
    "mentorship:rate-sessions",
})

SETTINGS_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "settings:read",
    "settings:write",
    "settings:branding",
    "settings:notifications",
    "settings:integrations",
    "settings:languages",
    "settings:compliance",
})

AUDIT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "audit:view-logs",
    "audit:export-logs",
})

ASSET_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "assets:upload",
    "assets:manage",
    "assets:delete",
})

PERMISSION_CATALOG: Final[frozenset[str]] = (
    TENANT_PERMISSIONS
    | USER_PERMISSIONS
    | COURSE_PERMISSIONS
    | CONTENT_PERMISSIONS
    | ENROLLMENT_PERMISSIONS
    | GROUP_PERMISSIONS
    | ANALYTICS_PERMISSIONS
    | GAMIFICATION_PERMISSIONS
    | MENTORSHIP_PERMISSIONS
    | SETTINGS_PERMISSIONS
    | AUDIT_PERMISSIONS
    | ASSET_PERMISSIONS
)


# ============================================================================
# ROLE MATRIX
# ============================================================================

_TENANT_ADMIN_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "tenants:read",
    "tenants:update",
    *USER_PERMISSIONS,
    *(COURSE_PERMISSIONS - {"courses:list-own"}),
    *CONTENT_PERMISSIONS,
    *ENROLLMENT_PERMISSIONS,
    *GROUP_PERMISSIONS,
    *(ANALYTICS_PERMISSIONS - {"analytics:view-own"}),
    *GAMIFICATION_PERMISSIONS,
    "mentorship:configure",
    "mentorship:view-all-sessions",
    *(SETTINGS_PERMISSIONS - {"settings:integrations"}),
    "audit:view-logs",
    *ASSET_PERMISSIONS,
})

ROLE_PERMISSIONS: Final[Mapping[Role, frozenset[str]]] = MappingProxyType({
    # Everything a tenant admin has, plus platform-wide tenant and audit control
    Role.SUPER_ADMIN: _TENANT_ADMIN_PERMISSIONS | frozenset({
        *TENANT_PERMISSIONS,
        "settings:integrations",
        "audit:export-logs",
    }),

    Role.TENANT_ADMIN: _TENANT_ADMIN_PERMISSIONS,

    Role.CONTENT_MANAGER: frozenset({
        *(COURSE_PERMISSIONS - {"courses:list-own"}),
        *CONTENT_PERMISSIONS,
        "enrollment:assign-individual",
        "enrollment:view",
        "analytics:view-course-stats",
        "gamification:create-badges",
        *ASSET_PERMISSIONS,
    }),

    Role.USER_MANAGER: frozenset({
        *USER_PERMISSIONS,
        *ENROLLMENT_PERMISSIONS,
        *GROUP_PERMISSIONS,
        "analytics:view-user-progress",
        "analytics:view-team-stats",
        "mentorship:configure",
        "mentorship:view-all-sessions",
    }),

    Role.ANALYTICS_VIEWER: frozenset({
        "users:list",
        "courses:list-all",
        *(ANALYTICS_PERMISSIONS - {"analytics:view-own"}),
        "mentorship:view-all-sessions",
    }),

    # Course creation still goes through content approval
    Role.INSTRUCTOR: frozenset({
        "courses:create",
        "courses:read",
        "courses:update",
        "courses:list-own",
        "content:create",
        "content:edit",
        "analytics:view-own",
        "analytics:view-course-stats",
        "gamification:create-badges",
        "mentorship:view-own-sessions",
        "mentorship:accept-requests",
        "assets:upload",
    }),

    Role.MENTOR: frozenset({
        "courses:read",
        "analytics:view-user-progress",
        "mentorship:view-own-sessions",
        "mentorship:accept-requests",
        "mentorship:rate-sessions",
    }),

    Role.STUDENT: frozenset({
        "courses:read",
        "analytics:view-own",
        "mentorship:view-own-sessions",
        "mentorship:rate-sessions",
    }),
})


# ============================================================================
# BOUNDARY PARSING
# ============================================================================

class InvalidRoleError(ValueError):
    """Raised when an untrusted string does not name one of the eight roles."""


class InvalidPermissionError(ValueError):
    """Raised when an untrusted string is not in the permission catalog."""


def parse_role(value: str | Role) -> Role:
    """
    Parse an untrusted role value into a Role.

    Matching is exact: "Super-Admin" or " student" are rejected rather than
    normalised.

    Raises:
        InvalidRoleError: If value is not a known role
    """
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        try:
            return Role(value)
        except ValueError:
            pass
    raise InvalidRoleError(
        f"Invalid role '{value}'. "
        f"Must be one of: {', '.join(role.value for role in Role)}"
    )


def parse_permission(value: str) -> str:
    """
    Validate an untrusted permission string against the catalog.

    Raises:
        InvalidPermissionError: If value is not a catalog permission
    """
    if not isinstance(value, str) or value not in PERMISSION_CATALOG:
        raise InvalidPermissionError(f"Invalid permission '{value}'")
    return value


def coerce_role(value: object) -> Role | None:
    """Like parse_role but returns None instead of raising."""
    try:
        return parse_role(value)  # type: ignore[arg-type]
    except InvalidRoleError:
        return None


def permissions_for_role(role: Role | str) -> frozenset[str]:
    """Return the fixed permission set for a role; unknown roles get nothing."""
    resolved = coerce_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


# Validate the matrix at module load time (fail-fast)
def _validate_contract() -> None:
    """Validate the role matrix against the catalog at import time."""
    errors = []

    for role in Role:
        if role not in ROLE_PERMISSIONS:
            errors.append(f"Role '{role.value}' missing from matrix")
            continue
        permissions = ROLE_PERMISSIONS[role]
        if not permissions:
            errors.append(f"Role '{role.value}' has no permissions")
        unknown = permissions - PERMISSION_CATALOG
        if unknown:
            errors.append(f"Role '{role.value}' has unknown permissions: {sorted(unknown)}")

    for permission in PERMISSION_CATALOG:
        resource, sep, action = permission.partition(":")
        if not sep or not resource or not action or "*" in permission:
            errors.append(f"Malformed permission in catalog: {permission}")

    if errors:
        raise RuntimeError(
            "Permission contract validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


_validate_contract()
