from .guards import (
    GuardChain,
    RequestContext,
    RequireActiveAccount,
    RequireAllPermissions,
    RequireAnyPermission,
    RequireAnyRole,
    RequireAuthenticated,
    RequireOwnershipOrAdmin,
    RequirePermission,
    RequireResourceAccess,
    RequireRoleChangePermission,
    RequireTenantMatch,
)

__all__ = [
    "GuardChain",
    "RequestContext",
    "RequireActiveAccount",
    "RequireAllPermissions",
    "RequireAnyPermission",
    "RequireAnyRole",
    "RequireAuthenticated",
    "RequireOwnershipOrAdmin",
    "RequirePermission",
    "RequireResourceAccess",
    "RequireRoleChangePermission",
    "RequireTenantMatch",
]
