"""
Authorization guards - composable, stateless request checks.

Each guard inspects only what it needs from a RequestContext and either
returns quietly (allow) or raises an AuthorizationDenied subclass (deny).
A GuardChain runs guards strictly in declaration order and stops at the
first denial; no later guard runs and nothing is logged on its behalf.

The guards are transport-agnostic. kaido_access.dependencies adapts them to
FastAPI routes.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..auth.permission_contract import Role, parse_permission, parse_role
from ..errors import (
    AccessDenied,
    AccountInactive,
    AuthorizationDenied,
    InsufficientRole,
    OwnershipDenied,
    PermissionDenied,
    RoleChangeBadRequest,
    RoleChangeNotAllowed,
    TenantAccessDenied,
    Unauthenticated,
)
from ..models.principal import AccountStatus, Principal
from ..services import permission_service

logger = logging.getLogger("kaido.authz")


OwnerLookup = Callable[[str], "str | None"]


@dataclass(frozen=True)
class RequestContext:
    """The parts of an inbound request that guards are allowed to read."""

    principal: Principal | None = None
    route_params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    method: str = "GET"
    path: str = "/"


def _present(value: Any) -> bool:
    return value is not None and value != ""


class Guard(ABC):
    """Base class for a single authorization check."""

    @abstractmethod
    def check(self, context: RequestContext) -> None:
        """Raise an AuthorizationDenied subclass to reject the request."""

    def __call__(self, context: RequestContext) -> None:
        self.check(context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PrincipalGuard(Guard):
    """Guard that needs an authenticated principal before it can decide."""

    @staticmethod
    def principal(context: RequestContext) -> Principal:
        if context.principal is None:
            raise Unauthenticated()
        return context.principal


class RequireAuthenticated(PrincipalGuard):
    def check(self, context: RequestContext) -> None:
        self.principal(context)


class RequireAnyRole(PrincipalGuard):
    def __init__(self, *roles: Role | str):
        if not roles:
            raise ValueError("RequireAnyRole needs at least one role")
        self.roles: tuple[Role, ...] = tuple(parse_role(role) for role in roles)

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if principal.role not in self.roles:
            raise InsufficientRole(
                required=[role.value for role in self.roles],
                current=principal.role.value,
            )

    def __repr__(self) -> str:
        return f"RequireAnyRole({', '.join(role.value for role in self.roles)})"


class RequirePermission(PrincipalGuard):
    def __init__(self, permission: str):
        self.permission = parse_permission(permission)

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if not permission_service.has_permission(
            principal.role, self.permission, principal.custom_permissions
        ):
            raise PermissionDenied(required=self.permission, role=principal.role.value)

    def __repr__(self) -> str:
        return f"RequirePermission({self.permission})"


class RequireAnyPermission(PrincipalGuard):
    def __init__(self, permissions: Iterable[str]):
        self.permissions = tuple(parse_permission(p) for p in permissions)
        if not self.permissions:
            raise ValueError("RequireAnyPermission needs at least one permission")

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if not permission_service.has_any_permission(
            principal.role, self.permissions, principal.custom_permissions
        ):
            raise PermissionDenied(
                required=list(self.permissions), role=principal.role.value
            )


class RequireAllPermissions(PrincipalGuard):
    def __init__(self, permissions: Iterable[str]):
        self.permissions = tuple(parse_permission(p) for p in permissions)
        if not self.permissions:
            raise ValueError("RequireAllPermissions needs at least one permission")

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        missing = permission_service.first_missing_permission(
            principal.role, self.permissions, principal.custom_permissions
        )
        if missing is not None:
            raise PermissionDenied(required=missing, role=principal.role.value)


class RequireResourceAccess(PrincipalGuard):
    def __init__(self, resource: str, action: str):
        self.resource = resource
        self.action = action

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if not permission_service.can_access_resource(
            principal.role, self.resource, self.action, principal.custom_permissions
        ):
            raise AccessDenied(
                resource=self.resource, action=self.action, role=principal.role.value
            )

    def __repr__(self) -> str:
        return f"RequireResourceAccess({self.resource}:{self.action})"


class RequireOwnershipOrAdmin(PrincipalGuard):
    """
    Allow admins outright; everyone else must own the addressed resource.

    The resource id is read from the route parameter ``resource_param`` and
    resolved to its owner id through ``owner_lookup``. A missing id, an unknown
    resource (lookup returns None) or a different owner all deny.
    """

    def __init__(self, owner_lookup: OwnerLookup, resource_param: str = "id"):
        if not callable(owner_lookup):
            raise TypeError("owner_lookup must be callable")
        self.owner_lookup = owner_lookup
        self.resource_param = resource_param

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if permission_service.is_admin_role(principal.role):
            return

        resource_id = context.route_params.get(self.resource_param)
        if not _present(resource_id):
            raise OwnershipDenied()

        owner_id = self.owner_lookup(str(resource_id))
        if owner_id is None or owner_id != principal.id:
            raise OwnershipDenied()


class RequireActiveAccount(PrincipalGuard):
    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if principal.status is not AccountStatus.ACTIVE:
            raise AccountInactive(status=principal.status.value)


class RequireTenantMatch(PrincipalGuard):
    """
    Keep non super-admins inside their own tenant.

    The requested tenant id is taken from the first source that carries it:
    route parameter, then body field, then query parameter. Body fields are
    only seen for JSON objects and url-encoded forms; multipart uploads must
    carry the tenant in the route or query.
    """

    def __init__(self, field_name: str = "tenantId"):
        self.field_name = field_name

    def requested_tenant(self, context: RequestContext) -> str | None:
        for source in (context.route_params, context.body, context.query):
            value = source.get(self.field_name)
            if _present(value):
                return str(value)
        return None

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        if principal.role is Role.SUPER_ADMIN:
            return
        requested = self.requested_tenant(context)
        if requested is None or requested != principal.tenant_id:
            raise TenantAccessDenied(
                user_tenant=principal.tenant_id, requested_tenant=requested
            )


class RequireRoleChangePermission(PrincipalGuard):
    def __init__(self, target_field: str = "targetRole", new_field: str = "newRole"):
        self.target_field = target_field
        self.new_field = new_field

    def check(self, context: RequestContext) -> None:
        principal = self.principal(context)
        fields = (self.target_field, self.new_field)

        missing = [name for name in fields if not _present(context.body.get(name))]
        if missing:
            raise RoleChangeBadRequest(
                f"{' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
                missing=missing,
            )

        parsed: dict[str, Role] = {}
        invalid = []
        for name in fields:
            try:
                parsed[name] = parse_role(context.body[name])
            except ValueError:
                invalid.append(name)
        if invalid:
            raise RoleChangeBadRequest(
                f"{' and '.join(invalid)} must name a valid role", invalid=invalid
            )

        target_role = parsed[self.target_field]
        new_role = parsed[self.new_field]
        if not permission_service.can_change_role(principal.role, target_role, new_role):
            raise RoleChangeNotAllowed(
                current_user_role=principal.role.value,
                target_role=target_role.value,
                new_role=new_role.value,
            )


def _log_deny(context: RequestContext, guard: Guard, exc: AuthorizationDenied) -> None:
    role = context.principal.role.value if context.principal is not None else "anonymous"
    logger.warning(
        "authz deny kind=%s guard=%r role=%s method=%s path=%s",
        exc.kind.value,
        guard,
        role,
        context.method,
        context.path,
    )


class GuardChain:
    """Ordered list of guards evaluated with first-denial short-circuit."""

    def __init__(self, *guards: Guard, log_denials: bool = True):
        self.guards: tuple[Guard, ...] = guards
        self.log_denials = log_denials

    def run(self, context: RequestContext) -> None:
        for guard in self.guards:
            try:
                guard(context)
            except AuthorizationDenied as exc:
                if self.log_denials:
                    _log_deny(context, guard, exc)
                raise

    __call__ = run

    def __len__(self) -> int:
        return len(self.guards)
