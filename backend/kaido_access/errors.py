from enum import Enum
from typing import Any

from fastapi import status


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


def error_payload(
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details}}


# ============================================================================
# AUTHORIZATION DENIALS
# ============================================================================

class DenialKind(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    INSUFFICIENT_ROLE = "InsufficientRole"
    PERMISSION_DENIED = "PermissionDenied"
    ACCESS_DENIED = "AccessDenied"
    OWNERSHIP_DENIED = "OwnershipDenied"
    ACCOUNT_INACTIVE = "AccountInactive"
    TENANT_ACCESS_DENIED = "TenantAccessDenied"
    BAD_REQUEST = "BadRequest"
    ROLE_CHANGE_NOT_ALLOWED = "RoleChangeNotAllowed"


class AuthorizationDenied(AppError):
    """Terminal outcome of a guard. Never retried, never swallowed.

    ``error`` is the short, stable label clients match on; ``fields`` holds the
    structured extras rendered next to it in the response body.
    """

    kind: DenialKind
    error: str = "Access denied"
    code = "PERMISSION_DENIED"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str | None = None, **fields: Any):
        super().__init__(message, details=fields or None)
        self.fields: dict[str, Any] = fields

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.fields}


class Unauthenticated(AuthorizationDenied):
    kind = DenialKind.UNAUTHENTICATED
    error = "Authentication required"
    code = "AUTH_ERROR"
    message = "You must be logged in to access this resource"
    status_code = status.HTTP_401_UNAUTHORIZED


class InsufficientRole(AuthorizationDenied):
    kind = DenialKind.INSUFFICIENT_ROLE
    error = "Insufficient permissions"
    message = "This action requires a different role"

    def __init__(self, required: list[str], current: str):
        super().__init__(
            f"This action requires one of the following roles: {', '.join(required)}",
            required=required,
            current=current,
        )


class PermissionDenied(AuthorizationDenied):
    kind = DenialKind.PERMISSION_DENIED
    error = "Permission denied"
    message = "You do not have permission to perform this action"

    def __init__(self, required: str | list[str], role: str):
        super().__init__(required=required, role=role)


class AccessDenied(AuthorizationDenied):
    kind = DenialKind.ACCESS_DENIED
    error = "Access denied"

    def __init__(self, resource: str, action: str, role: str):
        super().__init__(
            f"You do not have permission to {action} {resource}",
            resource=resource,
            action=action,
            role=role,
        )


class OwnershipDenied(AuthorizationDenied):
    kind = DenialKind.OWNERSHIP_DENIED
    error = "Ownership required"
    message = "You can only modify resources you own"


class AccountInactive(AuthorizationDenied):
    kind = DenialKind.ACCOUNT_INACTIVE
    error = "Account inactive"
    message = "Your account is not active. Please contact support."

    def __init__(self, status: str):
        super().__init__(status=status)


class TenantAccessDenied(AuthorizationDenied):
    kind = DenialKind.TENANT_ACCESS_DENIED
    error = "Tenant access denied"
    message = "You do not have access to this organization"

    def __init__(self, user_tenant: str, requested_tenant: str | None):
        super().__init__(userTenant=user_tenant, requestedTenant=requested_tenant)


class RoleChangeBadRequest(AuthorizationDenied):
    kind = DenialKind.BAD_REQUEST
    error = "Bad request"
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class RoleChangeNotAllowed(AuthorizationDenied):
    kind = DenialKind.ROLE_CHANGE_NOT_ALLOWED
    error = "Role change not allowed"
    message = "You cannot assign this role"

    def __init__(self, current_user_role: str, target_role: str, new_role: str):
        super().__init__(
            currentUserRole=current_user_role,
            targetRole=target_role,
            newRole=new_role,
        )
