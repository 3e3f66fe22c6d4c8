from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..auth.permission_contract import Role, parse_permission


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


class Principal(BaseModel):
    """Authenticated caller, attached to the request by the upstream auth step.

    Role and custom permissions are validated against the closed catalog when
    the principal is built, so an unknown role string never reaches the
    resolver as if it were a real role.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    tenant_id: str = Field(..., min_length=1, alias="tenantId")
    role: Role
    status: AccountStatus = AccountStatus.ACTIVE
    custom_permissions: frozenset[str] = Field(
        default_factory=frozenset, alias="customPermissions"
    )

    @field_validator("custom_permissions", mode="before")
    @classmethod
    def _default_custom_permissions(cls, value: object) -> object:
        return frozenset() if value is None else value

    @field_validator("custom_permissions")
    @classmethod
    def _validate_custom_permissions(cls, value: frozenset[str]) -> frozenset[str]:
        for permission in value:
            parse_permission(permission)
        return value

    @property
    def is_active(self) -> bool:
        return self.status is AccountStatus.ACTIVE
