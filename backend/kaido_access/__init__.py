"""
Kaido access control core.

Role matrix, role hierarchy, permission resolution and the request guard
chain used by the Kaido learning platform backend.
"""
from .auth.permission_contract import PERMISSION_CATALOG, ROLE_PERMISSIONS, Role
from .models.principal import AccountStatus, Principal

__all__ = [
    "PERMISSION_CATALOG",
    "ROLE_PERMISSIONS",
    "AccountStatus",
    "Principal",
    "Role",
]
