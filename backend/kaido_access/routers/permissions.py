from fastapi import APIRouter, Depends

from ..auth.role_hierarchy import get_role_hierarchy
from ..config import Settings, get_settings
from ..dependencies import get_current_principal
from ..errors import NotFoundError
from ..models.principal import Principal
from ..services import permission_service

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/me")
async def read_own_permissions(
    principal: Principal = Depends(get_current_principal),
) -> dict:
    effective = permission_service.get_effective_permissions(
        principal.role, principal.custom_permissions
    )
    return {
        "role": principal.role.value,
        "isAdmin": permission_service.is_admin_role(principal.role),
        "permissions": sorted(effective),
        "customPermissions": sorted(principal.custom_permissions),
    }


@router.get("/matrix")
async def read_permission_matrix(
    principal: Principal = Depends(get_current_principal),
    settings: Settings = Depends(get_settings),
) -> dict:
    # Hidden unless enabled, and then only to admins
    if not settings.expose_permission_matrix or not permission_service.is_admin_role(
        principal.role
    ):
        raise NotFoundError()
    hierarchy = get_role_hierarchy()
    return {
        "roles": [
            {
                "role": role.value,
                "rank": hierarchy[role],
                "permissions": sorted(permissions),
            }
            for role, permissions in permission_service.get_permission_matrix().items()
        ]
    }
