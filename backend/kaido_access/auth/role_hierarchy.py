"""
Role hierarchy used to gate role reassignment.

Ranks are only ever compared to each other. content-manager and user-manager
share rank 6, and no role sits at rank 2; both are part of the contract.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

from .permission_contract import Role, coerce_role


ROLE_HIERARCHY: Final[Mapping[Role, int]] = MappingProxyType({
    Role.SUPER_ADMIN: 8,
    Role.TENANT_ADMIN: 7,
    Role.CONTENT_MANAGER: 6,
    Role.USER_MANAGER: 6,
    Role.ANALYTICS_VIEWER: 5,
    Role.INSTRUCTOR: 4,
    Role.MENTOR: 3,
    Role.STUDENT: 1,
})


def get_role_hierarchy() -> Mapping[Role, int]:
    return ROLE_HIERARCHY


def rank(role: Role | str) -> int | None:
    """Return the rank of a role, or None for an unrecognised value."""
    resolved = coerce_role(role)
    if resolved is None:
        return None
    return ROLE_HIERARCHY[resolved]


def can_change_role(
    actor_role: Role | str,
    target_current_role: Role | str,
    new_role: Role | str,
) -> bool:
    """
    Decide whether actor_role may move a principal from target_current_role to new_role.

    The actor must strictly outrank the target's current role and must rank at
    least as high as the role being assigned. Any unrecognised role fails closed.
    """
    actor_rank = rank(actor_role)
    target_rank = rank(target_current_role)
    new_rank = rank(new_role)
    if actor_rank is None or target_rank is None or new_rank is None:
        return False
    return actor_rank > target_rank and actor_rank >= new_rank
