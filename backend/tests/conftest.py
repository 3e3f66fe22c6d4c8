"""Shared test fixtures and configuration."""
import os

import pytest

# Keep a developer's .env from leaking into settings-dependent tests
os.environ.setdefault("LOG_DENIALS", "true")
os.environ.setdefault("EXPOSE_PERMISSION_MATRIX", "false")

from kaido_access.auth.permission_contract import Role
from kaido_access.config import reset_settings
from kaido_access.models.principal import AccountStatus, Principal


def build_principal(
    role: Role | str = Role.STUDENT,
    *,
    id: str = "user-1",
    tenant_id: str = "tenant-acme",
    status: AccountStatus | str = AccountStatus.ACTIVE,
    custom_permissions: frozenset[str] | list[str] | None = None,
) -> Principal:
    return Principal(
        id=id,
        tenant_id=tenant_id,
        role=role,
        status=status,
        custom_permissions=custom_permissions,
    )


@pytest.fixture
def make_principal():
    """Factory for principals with sensible defaults."""
    return build_principal


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()
