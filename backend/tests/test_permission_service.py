"""
Tests for permission resolution.

Covers exact matching, additive custom permissions and the fail-closed
behaviour on malformed input.
"""
import itertools

import pytest

from kaido_access.auth.permission_contract import PERMISSION_CATALOG, ROLE_PERMISSIONS, Role
from kaido_access.services import permission_service
from kaido_access.services.permission_service import (
    can_access_resource,
    can_create_content,
    can_edit_own_resource,
    can_view_analytics,
    first_missing_permission,
    get_effective_permissions,
    get_permission_matrix,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_admin_role,
)


class TestHasPermission:
    def test_student_can_read_courses(self):
        assert has_permission(Role.STUDENT, "courses:read") is True

    def test_custom_grant_overrides_missing_role_permission(self):
        assert has_permission(Role.STUDENT, "courses:create") is False
        assert has_permission(Role.STUDENT, "courses:create", {"courses:create"}) is True

    def test_role_string_is_accepted(self):
        assert has_permission("tenant-admin", "users:create") is True

    def test_matches_matrix_for_every_role_and_permission(self):
        for role, permission in itertools.product(Role, PERMISSION_CATALOG):
            expected = permission in ROLE_PERMISSIONS[role]
            assert has_permission(role, permission) is expected, (role, permission)
            assert has_permission(role, permission, set()) is expected, (role, permission)

    @pytest.mark.parametrize("role", list(Role))
    def test_case_sensitive(self, role):
        assert has_permission(role, "COURSES:READ") is False
        assert has_permission(role, "Courses:Read") is False

    def test_custom_permissions_are_case_sensitive(self):
        assert has_permission(Role.STUDENT, "courses:create", {"COURSES:CREATE"}) is False

    def test_no_wildcard_expansion(self):
        assert has_permission(Role.SUPER_ADMIN, "courses:*") is False
        assert has_permission(Role.STUDENT, "courses:update", {"courses:*"}) is False

    @pytest.mark.parametrize("permission", ["", "nonsense", "users:view", None, 42])
    def test_unknown_or_empty_permission_is_false(self, permission):
        assert has_permission(Role.SUPER_ADMIN, permission) is False

    @pytest.mark.parametrize("role", ["admin", "", "SUPER-ADMIN", None, 8])
    def test_unknown_role_has_no_baseline(self, role):
        assert has_permission(role, "courses:read") is False

    def test_unknown_role_still_gets_nothing_privileged(self):
        for permission in PERMISSION_CATALOG:
            assert has_permission("root", permission) is False

    def test_custom_permissions_accept_list_tuple_and_frozenset(self):
        for custom in (["users:list"], ("users:list",), frozenset({"users:list"})):
            assert has_permission(Role.MENTOR, "users:list", custom) is True

    def test_malformed_custom_permissions_fail_closed(self):
        assert has_permission(Role.MENTOR, "users:list", 12) is False
        assert has_permission(Role.MENTOR, "users:list", [None, 3]) is False

    def test_monotonic_in_custom_permissions(self):
        smaller = {"courses:create"}
        larger = {"courses:create", "users:list", "groups:read"}
        for role, permission in itertools.product(Role, PERMISSION_CATALOG):
            if has_permission(role, permission, smaller):
                assert has_permission(role, permission, larger), (role, permission)
            if has_permission(role, permission):
                assert has_permission(role, permission, smaller), (role, permission)


class TestAnyAllPermissions:
    def test_any_permission(self):
        assert has_any_permission(Role.INSTRUCTOR, ["courses:create", "courses:publish"])
        assert not has_any_permission(Role.STUDENT, ["courses:create", "courses:publish"])

    def test_any_permission_with_custom(self):
        assert has_any_permission(Role.STUDENT, ["courses:publish"], ["courses:publish"])

    def test_any_of_nothing_is_false(self):
        assert has_any_permission(Role.SUPER_ADMIN, []) is False

    def test_all_permissions(self):
        assert has_all_permissions(Role.TENANT_ADMIN, ["users:create", "users:delete"])
        assert not has_all_permissions(Role.INSTRUCTOR, ["courses:create", "courses:publish"])

    def test_first_missing_permission_follows_order(self):
        missing = first_missing_permission(
            Role.STUDENT, ["courses:read", "courses:update", "courses:delete"]
        )
        assert missing == "courses:update"

    def test_first_missing_permission_none_when_all_held(self):
        assert first_missing_permission(Role.MENTOR, ["courses:read"]) is None


class TestEffectivePermissions:
    def test_baseline_only(self):
        assert get_effective_permissions(Role.STUDENT) == ROLE_PERMISSIONS[Role.STUDENT]

    def test_union_with_custom(self):
        effective = get_effective_permissions(Role.STUDENT, ["courses:create", "courses:read"])
        assert effective == ROLE_PERMISSIONS[Role.STUDENT] | {"courses:create"}

    def test_never_subtracts(self):
        for role in Role:
            assert ROLE_PERMISSIONS[role] <= get_effective_permissions(role, ["groups:read"])

    def test_unknown_role(self):
        assert get_effective_permissions("root") == frozenset()
        assert get_effective_permissions("root", ["groups:read"]) == {"groups:read"}

    def test_does_not_mutate_matrix(self):
        before = ROLE_PERMISSIONS[Role.MENTOR]
        get_effective_permissions(Role.MENTOR, ["tenants:delete"])
        assert ROLE_PERMISSIONS[Role.MENTOR] == before
        assert "tenants:delete" not in ROLE_PERMISSIONS[Role.MENTOR]


class TestCanAccessResource:
    def test_builds_resource_action_permission(self):
        assert can_access_resource(Role.INSTRUCTOR, "courses", "update") is True
        assert can_access_resource(Role.INSTRUCTOR, "courses", "delete") is False

    def test_uses_custom_permissions(self):
        assert can_access_resource(Role.STUDENT, "groups", "read", ["groups:read"]) is True

    @pytest.mark.parametrize(
        "resource,action",
        [("", "read"), ("courses", ""), (None, "read"), ("courses", None), ("Courses", "read")],
    )
    def test_malformed_input_is_false(self, resource, action):
        assert can_access_resource(Role.SUPER_ADMIN, resource, action) is False


class TestCanEditOwnResource:
    @pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.TENANT_ADMIN, Role.CONTENT_MANAGER])
    def test_bypass_roles_edit_anything(self, role):
        assert can_edit_own_resource(role, "someone-else", "user-1") is True

    def test_instructor_needs_exact_ownership(self):
        assert can_edit_own_resource(Role.INSTRUCTOR, "user-1", "user-1") is True
        assert can_edit_own_resource(Role.INSTRUCTOR, "user-2", "user-1") is False
        assert can_edit_own_resource(Role.INSTRUCTOR, "USER-1", "user-1") is False

    def test_instructor_with_missing_ids_is_refused(self):
        assert can_edit_own_resource(Role.INSTRUCTOR, None, None) is False
        assert can_edit_own_resource(Role.INSTRUCTOR, None, "user-1") is False

    @pytest.mark.parametrize(
        "role", [Role.USER_MANAGER, Role.ANALYTICS_VIEWER, Role.MENTOR, Role.STUDENT]
    )
    def test_other_roles_always_refused(self, role):
        assert can_edit_own_resource(role, "user-1", "user-1") is False
        assert can_edit_own_resource(role, "user-2", "user-1") is False

    def test_custom_permissions_do_not_grant_ownership(self):
        assert can_edit_own_resource(
            Role.STUDENT, "user-1", "user-1", PERMISSION_CATALOG
        ) is False

    def test_unknown_role_refused(self):
        assert can_edit_own_resource("admin", "user-1", "user-1") is False

    def test_bypass_set_is_exact(self):
        bypass = {role for role in Role if can_edit_own_resource(role, "a", "b")}
        assert bypass == {Role.SUPER_ADMIN, Role.TENANT_ADMIN, Role.CONTENT_MANAGER}


class TestIsAdminRole:
    def test_admin_roles(self):
        admins = {role for role in Role if is_admin_role(role)}
        assert admins == {
            Role.SUPER_ADMIN,
            Role.TENANT_ADMIN,
            Role.CONTENT_MANAGER,
            Role.USER_MANAGER,
        }

    def test_accepts_strings_and_fails_closed(self):
        assert is_admin_role("user-manager") is True
        assert is_admin_role("admin") is False
        assert is_admin_role(None) is False


class TestConvenienceChecks:
    def test_can_create_content(self):
        assert can_create_content(Role.INSTRUCTOR) is True
        assert can_create_content(Role.MENTOR) is False
        assert can_create_content(Role.MENTOR, ["courses:create"]) is True

    def test_can_view_analytics(self):
        assert can_view_analytics(Role.STUDENT) is True
        assert can_view_analytics(Role.ANALYTICS_VIEWER) is True
        assert can_view_analytics(Role.MENTOR) is False
        assert can_view_analytics(Role.MENTOR, ["analytics:view-own"]) is True

    def test_permission_matrix_is_the_read_only_matrix(self):
        matrix = get_permission_matrix()
        assert matrix is ROLE_PERMISSIONS
        with pytest.raises(TypeError):
            matrix[Role.STUDENT] = frozenset()  # type: ignore[index]

    def test_can_change_role_delegates_to_hierarchy(self):
        assert permission_service.can_change_role(
            Role.SUPER_ADMIN, Role.TENANT_ADMIN, Role.TENANT_ADMIN
        ) is True
        assert permission_service.can_change_role(
            Role.TENANT_ADMIN, Role.TENANT_ADMIN, Role.INSTRUCTOR
        ) is False
