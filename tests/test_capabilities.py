import pytest
from app.schemas.rbac import Action, Module, RolePermissionBase
from app.services.capabilities import (
    DEFAULT_PERMISSIONS,
    compute_capabilities,
    normalize_action,
    normalize_role_name,
    normalize_roles,
)


class TestRoleNormalization:
    """Raw role strings from the identity store map onto canonical roles."""

    @pytest.mark.parametrize("raw,expected", [
        ("Super Admin", "superadmin"),
        ("superadmin", "superadmin"),
        ("ADMIN", "admin"),
        (" admin ", "admin"),
        ("HR Staff", "hr_general"),
        ("Finance", "finance"),
        ("Department Rep", "dep_rep"),
        ("Employee", "employee"),
        ("Auditor", "auditor"),
    ])
    def test_normalize_role_name(self, raw, expected):
        assert normalize_role_name(raw) == expected

    def test_substring_sniffing_is_kept_loose(self):
        # "chrome" contains "hr" and is treated as HR
        assert normalize_role_name("chrome") == "hr_general"

    def test_administrator_is_not_admin(self):
        assert normalize_role_name("Administrator") == "administrator"

    def test_normalize_roles_drops_empties_and_duplicates(self):
        assert normalize_roles(["HR", "", None, "hr_general", "Finance"]) == ["hr_general", "finance"]


class TestActionNormalization:

    def test_legacy_names(self):
        assert normalize_action("employees", "view") == "read"
        assert normalize_action("employees", "EDIT") == "update"
        assert normalize_action("users", "manage_roles") == "manage_users"

    def test_manage_roles_outside_users_is_unchanged(self):
        assert normalize_action("reports", "manage_roles") == "manage_roles"

    def test_other_actions_pass_through(self):
        assert normalize_action("reports", "export") == "export"


class TestCan:
    """Module/action checks are the OR across held roles, default deny."""

    def test_allowed_for_any_held_role(self, permissions):
        caps = compute_capabilities(["finance", "hr_general"], permissions)
        assert caps.can("employees", "read")
        assert caps.can("reports", "export")

    def test_absent_record_is_denied(self, permissions):
        caps = compute_capabilities(["hr_general"], permissions)
        assert not caps.can("employees", "update")
        assert not caps.can("reports", "export")

    def test_explicit_disallow_is_denied(self, permissions):
        caps = compute_capabilities(["admin"], permissions)
        assert not caps.can("employees", "delete")

    def test_enum_arguments(self, permissions):
        caps = compute_capabilities(["admin"], permissions)
        assert caps.can(Module.employees, Action.read)

    def test_no_roles_denies_everything(self, permissions):
        caps = compute_capabilities([], permissions)
        assert not caps.can("employees", "read")
        assert caps.read_sections == frozenset()

    def test_unknown_role_passes_through_without_access(self, permissions):
        caps = compute_capabilities(["auditor"], permissions)
        assert caps.roles == ["auditor"]
        assert not caps.can("employees", "read")

    def test_permission_for_unheld_role_is_ignored(self):
        perms = [RolePermissionBase(role="admin", module="users", action="manage_users", allowed=True)]
        assert not compute_capabilities(["finance"], perms).can_manage_users


class TestNamedFlags:

    def test_default_permissions_for_admin(self):
        caps = compute_capabilities(["admin"], DEFAULT_PERMISSIONS)
        assert caps.can_read_employees
        assert caps.can_create_employees
        assert caps.can_update_employees
        assert not caps.can_delete_employees
        assert caps.can_manage_users
        assert caps.can_access_report
        assert caps.can_export_report

    def test_default_permissions_for_department_rep(self):
        caps = compute_capabilities(["dep_rep"], DEFAULT_PERMISSIONS)
        assert caps.can_read_employees
        assert not caps.can_create_employees
        assert not caps.can_access_report


class TestCanColumn:

    def test_default_sections_are_unioned(self):
        caps = compute_capabilities(["finance", "dep_rep"], [])
        assert caps.read_sections == frozenset({"core", "bank", "insurance", "employment"})
        assert caps.write_sections == frozenset({"bank", "insurance"})

    def test_section_default_allows_any_column(self):
        caps = compute_capabilities(["hr_general"], [])
        assert caps.can_column("contact", "anything", "read")
        assert caps.can_column("notes", "anything", "write")
        assert not caps.can_column("bank", "iban", "read")

    def test_explicit_grant_adds_access(self, column_access):
        caps = compute_capabilities(["employee"], [], column_access)
        assert caps.can_column("contact", "phone", "read")
        assert not caps.can_column("contact", "phone", "write")
        assert not caps.can_column("contact", "email", "read")

    def test_write_grant_implies_read(self, column_access):
        caps = compute_capabilities(["employee"], [], column_access)
        assert caps.can_column("bank", "account_no", "write")
        assert caps.can_column("bank", "account_no", "read")

    def test_disabled_grant_does_not_revoke_default_section(self, column_access):
        caps = compute_capabilities(["finance"], [], column_access)
        assert caps.can_column("core", "salary", "read")

    def test_grant_for_other_role_is_ignored(self, column_access):
        caps = compute_capabilities(["dep_rep"], [], column_access)
        assert not caps.can_column("contact", "phone", "read")

    def test_unknown_section_is_denied(self):
        caps = compute_capabilities(["superadmin"], [])
        assert not caps.can_column("payroll", "salary", "read")

    def test_default_mode_is_read(self):
        caps = compute_capabilities(["employee"], [])
        assert caps.can_column("core", "name")


class TestUserManagementPolicy:

    def test_admin_cannot_manage_superadmin(self):
        caps = compute_capabilities(["admin"], DEFAULT_PERMISSIONS)
        assert caps.can_manage_user("finance")
        assert not caps.can_manage_user("superadmin")

    def test_superadmin_can_manage_superadmin(self):
        caps = compute_capabilities(["superadmin"], DEFAULT_PERMISSIONS)
        assert caps.can_manage_user("superadmin")

    def test_without_manage_users_nothing_is_manageable(self):
        caps = compute_capabilities(["hr_general"], DEFAULT_PERMISSIONS)
        assert not caps.can_manage_user("employee")
        assert not caps.can_assign_role("employee")

    def test_only_superadmin_assigns_superadmin(self):
        admin = compute_capabilities(["admin"], DEFAULT_PERMISSIONS)
        superadmin = compute_capabilities(["superadmin"], DEFAULT_PERMISSIONS)
        assert admin.can_assign_role("hr_general")
        assert not admin.can_assign_role("superadmin")
        assert superadmin.can_assign_role("superadmin")
