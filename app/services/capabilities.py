from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set
from app.schemas.rbac import (
    AccessMode,
    Action,
    ColumnAccessBase,
    Module,
    Role,
    RolePermissionBase,
)


ALL_SECTIONS = ["core", "contact", "employment", "bank", "insurance", "onboard", "travel", "checklist", "notes"]

# Sections each role may read/write regardless of column-level grants
DEFAULT_READ_SECTIONS: Dict[str, List[str]] = {
    Role.superadmin.value: ALL_SECTIONS,
    Role.admin.value: ALL_SECTIONS,
    Role.hr_general.value: ["core", "contact", "employment", "onboard", "checklist", "notes"],
    Role.finance.value: ["core", "bank", "insurance"],
    Role.dep_rep.value: ["core", "employment"],
    Role.employee.value: ["core"],
}

DEFAULT_WRITE_SECTIONS: Dict[str, List[str]] = {
    Role.superadmin.value: ALL_SECTIONS,
    Role.admin.value: ALL_SECTIONS,
    Role.hr_general.value: ["contact", "employment", "notes"],
    Role.finance.value: ["bank", "insurance"],
    Role.dep_rep.value: [],
    Role.employee.value: [],
}


def _grant(role: Role, module: Module, action: Action, allowed: bool = True) -> RolePermissionBase:
    return RolePermissionBase(role=role.value, module=module.value, action=action.value, allowed=allowed)


# Used when the permission store cannot be reached
DEFAULT_PERMISSIONS: List[RolePermissionBase] = [
    _grant(Role.superadmin, Module.employees, Action.read),
    _grant(Role.superadmin, Module.employees, Action.create),
    _grant(Role.superadmin, Module.employees, Action.update),
    _grant(Role.superadmin, Module.employees, Action.delete),
    _grant(Role.superadmin, Module.users, Action.manage_users),
    _grant(Role.superadmin, Module.reports, Action.read),
    _grant(Role.superadmin, Module.reports, Action.export),

    _grant(Role.admin, Module.employees, Action.read),
    _grant(Role.admin, Module.employees, Action.create),
    _grant(Role.admin, Module.employees, Action.update),
    _grant(Role.admin, Module.employees, Action.delete, allowed=False),
    _grant(Role.admin, Module.users, Action.manage_users),
    _grant(Role.admin, Module.reports, Action.read),
    _grant(Role.admin, Module.reports, Action.export),

    _grant(Role.hr_general, Module.employees, Action.read),
    _grant(Role.finance, Module.employees, Action.read),
    _grant(Role.dep_rep, Module.employees, Action.read),
]


def normalize_role_name(role: Optional[str]) -> str:
    """
    Map a raw role string from the identity store onto a canonical role.

    Matching is deliberately loose (substring sniffing) because stored role
    names vary between deployments. Unrecognized input passes through as the
    trimmed, lowercased string.
    """
    s = str(role or "").strip().lower()
    if "super" in s:
        return Role.superadmin.value
    if s == "admin":
        return Role.admin.value
    if "hr" in s:
        return Role.hr_general.value
    if "finance" in s:
        return Role.finance.value
    if "dep" in s:
        return Role.dep_rep.value
    if "employee" in s:
        return Role.employee.value
    return s


def normalize_roles(roles: Iterable[Optional[str]]) -> List[str]:
    """Normalize and de-duplicate roles, keeping first-seen order and dropping empties."""
    out: List[str] = []
    for role in roles:
        name = normalize_role_name(role)
        if name and name not in out:
            out.append(name)
    return out


def normalize_action(module: str, action: str) -> str:
    """Translate legacy action names stored in role_permissions."""
    a = action.lower()
    if a == "view":
        return Action.read.value
    if a == "edit":
        return Action.update.value
    if module.lower() == Module.users.value and a == "manage_roles":
        return Action.manage_users.value
    return action


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)


class Capabilities:
    """
    What a set of roles may do.

    Built once per session from explicitly supplied grants; every check is a
    pure lookup. Absent data always resolves to denial.
    """

    def __init__(
        self,
        roles: Iterable[str],
        permissions: Iterable[RolePermissionBase],
        column_access: Optional[Iterable[ColumnAccessBase]] = None,
    ):
        self.roles: List[str] = [r for r in roles if r]
        held = set(self.roles)

        self._allowed: Set[tuple] = {
            (_value(p.module), _value(p.action))
            for p in permissions
            if p.allowed and p.role in held
        }

        self.read_sections: FrozenSet[str] = self._union(DEFAULT_READ_SECTIONS)
        self.write_sections: FrozenSet[str] = self._union(DEFAULT_WRITE_SECTIONS)

        self.column_read: Dict[str, Set[str]] = {}
        self.column_write: Dict[str, Set[str]] = {}
        for grant in column_access or []:
            if grant.role not in held:
                continue
            # write implies read
            if grant.read or grant.write:
                self.column_read.setdefault(grant.section, set()).add(grant.column)
            if grant.write:
                self.column_write.setdefault(grant.section, set()).add(grant.column)

    def _union(self, defaults: Dict[str, List[str]]) -> FrozenSet[str]:
        sections: Set[str] = set()
        for role in self.roles:
            sections.update(defaults.get(role, []))
        return frozenset(sections)

    def can(self, module: str, action: str) -> bool:
        """True iff a held role is explicitly allowed (module, action)."""
        return (_value(module), _value(action)) in self._allowed

    def can_column(self, section: str, column: str, mode: str = AccessMode.read.value) -> bool:
        """
        Whether a field is readable/writable.

        Explicit column grants are checked first; otherwise the default
        section lists decide. Grants only ever add access.
        """
        write = _value(mode) == AccessMode.write.value
        granted = self.column_write if write else self.column_read
        if column in granted.get(section, ()):
            return True
        sections = self.write_sections if write else self.read_sections
        return section in sections

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def can_manage_user(self, target_role: Optional[str] = None) -> bool:
        """Only a superadmin may manage another superadmin."""
        if not self.can_manage_users:
            return False
        if target_role == Role.superadmin.value and not self.has_role(Role.superadmin.value):
            return False
        return True

    def can_assign_role(self, new_role: str) -> bool:
        if new_role == Role.superadmin.value:
            return self.has_role(Role.superadmin.value)
        return self.can_manage_users

    @property
    def can_read_employees(self) -> bool:
        return self.can(Module.employees.value, Action.read.value)

    @property
    def can_create_employees(self) -> bool:
        return self.can(Module.employees.value, Action.create.value)

    @property
    def can_update_employees(self) -> bool:
        return self.can(Module.employees.value, Action.update.value)

    @property
    def can_delete_employees(self) -> bool:
        return self.can(Module.employees.value, Action.delete.value)

    @property
    def can_manage_users(self) -> bool:
        return self.can(Module.users.value, Action.manage_users.value)

    @property
    def can_access_report(self) -> bool:
        return self.can(Module.reports.value, Action.read.value)

    @property
    def can_export_report(self) -> bool:
        return self.can(Module.reports.value, Action.export.value)


def compute_capabilities(
    roles: Iterable[str],
    permissions: Iterable[RolePermissionBase],
    column_access: Optional[Iterable[ColumnAccessBase]] = None,
) -> Capabilities:
    """Build capabilities for already-normalized roles."""
    return Capabilities(roles, permissions, column_access)
