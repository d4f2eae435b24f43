from enum import Enum
from pydantic import BaseModel
from typing import Dict, List


class Module(str, Enum):
    employees = "employees"
    users = "users"
    reports = "reports"


class Action(str, Enum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"
    manage_users = "manage_users"
    export = "export"


class Role(str, Enum):
    superadmin = "superadmin"
    admin = "admin"
    hr_general = "hr_general"
    finance = "finance"
    dep_rep = "dep_rep"
    employee = "employee"


class EmployeeType(str, Enum):
    indonesia = "indonesia"
    expat = "expat"


class AccessMode(str, Enum):
    read = "read"
    write = "write"


class RolePermissionBase(BaseModel):
    """Grant of a module action to a role"""
    role: str
    module: str
    action: str
    allowed: bool = False


class RolePermissionCreate(RolePermissionBase):
    pass


class RolePermissionResponse(RolePermissionBase):
    class Config:
        from_attributes = True


class ColumnAccessBase(BaseModel):
    """Read/write override for one field of a section"""
    role: str
    section: str
    column: str
    read: bool = False
    write: bool = False


class ColumnAccessCreate(ColumnAccessBase):
    pass


class ColumnAccessResponse(ColumnAccessBase):
    pass


class TypeColumnAccessBase(BaseModel):
    """Applicability of a field to an employee type"""
    type: EmployeeType
    section: str
    column: str
    accessible: bool = True


class TypeColumnAccessCreate(TypeColumnAccessBase):
    pass


class TypeColumnAccessResponse(TypeColumnAccessBase):
    pass


# employee type -> section -> column -> accessible
TypeAccessIndex = Dict[str, Dict[str, Dict[str, bool]]]


class CapabilitiesResponse(BaseModel):
    """Capabilities of the calling user, as consumed by the admin UI"""
    roles: List[str]
    can_read_employees: bool
    can_create_employees: bool
    can_update_employees: bool
    can_delete_employees: bool
    can_manage_users: bool
    can_access_report: bool
    can_export_report: bool
    read_sections: List[str]
    write_sections: List[str]
    column_read: Dict[str, List[str]]  # section -> explicitly readable columns
    column_write: Dict[str, List[str]]  # section -> explicitly writable columns
