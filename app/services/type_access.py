import re
from typing import Any, Dict, Iterable, Optional
from app.schemas.rbac import EmployeeType, TypeAccessIndex, TypeColumnAccessBase
from app.services.capabilities import Capabilities


SECTION_ALIAS_PREFIX = "Employee "

# Fields that are never editable, whatever the grants say
READ_ONLY_COLUMNS = {"employee_id"}


def normalize_employee_type(value: Any) -> str:
    """Stored type values other than 'expat' count as Indonesian."""
    if isinstance(value, EmployeeType):
        return value.value
    return EmployeeType.expat.value if str(value or "").strip().lower() == "expat" else EmployeeType.indonesia.value


def build_type_access_index(grants: Iterable[TypeColumnAccessBase]) -> TypeAccessIndex:
    """
    Build the nested lookup type -> section -> column -> accessible.

    A section named "Employee <X>" is also indexed under "<X>" so lookups
    work with either naming. Later grants for the same key overwrite
    earlier ones.
    """
    index: TypeAccessIndex = {EmployeeType.indonesia.value: {}, EmployeeType.expat.value: {}}
    for grant in grants:
        employee_type = normalize_employee_type(grant.type)
        section = str(grant.section or "")
        column = str(grant.column or "")
        accessible = bool(grant.accessible)

        index[employee_type].setdefault(section, {})[column] = accessible
        if section.startswith(SECTION_ALIAS_PREFIX):
            alias = section[len(SECTION_ALIAS_PREFIX):]
            index[employee_type].setdefault(alias, {})[column] = accessible
    return index


def resolve_employee_type(type_value: Optional[str] = None, nationality: Optional[str] = None) -> str:
    """Work out whether an employee record is Indonesian or expatriate."""
    t = str(type_value or "").strip().lower()
    nat = str(nationality or "").strip().lower()
    if t.startswith("expat"):
        return EmployeeType.expat.value
    if nat == "indonesia" or nat.startswith("indo"):
        return EmployeeType.indonesia.value
    return EmployeeType.expat.value


def normalize_section(value: str) -> str:
    """Canonical section key: lowercase, without a "dbo." or "employee" prefix."""
    section = str(value or "").strip().lower()
    section = re.sub(r"^dbo\.", "", section)
    section = re.sub(r"^employee\s+", "", section)
    return re.sub(r"^employee_", "", section)


def is_applicable(index: TypeAccessIndex, employee_type: str, section: str, column: str) -> Optional[bool]:
    """Explicit applicability of a field for a type, None when unconfigured."""
    return index.get(employee_type, {}).get(section, {}).get(column)


def can_edit_field(
    capabilities: Capabilities,
    index: TypeAccessIndex,
    employee_type: str,
    section: str,
    column: str,
) -> bool:
    """
    Editability of one field for one employee.

    Requires role-level write access and that the field is not marked as
    not applicable for the employee's type.
    """
    if column in READ_ONLY_COLUMNS:
        return False
    if is_applicable(index, employee_type, section.lower(), column) is False:
        return False
    return capabilities.can_column(section, column, "write")


def filter_row_for_type(
    row: Dict[str, Any],
    index: TypeAccessIndex,
    employee_type: str,
    section: str = "Core",
) -> Dict[str, Any]:
    """Drop fields explicitly marked not applicable for the employee type."""
    allowed = index.get(employee_type, {}).get(section, {})
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if key == "nationality" or allowed.get(key) is not False:
            out[key] = value
    return out
