from typing import Iterable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.logging_config import logger
from app.crud.rbac import role_column_access, role_permission, type_column_access
from app.schemas.rbac import (
    CapabilitiesResponse,
    ColumnAccessBase,
    ColumnAccessCreate,
    RolePermissionBase,
    RolePermissionCreate,
    TypeAccessIndex,
    TypeColumnAccessBase,
    TypeColumnAccessCreate,
)
from app.services.capabilities import (
    DEFAULT_PERMISSIONS,
    Capabilities,
    compute_capabilities,
    normalize_action,
    normalize_roles,
)
from app.services.type_access import build_type_access_index, normalize_employee_type


class RBACService:
    """
    Loads grants from the database and turns them into capabilities.

    Loading is tolerant: if the grant tables cannot be queried the built-in
    defaults are used, so the UI degrades to the stock role matrix.
    """

    def __init__(self):
        self.permission_crud = role_permission
        self.column_crud = role_column_access
        self.type_crud = type_column_access

    def get_permissions(self, db: Session) -> List[RolePermissionBase]:
        try:
            rows = self.permission_crud.get_all(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Falling back to default permissions: {str(e)}")
            return list(DEFAULT_PERMISSIONS)
        return [
            RolePermissionBase(
                role=str(row.role),
                module=str(row.module or ""),
                action=normalize_action(str(row.module or ""), str(row.action or "")),
                allowed=bool(row.allowed),
            )
            for row in rows
        ]

    def get_column_access(self, db: Session) -> List[ColumnAccessBase]:
        try:
            rows = self.column_crud.get_all(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Column access unavailable, using section defaults only: {str(e)}")
            return []
        return [
            ColumnAccessBase(
                role=str(row.role),
                section=str(row.section),
                column=str(row.column),
                read=bool(row.can_read),
                write=bool(row.can_write),
            )
            for row in rows
        ]

    def get_type_columns(self, db: Session) -> List[TypeColumnAccessBase]:
        try:
            rows = self.type_crud.get_all(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Type column access unavailable: {str(e)}")
            return []
        return [
            TypeColumnAccessBase(
                type=normalize_employee_type(row.employee_type),
                section=str(row.section or ""),
                column=str(row.column or ""),
                accessible=bool(row.accessible),
            )
            for row in rows
        ]

    def get_type_access_index(self, db: Session) -> TypeAccessIndex:
        return build_type_access_index(self.get_type_columns(db))

    def get_capabilities(self, db: Session, raw_roles: Iterable[Optional[str]]) -> Capabilities:
        """
        Capabilities for the roles claimed by a user.

        Args:
            db: Database session
            raw_roles: Role strings as stored in the identity store

        Returns:
            Capabilities computed from the current grants
        """
        roles = normalize_roles(raw_roles)
        return compute_capabilities(roles, self.get_permissions(db), self.get_column_access(db))

    @staticmethod
    def describe(capabilities: Capabilities) -> CapabilitiesResponse:
        return CapabilitiesResponse(
            roles=capabilities.roles,
            can_read_employees=capabilities.can_read_employees,
            can_create_employees=capabilities.can_create_employees,
            can_update_employees=capabilities.can_update_employees,
            can_delete_employees=capabilities.can_delete_employees,
            can_manage_users=capabilities.can_manage_users,
            can_access_report=capabilities.can_access_report,
            can_export_report=capabilities.can_export_report,
            read_sections=sorted(capabilities.read_sections),
            write_sections=sorted(capabilities.write_sections),
            column_read={s: sorted(c) for s, c in capabilities.column_read.items()},
            column_write={s: sorted(c) for s, c in capabilities.column_write.items()},
        )

    def save_permission(self, db: Session, grant: RolePermissionCreate) -> RolePermissionBase:
        row = self.permission_crud.create_or_update(db, values={
            "role": grant.role.strip(),
            "module": grant.module.strip(),
            "action": grant.action.strip(),
            "allowed": grant.allowed,
        })
        return RolePermissionBase(role=row.role, module=row.module, action=row.action, allowed=row.allowed)

    def save_column_access(self, db: Session, grant: ColumnAccessCreate) -> ColumnAccessBase:
        row = self.column_crud.create_or_update(db, values={
            "role": grant.role.strip(),
            "section": grant.section.strip(),
            "column": grant.column.strip(),
            # write implies read
            "can_read": grant.read or grant.write,
            "can_write": grant.write,
        })
        return ColumnAccessBase(
            role=row.role, section=row.section, column=row.column, read=row.can_read, write=row.can_write
        )

    def save_type_column(self, db: Session, grant: TypeColumnAccessCreate) -> TypeColumnAccessBase:
        row = self.type_crud.create_or_update(db, values={
            "employee_type": normalize_employee_type(grant.type),
            "section": grant.section.strip(),
            "column": grant.column.strip(),
            "accessible": grant.accessible,
        })
        return TypeColumnAccessBase(
            type=row.employee_type, section=row.section, column=row.column, accessible=row.accessible
        )


rbac_service = RBACService()
