from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_roles, require_roles
from app.core.logging_config import logger
from app.schemas.rbac import (
    CapabilitiesResponse,
    ColumnAccessCreate,
    ColumnAccessResponse,
    Role,
    RolePermissionCreate,
    RolePermissionResponse,
    TypeAccessIndex,
    TypeColumnAccessCreate,
    TypeColumnAccessResponse,
)
from app.services.rbac import rbac_service


router = APIRouter(dependencies=[Depends(get_current_roles)])

require_admin = require_roles(Role.admin.value, Role.superadmin.value)


@router.get("/permissions", response_model=List[RolePermissionResponse])
def list_permissions(db: Session = Depends(get_db)):
    """All module/action grants, with legacy action names normalized"""
    return rbac_service.get_permissions(db)


@router.get("/columns", response_model=List[ColumnAccessResponse])
def list_column_access(db: Session = Depends(get_db)):
    """All column-level read/write overrides"""
    return rbac_service.get_column_access(db)


@router.get("/type-columns", response_model=List[TypeColumnAccessResponse])
def list_type_columns(db: Session = Depends(get_db)):
    """All per-employee-type field applicability grants"""
    return rbac_service.get_type_columns(db)


@router.get("/type-access", response_model=TypeAccessIndex)
def get_type_access(db: Session = Depends(get_db)):
    """
    Nested applicability lookup: type -> section -> column -> accessible
    
    Sections named "Employee <X>" are also available under "<X>".
    """
    return rbac_service.get_type_access_index(db)


@router.get("/capabilities", response_model=CapabilitiesResponse)
def get_capabilities(
    roles: List[str] = Depends(get_current_roles),
    db: Session = Depends(get_db)
):
    """Capabilities of the calling user, derived from the roles in their token"""
    capabilities = rbac_service.get_capabilities(db, roles)
    return rbac_service.describe(capabilities)


@router.post("/permissions", response_model=RolePermissionResponse)
def save_permission(
    grant: RolePermissionCreate,
    db: Session = Depends(get_db),
    _: List[str] = Depends(require_admin)
):
    """Create or update a module/action grant (admin only)"""
    if not grant.role.strip() or not grant.module.strip() or not grant.action.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role, module and action are required"
        )
    try:
        return rbac_service.save_permission(db, grant)
    except Exception as e:
        logger.error(f"Error saving permission: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save permission: {str(e)}"
        )


@router.post("/columns", response_model=ColumnAccessResponse)
def save_column_access(
    grant: ColumnAccessCreate,
    db: Session = Depends(get_db),
    _: List[str] = Depends(require_admin)
):
    """Create or update a column-level override (admin only); write implies read"""
    if not grant.role.strip() or not grant.section.strip() or not grant.column.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role, section and column are required"
        )
    try:
        return rbac_service.save_column_access(db, grant)
    except Exception as e:
        logger.error(f"Error saving column access: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save column access: {str(e)}"
        )


@router.post("/type-columns", response_model=TypeColumnAccessResponse)
def save_type_column(
    grant: TypeColumnAccessCreate,
    db: Session = Depends(get_db),
    _: List[str] = Depends(require_admin)
):
    """Create or update a field applicability grant for an employee type (admin only)"""
    if not grant.section.strip() or not grant.column.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Section and column are required"
        )
    try:
        return rbac_service.save_type_column(db, grant)
    except Exception as e:
        logger.error(f"Error saving type column access: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save type column access: {str(e)}"
        )
