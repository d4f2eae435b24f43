from app.crud.rbac import CRUDGrant, role_permission, role_column_access, type_column_access

__all__ = ["CRUDGrant", "role_permission", "role_column_access", "type_column_access"]
