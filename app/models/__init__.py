from .role_permission import RolePermission
from .role_column_access import RoleColumnAccess
from .type_column_access import TypeColumnAccess
