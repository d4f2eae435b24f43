from sqlalchemy import Column, Integer, String, Boolean, UniqueConstraint
from app.database import Base, TimestampMixin


class RolePermission(Base, TimestampMixin):
    """
    Coarse-grained grant of a module action to a role.
    
    Absence of a row means the action is denied for that role.
    """
    __tablename__ = "role_permissions"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(50), nullable=False, index=True)
    module = Column(String(50), nullable=False)  # "employees", "users", "reports"
    action = Column(String(50), nullable=False)  # "read", "create", ..., legacy "view"/"edit"
    allowed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('role', 'module', 'action', name='uix_role_module_action'),
    )
