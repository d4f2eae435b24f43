from sqlalchemy import Column, Integer, String, Boolean, UniqueConstraint
from app.database import Base, TimestampMixin


class RoleColumnAccess(Base, TimestampMixin):
    """
    Per-role override of read/write access to one employee field.
    
    Overrides are additive on top of the role's default section access.
    """
    __tablename__ = "role_column_access"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(50), nullable=False, index=True)
    section = Column(String(50), nullable=False)
    column = Column("column", String(100), nullable=False)
    can_read = Column(Boolean, nullable=False, default=False)
    can_write = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('role', 'section', 'column', name='uix_role_section_column'),
    )
