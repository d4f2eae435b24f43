from sqlalchemy import Column, Integer, String, Boolean, UniqueConstraint
from app.database import Base, TimestampMixin


class TypeColumnAccess(Base, TimestampMixin):
    """Whether an employee field applies to an employee type (indonesia / expat)."""
    __tablename__ = "type_column_access"

    id = Column(Integer, primary_key=True, index=True)
    employee_type = Column(String(20), nullable=False)
    section = Column(String(100), nullable=False)
    column = Column("column", String(100), nullable=False)
    accessible = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint('employee_type', 'section', 'column', name='uix_type_section_column'),
    )
