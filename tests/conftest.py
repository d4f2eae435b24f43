import os

# Must be set before any app module is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_hr_masterdata.db")

import pytest
from app.schemas.schema_mapping import ColumnDefinition
from app.schemas.rbac import ColumnAccessBase, RolePermissionBase


@pytest.fixture
def schema_map():
    """A small scanned schema in the shape produced by the schema scan."""
    return {
        "dbo.employees": [
            ColumnDefinition(name="emp_id", type="int", nullable=False),
            ColumnDefinition(name="full_name", type="nvarchar", nullable=True),
        ],
        "dbo.employee_bank": [
            ColumnDefinition(name="bank_name", type="nvarchar", nullable=True),
            ColumnDefinition(name="account_no", type="nvarchar", nullable=True),
        ],
        "hr.contracts": [
            ColumnDefinition(name="contract_no", type="nvarchar", nullable=False),
        ],
    }


@pytest.fixture
def permissions():
    return [
        RolePermissionBase(role="admin", module="employees", action="read", allowed=True),
        RolePermissionBase(role="admin", module="employees", action="delete", allowed=False),
        RolePermissionBase(role="hr_general", module="employees", action="read", allowed=True),
        RolePermissionBase(role="finance", module="reports", action="export", allowed=True),
    ]


@pytest.fixture
def column_access():
    return [
        ColumnAccessBase(role="employee", section="contact", column="phone", read=True, write=False),
        ColumnAccessBase(role="employee", section="bank", column="account_no", read=False, write=True),
        ColumnAccessBase(role="finance", section="core", column="salary", read=False, write=False),
    ]


@pytest.fixture
def db():
    """Session on a freshly created set of grant tables."""
    from app.database import Base, SessionLocal, engine
    import app.models.role_permission  # noqa: F401
    import app.models.role_column_access  # noqa: F401
    import app.models.type_column_access  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_header():
    """Builds an Authorization header for a token carrying the given roles."""
    from jose import jwt
    from app.core.config import settings

    def make(*roles):
        token = jwt.encode({"sub": "tester", "roles": list(roles)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        return {"Authorization": f"Bearer {token}"}
    return make
