from typing import Any, Dict, List, Optional, Type
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.logging_config import logger
from app.database import Base
from app.models.role_column_access import RoleColumnAccess
from app.models.role_permission import RolePermission
from app.models.type_column_access import TypeColumnAccess


class CRUDGrant:
    """
    Read-all and upsert operations for an RBAC grant table.

    Grants are identified by their natural key (e.g. role/module/action);
    saving a grant either updates the existing row or inserts a new one.
    """

    def __init__(self, model: Type[Base], key_fields: List[str]):
        self.model = model
        self.key_fields = key_fields

    def get_all(self, db: Session) -> List[Any]:
        """Every grant row, in insertion order"""
        stmt = select(self.model).order_by(self.model.id)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def get_by_key(self, db: Session, **key: Any) -> Optional[Any]:
        stmt = select(self.model).where(
            *[getattr(self.model, field) == key[field] for field in self.key_fields]
        )
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create_or_update(self, db: Session, *, values: Dict[str, Any]) -> Any:
        """
        Insert a grant, or update it when the natural key already exists.

        Args:
            db: Database session
            values: Column values including the natural key fields

        Returns:
            Created or updated grant row
        """
        key = {field: values[field] for field in self.key_fields}
        existing = self.get_by_key(db, **key)

        if existing:
            return self._apply(db, existing, values, "Updated")

        # If not exists, try to create with exception handling for race conditions
        try:
            obj = self.model(**values)
            db.add(obj)
            db.commit()
            db.refresh(obj)
            logger.info(f"Created {self.model.__tablename__} grant {key}")
            return obj
        except IntegrityError:
            # Another request inserted the same key between check and insert
            db.rollback()
            existing = self.get_by_key(db, **key)
            if existing:
                return self._apply(db, existing, values, "Updated (race)")
            raise

    def _apply(self, db: Session, obj: Any, values: Dict[str, Any], verb: str) -> Any:
        for field, value in values.items():
            setattr(obj, field, value)
        db.commit()
        db.refresh(obj)
        logger.info(f"{verb} {self.model.__tablename__} grant {[values[f] for f in self.key_fields]}")
        return obj


role_permission = CRUDGrant(RolePermission, ["role", "module", "action"])
role_column_access = CRUDGrant(RoleColumnAccess, ["role", "section", "column"])
type_column_access = CRUDGrant(TypeColumnAccess, ["employee_type", "section", "column"])
