from app.services.rbac import rbac_service
from app.services.mapping import mapping_service
from .declarations import declaration_service
from .schema_snapshot import schema_snapshot_service
from .mapping_report import mapping_report_service

__all__ = [
    "rbac_service",
    "mapping_service",
    "declaration_service",
    "schema_snapshot_service",
    "mapping_report_service",
]
