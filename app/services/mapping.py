from typing import List, Optional
from app.core.config import settings
from app.schemas.schema_mapping import Declaration, MappingReport
from app.services.declarations import declaration_service
from app.services.schema_mapping import SchemaMap, reconcile
from app.services.schema_snapshot import schema_snapshot_service


class MappingService:
    """Runs a reconciliation from configured inputs"""

    def load_schema(self, snapshot_path: Optional[str] = None) -> SchemaMap:
        return schema_snapshot_service.load(snapshot_path or settings.SCHEMA_SNAPSHOT_PATH)

    def reconcile(self, declarations: List[Declaration], schema: SchemaMap) -> MappingReport:
        return reconcile(
            declarations,
            schema,
            default_schema=settings.DEFAULT_DB_SCHEMA,
            threshold=settings.SUGGESTION_THRESHOLD,
            limit=settings.SUGGESTION_LIMIT,
        )

    def run(
        self,
        workbook_path: Optional[str] = None,
        snapshot_path: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> MappingReport:
        """
        Reconcile the declaration workbook against the saved schema snapshot.

        Both inputs are loaded before any matching starts; a missing input
        raises SourceNotFoundError and nothing is produced.
        """
        schema = self.load_schema(snapshot_path)
        declarations = declaration_service.load(
            workbook_path or settings.DECLARATION_WORKBOOK_PATH,
            sheet_name=sheet_name or settings.DECLARATION_SHEET,
        )
        return self.reconcile(declarations, schema)

    def run_upload(self, content: bytes, filename: str, sheet_name: Optional[str] = None) -> MappingReport:
        """Reconcile an uploaded workbook against the saved schema snapshot."""
        schema = self.load_schema()
        df = declaration_service.read_workbook(content, filename=filename, sheet_name=sheet_name)
        return self.reconcile(declaration_service.parse_frame(df), schema)


mapping_service = MappingService()
