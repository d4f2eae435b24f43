import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from app.core.exceptions import SchemaSnapshotError, SourceNotFoundError
from app.core.logging_config import logger
from app.schemas.schema_mapping import ColumnDefinition
from app.services.schema_mapping import SchemaMap


# Catalog schemas that never hold application tables
SYSTEM_SCHEMAS = {"information_schema", "sys", "pg_catalog", "pg_toast", "guest"}


class SchemaSnapshotService:
    """Scans a live database catalog and persists/loads the snapshot used for reconciliation"""

    def scan(self, engine: Engine) -> Dict[str, Any]:
        """
        Inspect every base table visible to the connection.

        Args:
            engine: SQLAlchemy engine for the database to scan

        Returns:
            Snapshot dict: {"generated_at", "database", "schema": {"<schema>.<table>": {...}}}
        """
        inspector = inspect(engine)
        schema: Dict[str, Any] = {}

        for schema_name in inspector.get_schema_names():
            if schema_name.lower() in SYSTEM_SCHEMAS or schema_name.lower().startswith("db_"):
                continue
            for table_name in inspector.get_table_names(schema=schema_name):
                key = f"{schema_name}.{table_name}"
                columns = [
                    self._describe_column(col)
                    for col in inspector.get_columns(table_name, schema=schema_name)
                ]
                pk = inspector.get_pk_constraint(table_name, schema=schema_name) or {}
                foreign_keys = [
                    {
                        "name": fk.get("name"),
                        "column": ", ".join(fk.get("constrained_columns") or []),
                        "references": (
                            f"{fk.get('referred_schema') or schema_name}.{fk.get('referred_table')}"
                            f"({', '.join(fk.get('referred_columns') or [])})"
                        ),
                    }
                    for fk in inspector.get_foreign_keys(table_name, schema=schema_name)
                ]
                schema[key] = {
                    "columns": columns,
                    "primaryKey": list(pk.get("constrained_columns") or []),
                    "foreignKeys": foreign_keys,
                }

        logger.info(f"Scanned {len(schema)} tables from '{engine.url.database}'")
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "database": engine.url.database,
            "schema": schema,
        }

    @staticmethod
    def _describe_column(col: Dict[str, Any]) -> Dict[str, Any]:
        col_type = col["type"]
        return {
            "name": col["name"],
            "type": str(col_type).split("(")[0].strip().lower(),
            "nullable": bool(col.get("nullable", True)),
            "maxLength": getattr(col_type, "length", None),
            "precision": getattr(col_type, "precision", None),
            "scale": getattr(col_type, "scale", None),
        }

    def save(self, snapshot: Dict[str, Any], path: str) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(snapshot, fh, indent=2)
        logger.info(f"Schema snapshot saved to {path}")
        return path

    def load(self, path: str) -> SchemaMap:
        """
        Load a saved snapshot into a schema map.

        Raises:
            SourceNotFoundError: If the snapshot file does not exist
            SchemaSnapshotError: If the file is not a snapshot
        """
        if not os.path.exists(path):
            raise SourceNotFoundError(f"Missing schema snapshot at {path}. Run the schema scan first.")
        with open(path, "r", encoding="utf-8") as fh:
            try:
                parsed = json.load(fh)
            except json.JSONDecodeError as e:
                raise SchemaSnapshotError(f"Schema snapshot at {path} is not valid JSON: {str(e)}")
        return self.to_schema_map(parsed)

    @staticmethod
    def to_schema_map(snapshot: Dict[str, Any]) -> SchemaMap:
        tables = snapshot.get("schema") if isinstance(snapshot, dict) else None
        if not isinstance(tables, dict):
            raise SchemaSnapshotError("Schema snapshot has no 'schema' section")
        schema_map: SchemaMap = {}
        for table, info in tables.items():
            try:
                schema_map[table] = [
                    ColumnDefinition(name=c["name"], type=c.get("type"), nullable=c.get("nullable"))
                    for c in (info or {}).get("columns", [])
                ]
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise SchemaSnapshotError(f"Malformed columns for table '{table}' in schema snapshot: {str(e)}")
        return schema_map

    def render_report(self, snapshot: Dict[str, Any]) -> str:
        """Human-readable Markdown listing of a snapshot."""
        lines: List[str] = ["# Database Schema Report", f"Database: {snapshot.get('database') or '-'}", ""]
        for table, info in snapshot.get("schema", {}).items():
            lines.append(f"## {table}")
            lines.append("- Columns:")
            for col in info.get("columns", []):
                lines.append(f"  - {col['name']}: {col.get('type')}{' (nullable)' if col.get('nullable') else ''}"
                             f"{_attr('len', col.get('maxLength'))}"
                             f"{_attr('precision', col.get('precision'))}"
                             f"{_attr('scale', col.get('scale'))}")
            if info.get("primaryKey"):
                lines.append(f"- Primary Key: {', '.join(info['primaryKey'])}")
            if info.get("foreignKeys"):
                lines.append("- Foreign Keys:")
                for fk in info["foreignKeys"]:
                    lines.append(f"  - {fk.get('name')}: {fk.get('column')} → {fk.get('references')}")
            lines.append("")
        return "\n".join(lines)


def _attr(label: str, value: Optional[Any]) -> str:
    return f", {label}={value}" if value else ""


schema_snapshot_service = SchemaSnapshotService()
