import io
import os
import pandas as pd
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union
from app.core.exceptions import DeclarationSourceError, SourceNotFoundError
from app.core.logging_config import logger
from app.schemas.schema_mapping import Declaration


@dataclass
class HeaderKeys:
    """Which sheet headers carry the table, column and spreadsheet-name values"""
    table: Optional[str] = None
    column: Optional[str] = None
    excel_name: Optional[str] = None
    column_is_mapping: bool = False  # values look like "schema.table.column"


def _norm(header: str) -> str:
    return " ".join(str(header).split()).lower()


def _has_tokens(header: str, required: Sequence[str]) -> bool:
    tokens = _norm(header).split(" ")
    return all(r in tokens for r in required)


class DeclarationService:
    """Reads spreadsheet declarations of where each employee field lives in the database"""

    def resolve_headers(self, headers: List[str]) -> HeaderKeys:
        """
        Pick the table/column/name headers out of a sheet's header row.

        Supports both the "DB Information" layout (Excel Column / DB Column /
        Table Name) and the column-assignment layout (Column Name / Existing
        Table Name / Mapping to Existing DB Schema).
        """
        keys = HeaderKeys()

        def first(predicate) -> Optional[str]:
            for header in headers:
                if predicate(header):
                    return header
            return None

        keys.table = (
            first(lambda h: _norm(h) == "existing table name")
            or first(lambda h: _has_tokens(h, ["table", "name"]))
            or first(lambda h: _has_tokens(h, ["existing", "table"]))
        )

        mapping_header = (
            first(lambda h: _norm(h) == "mapping to existing db schema")
            or first(lambda h: _has_tokens(h, ["mapping", "schema"]))
        )
        db_column_header = first(
            lambda h: _has_tokens(h, ["db", "column"]) and "mapping" not in _norm(h)
        )
        if db_column_header:
            keys.column = db_column_header
        elif mapping_header:
            keys.column = mapping_header
            keys.column_is_mapping = True

        keys.excel_name = (
            first(lambda h: _has_tokens(h, ["excel", "column"]))
            or first(lambda h: _norm(h) == "column name")
        )
        return keys

    def parse_frame(self, df: pd.DataFrame) -> List[Declaration]:
        """
        Turn a sheet into declarations, one per row.

        Raises:
            DeclarationSourceError: If neither a table nor a column header exists
        """
        if df.empty:
            return []

        headers = [str(c) for c in df.columns]
        df = df.copy()
        df.columns = headers
        keys = self.resolve_headers(headers)
        if not keys.table and not keys.column:
            logger.error(f"Declaration sheet headers: {headers}")
            raise DeclarationSourceError(
                "Missing required headers: a table name column or a DB column/mapping column"
            )

        logger.info(
            f"Declaration headers resolved: table='{keys.table}', column='{keys.column}', "
            f"excel_name='{keys.excel_name}'"
        )

        declarations: List[Declaration] = []
        for _, row in df.iterrows():
            table_raw = self._cell(row, keys.table)
            column_raw = self._cell(row, keys.column)
            if keys.column_is_mapping and column_raw:
                parts = [p.strip() for p in column_raw.split(".") if p.strip()]
                column_raw = parts[-1] if parts else ""

            declarations.append(Declaration(
                table_field=table_raw or None,
                column=column_raw or None,
                excel_name=self._cell(row, keys.excel_name) or None,
                used_table_header=keys.table if table_raw else None,
                used_column_header=keys.column if column_raw else None,
            ))
        return declarations

    @staticmethod
    def _cell(row: pd.Series, header: Optional[str]) -> str:
        if not header:
            return ""
        value = row[header]
        if pd.isna(value):
            return ""
        return str(value).strip()

    def read_workbook(
        self,
        source: Union[str, bytes],
        filename: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> pd.DataFrame:
        """
        Read a CSV or Excel declaration source into a DataFrame of strings.

        Args:
            source: File path, or raw file content when uploaded
            filename: Name used to pick the parser for raw content
            sheet_name: Excel sheet, first sheet when None

        Raises:
            SourceNotFoundError: If a path does not exist
            DeclarationSourceError: If the content cannot be parsed
        """
        if isinstance(source, str):
            if not os.path.exists(source):
                raise SourceNotFoundError(f"Declaration workbook not found at {source}")
            filename = filename or source
            with open(source, "rb") as fh:
                content = fh.read()
        else:
            content = source

        name = (filename or "").lower()
        try:
            if name.endswith(".csv"):
                df = pd.read_csv(io.BytesIO(content), dtype=str)
            elif name.endswith((".xlsx", ".xls")):
                df = pd.read_excel(io.BytesIO(content), sheet_name=sheet_name or 0, dtype=str)
            else:
                raise DeclarationSourceError(f"Unsupported file format: {filename}")
        except DeclarationSourceError:
            raise
        except Exception as e:
            logger.error(f"Error parsing declaration source '{filename}': {str(e)}")
            raise DeclarationSourceError(f"Failed to parse file: {str(e)}")

        logger.info(f"Parsed declaration source '{filename}': {len(df)} rows, {len(df.columns)} columns")
        return df

    def load(self, path: str, sheet_name: Optional[str] = None) -> List[Declaration]:
        return self.parse_frame(self.read_workbook(path, sheet_name=sheet_name))


declaration_service = DeclarationService()
