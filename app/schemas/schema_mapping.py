from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class MappingStatus(str, Enum):
    column_matched = "column_matched"
    column_missing = "column_missing"
    table_only = "table_only"
    table_missing = "table_missing"


class ColumnDefinition(BaseModel):
    """A column as found by the schema scan"""
    name: str
    type: Optional[str] = None
    nullable: Optional[bool] = None


class Declaration(BaseModel):
    """One spreadsheet row declaring where a field lives in the database"""
    table_field: Optional[str] = None  # may list several tables separated by ';' or ','
    column: Optional[str] = None
    excel_name: Optional[str] = None
    used_table_header: Optional[str] = None
    used_column_header: Optional[str] = None


class DeclaredRef(BaseModel):
    """Declared (schema, table, column) after splitting the table field"""
    table: Optional[str] = None
    schema_name: str = "dbo"
    column: Optional[str] = None
    excel_name: Optional[str] = None
    used_table_header: Optional[str] = None
    used_column_header: Optional[str] = None


class MatchedRef(BaseModel):
    """Schema location the declaration resolved to"""
    table: Optional[str] = None
    column: Optional[str] = None
    type: Optional[str] = None


class Suggestion(BaseModel):
    type: str  # "table" or "column"
    value: str
    score: float


class MappingRecord(BaseModel):
    declared: DeclaredRef
    matched: MatchedRef
    status: MappingStatus
    suggestion: Optional[Suggestion] = None
    suggestions: Optional[List[Suggestion]] = None


class TableCoverage(BaseModel):
    total: int = 0
    column_matched: int = 0
    column_missing: int = 0
    table_only: int = 0


class MappingReport(BaseModel):
    """Result of one reconciliation run"""
    mapping: List[MappingRecord] = Field(default_factory=list)
    table_coverage: Dict[str, TableCoverage] = Field(default_factory=dict)
    total_rows: int = 0
    unmatched: List[MappingRecord] = Field(default_factory=list)
