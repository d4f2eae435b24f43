import re
from typing import Dict, Iterable, List, Optional, Tuple
from app.schemas.schema_mapping import (
    ColumnDefinition,
    Declaration,
    DeclaredRef,
    MappingRecord,
    MappingReport,
    MappingStatus,
    MatchedRef,
    Suggestion,
    TableCoverage,
)
from app.utils.text_similarity import normalize_name, similarity
from app.core.logging_config import logger


DEFAULT_SCHEMA = "dbo"
SUGGESTION_THRESHOLD = 0.6
SUGGESTION_LIMIT = 3

SchemaMap = Dict[str, List[ColumnDefinition]]

_TABLE_LIST_SEPARATORS = re.compile(r"[;,]+")


def qualify_table_name(table: str, schema: Optional[str] = None, default_schema: str = DEFAULT_SCHEMA) -> str:
    """
    Qualify a table name with its schema.

    Bare names get the default schema unless they already contain a dot.
    """
    t = table.strip()
    if not schema or not schema.strip():
        return t if "." in t else f"{default_schema}.{t}"
    return f"{schema.strip()}.{t}"


def parse_table_list(table_field: Optional[str]) -> List[Tuple[Optional[str], str]]:
    """
    Split a declared table field into (schema, table) pairs.

    Entries are separated by ';' or ','. "x.y" reads as schema x, table y;
    with three or more segments the first two are schema and table.
    """
    entries: List[Tuple[Optional[str], str]] = []
    for part in _TABLE_LIST_SEPARATORS.split(table_field or ""):
        part = part.strip()
        if not part:
            continue
        segments = [s.strip() for s in part.split(".")]
        if len(segments) >= 2:
            entries.append((segments[0] or None, segments[1]))
        else:
            entries.append((None, segments[0]))
    return entries


class SchemaReconciler:
    """
    Matches spreadsheet declarations against a scanned schema.

    Every declared table x column pair gets exactly one status; mismatches are
    recorded with ranked suggestions rather than raised.
    """

    def __init__(
        self,
        schema: SchemaMap,
        default_schema: str = DEFAULT_SCHEMA,
        threshold: float = SUGGESTION_THRESHOLD,
        limit: int = SUGGESTION_LIMIT,
    ):
        self.schema = schema
        self.default_schema = default_schema
        self.threshold = threshold
        self.limit = limit

        self._table_keys: Dict[str, str] = {}
        for key in schema.keys():
            self._table_keys.setdefault(normalize_name(key), key)

        # (table, column) across all tables, for suggestions when no table was declared
        self._all_columns: List[Tuple[str, str]] = [
            (table, column.name) for table, columns in schema.items() for column in columns
        ]

    def resolve_table(self, qualified: str) -> Optional[str]:
        """Schema key matching a qualified table name, if any."""
        return self._table_keys.get(normalize_name(qualified))

    def find_column(self, table_key: str, column: str) -> Optional[ColumnDefinition]:
        target = normalize_name(column)
        for definition in self.schema[table_key]:
            if normalize_name(definition.name) == target:
                return definition
        return None

    def rank(self, target: str, candidates: Iterable[Tuple[str, str]], kind: str) -> List[Suggestion]:
        """
        Top suggestions for a name.

        Candidates are (value, compare_name) pairs; only scores at or above the
        threshold are kept, best first.
        """
        scored = [(value, similarity(target, name)) for value, name in candidates]
        scored.sort(key=lambda x: x[1], reverse=True)
        return [
            Suggestion(type=kind, value=value, score=round(score, 2))
            for value, score in scored[:self.limit]
            if score >= self.threshold
        ]

    def reconcile(self, declarations: Iterable[Declaration]) -> MappingReport:
        report = MappingReport()
        for declaration in declarations:
            report.total_rows += 1
            tables = parse_table_list(declaration.table_field)
            if not tables:
                self._add(report, self._classify_without_table(declaration), coverage_key=None)
                continue
            for schema_name, table in tables:
                record, coverage_key = self._classify(declaration, schema_name, table)
                self._add(report, record, coverage_key)

        logger.info(
            f"Reconciled {report.total_rows} declarations into {len(report.mapping)} records, "
            f"{len(report.unmatched)} unmatched"
        )
        return report

    def _classify_without_table(self, declaration: Declaration) -> MappingRecord:
        column = _clean(declaration.column)
        suggestions: List[Suggestion] = []
        if column:
            suggestions = self.rank(
                column,
                ((f"{table}.{name}", name) for table, name in self._all_columns),
                kind="column",
            )
        return MappingRecord(
            declared=self._declared(declaration, table=None, schema_name=None, column=column),
            matched=MatchedRef(),
            status=MappingStatus.table_missing,
            suggestion=suggestions[0] if suggestions else None,
            suggestions=suggestions or None,
        )

    def _classify(
        self, declaration: Declaration, schema_name: Optional[str], table: str
    ) -> Tuple[MappingRecord, str]:
        column = _clean(declaration.column)
        qualified = qualify_table_name(table, schema_name, self.default_schema)
        table_key = self.resolve_table(qualified)
        declared = self._declared(declaration, table=table, schema_name=schema_name, column=column)

        if table_key is None:
            suggestions = self.rank(qualified, ((key, key) for key in self.schema.keys()), kind="table")
            record = MappingRecord(
                declared=declared,
                matched=MatchedRef(),
                status=MappingStatus.table_missing,
                suggestion=suggestions[0] if suggestions else None,
                suggestions=suggestions or None,
            )
            return record, qualified

        if not column:
            record = MappingRecord(
                declared=declared,
                matched=MatchedRef(table=table_key),
                status=MappingStatus.table_only,
            )
            return record, table_key

        definition = self.find_column(table_key, column)
        if definition is not None:
            record = MappingRecord(
                declared=declared,
                matched=MatchedRef(table=table_key, column=column, type=definition.type),
                status=MappingStatus.column_matched,
            )
            return record, table_key

        suggestions = self.rank(
            column, ((c.name, c.name) for c in self.schema[table_key]), kind="column"
        )
        record = MappingRecord(
            declared=declared,
            matched=MatchedRef(table=table_key),
            status=MappingStatus.column_missing,
            suggestion=suggestions[0] if suggestions else None,
            suggestions=suggestions or None,
        )
        return record, table_key

    def _declared(
        self,
        declaration: Declaration,
        table: Optional[str],
        schema_name: Optional[str],
        column: Optional[str],
    ) -> DeclaredRef:
        return DeclaredRef(
            table=table,
            schema_name=schema_name or self.default_schema,
            column=column,
            excel_name=declaration.excel_name,
            used_table_header=declaration.used_table_header,
            used_column_header=declaration.used_column_header,
        )

    @staticmethod
    def _add(report: MappingReport, record: MappingRecord, coverage_key: Optional[str]) -> None:
        report.mapping.append(record)
        if record.status != MappingStatus.column_matched:
            report.unmatched.append(record)
        if coverage_key is None:
            return
        coverage = report.table_coverage.setdefault(coverage_key, TableCoverage())
        coverage.total += 1
        if record.status == MappingStatus.column_matched:
            coverage.column_matched += 1
        elif record.status == MappingStatus.column_missing:
            coverage.column_missing += 1
        elif record.status == MappingStatus.table_only:
            coverage.table_only += 1


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def reconcile(
    declarations: Iterable[Declaration],
    schema: SchemaMap,
    default_schema: str = DEFAULT_SCHEMA,
    threshold: float = SUGGESTION_THRESHOLD,
    limit: int = SUGGESTION_LIMIT,
) -> MappingReport:
    """Classify every declaration against the scanned schema."""
    reconciler = SchemaReconciler(schema, default_schema=default_schema, threshold=threshold, limit=limit)
    return reconciler.reconcile(declarations)
