import json
import os
from typing import Dict, List, Optional, Tuple
from app.core.exceptions import SourceNotFoundError
from app.core.logging_config import logger
from app.schemas.schema_mapping import MappingRecord, MappingReport


TOP_UNMATCHED = 20


def _declared_label(record: MappingRecord) -> str:
    d = record.declared
    label = f"{d.schema_name}.{d.table or '-'}"
    return f"{label}.{d.column}" if d.column else label


def _headers_label(record: MappingRecord) -> str:
    d = record.declared
    return f"used headers: table={d.used_table_header or '-'}, column={d.used_column_header or '-'}"


def status_summary(report: MappingReport) -> Dict[str, int]:
    """Count of records per status, in order of first appearance."""
    summary: Dict[str, int] = {}
    for record in report.mapping:
        summary[record.status.value] = summary.get(record.status.value, 0) + 1
    return summary


def render_markdown(report: MappingReport, title: str = "Declarations → DB Schema Mapping Report") -> str:
    lines: List[str] = [f"# {title}", ""]

    lines.append("## Summary")
    lines.append(f"- total_rows_parsed: {report.total_rows or len(report.mapping)}")
    for status, count in status_summary(report).items():
        lines.append(f"- {status}: {count}")
    lines.append("")

    lines.append("## Per-Table Coverage")
    for table, cov in sorted(report.table_coverage.items()):
        lines.append(
            f"- {table}: total={cov.total}, matched={cov.column_matched}, "
            f"missing={cov.column_missing}, table_only={cov.table_only}"
        )
    lines.append("")

    lines.append(f"## Top {TOP_UNMATCHED} Unmatched with Suggestions")
    for record in report.unmatched[:TOP_UNMATCHED]:
        s = record.suggestion
        suggestion = f"{s.type} → {s.value} (score={s.score})" if s else "-"
        lines.append(
            f"- [{record.status.value}] Declared: {_declared_label(record)} | "
            f"{_headers_label(record)} | suggestion: {suggestion}"
        )
    lines.append("")

    lines.append("## Details")
    for record in report.mapping:
        m = record.matched
        matched = f"{m.table or '-'}{'.' + m.column if m.column else ''}"
        lines.append(
            f"- [{record.status.value}] Declared: {_declared_label(record)} → Matched: {matched} | "
            f"{_headers_label(record)}"
        )
    return "\n".join(lines)


class MappingReportService:
    """Persists reconciliation results as JSON plus a Markdown report"""

    def save(self, report: MappingReport, output_dir: str, name: str, title: Optional[str] = None) -> Tuple[str, str]:
        """
        Write `<name>-mapping.json` and `<name>-mapping.md` into output_dir.

        Returns:
            (json_path, markdown_path)
        """
        os.makedirs(output_dir, exist_ok=True)
        json_path = os.path.join(output_dir, f"{name}-mapping.json")
        md_path = os.path.join(output_dir, f"{name}-mapping.md")

        with open(json_path, "w", encoding="utf-8") as fh:
            fh.write(report.model_dump_json(indent=2))
        with open(md_path, "w", encoding="utf-8") as fh:
            fh.write(render_markdown(report, title) if title else render_markdown(report))

        logger.info(f"Schema mapping saved to: {json_path}, {md_path}")
        return json_path, md_path

    def load(self, output_dir: str, name: str) -> MappingReport:
        """
        Read back a saved report.

        Raises:
            SourceNotFoundError: If no report was saved under that name
        """
        json_path = os.path.join(output_dir, f"{name}-mapping.json")
        if not os.path.exists(json_path):
            raise SourceNotFoundError(f"No saved mapping at {json_path}")
        with open(json_path, "r", encoding="utf-8") as fh:
            return MappingReport.model_validate(json.load(fh))


mapping_report_service = MappingReportService()
