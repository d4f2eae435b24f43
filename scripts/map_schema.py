"""
python -m scripts.map_schema [workbook] [sheet]

Reconciles the declaration workbook (default DECLARATION_WORKBOOK_PATH)
against the saved schema snapshot and writes dbinfo-mapping.json / .md into
MAPPING_OUTPUT_DIR.
"""

import sys

sys.path.insert(0, ".")

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.core.exceptions import DeclarationSourceError, SchemaSnapshotError, SourceNotFoundError
from app.core.logging_config import logger
from app.services.mapping import mapping_service
from app.services.mapping_report import mapping_report_service, status_summary


def map_schema(workbook_path=None, sheet_name=None):
    """Run one reconciliation and save the report."""
    report = mapping_service.run(workbook_path=workbook_path, sheet_name=sheet_name)
    json_path, md_path = mapping_report_service.save(
        report,
        settings.MAPPING_OUTPUT_DIR,
        "dbinfo",
        title="DB Information → Scanned Schema Mapping Report",
    )

    for status, count in status_summary(report).items():
        print(f"{status}: {count}")
    print(f"DB Information mapping saved to:\n- {json_path}\n- {md_path}")
    return report


def main(argv=None):
    """Command-line entry: [workbook] [sheet]. Exits 1 when an input cannot be used."""
    args = sys.argv[1:] if argv is None else argv
    try:
        map_schema(
            workbook_path=args[0] if len(args) > 0 else None,
            sheet_name=args[1] if len(args) > 1 else None,
        )
    except (SourceNotFoundError, DeclarationSourceError, SchemaSnapshotError) as e:
        logger.error(f"Schema mapping aborted: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
