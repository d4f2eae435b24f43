"""
python -m scripts.scan_schema

Scans the database pointed to by DATABASE_URL and writes the schema snapshot
(SCHEMA_SNAPSHOT_PATH) plus a Markdown listing next to it.
"""

import os
import sys

sys.path.insert(0, ".")

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.core.logging_config import logger
from app.database import engine
from app.services.schema_snapshot import schema_snapshot_service


def scan_schema():
    """Scan the live catalog and save the snapshot."""
    snapshot = schema_snapshot_service.scan(engine)
    json_path = schema_snapshot_service.save(snapshot, settings.SCHEMA_SNAPSHOT_PATH)

    md_path = os.path.join(os.path.dirname(json_path) or ".", "schema-report.md")
    with open(md_path, "w", encoding="utf-8") as fh:
        fh.write(schema_snapshot_service.render_report(snapshot))

    print(f"Schema saved to:\n- {json_path}\n- {md_path}")


if __name__ == "__main__":
    try:
        scan_schema()
    except Exception as e:
        logger.error(f"Schema scan failed: {str(e)}")
        sys.exit(1)
