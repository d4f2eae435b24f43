import json
import pytest
from app.core.config import settings
from scripts import map_schema


DECLARATIONS = "Excel Column,DB Column,Table Name\nID,emp_id,employees\n"


@pytest.fixture
def paths(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "SCHEMA_SNAPSHOT_PATH", str(tmp_path / "schema.json"))
    monkeypatch.setattr(settings, "MAPPING_OUTPUT_DIR", str(tmp_path / "out"))
    workbook = tmp_path / "decl.csv"
    workbook.write_text(DECLARATIONS, encoding="utf-8")
    return tmp_path, str(workbook)


class TestMapSchemaCommand:

    def test_writes_report(self, paths):
        tmp_path, workbook = paths
        (tmp_path / "schema.json").write_text(json.dumps({"schema": {"dbo.employees": {"columns": [
            {"name": "emp_id", "type": "int", "nullable": False},
        ]}}}), encoding="utf-8")

        map_schema.main([workbook])
        assert (tmp_path / "out" / "dbinfo-mapping.json").exists()
        assert (tmp_path / "out" / "dbinfo-mapping.md").exists()

    @pytest.mark.parametrize("content", ['{"tables": {}}', "{broken", '{"schema": {"dbo.t": {"columns": [{}]}}}'])
    def test_unusable_snapshot_exits_with_status_1(self, paths, content):
        tmp_path, workbook = paths
        (tmp_path / "schema.json").write_text(content, encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            map_schema.main([workbook])
        assert exc.value.code == 1
        assert not (tmp_path / "out").exists()

    def test_missing_snapshot_exits_with_status_1(self, paths):
        _, workbook = paths
        with pytest.raises(SystemExit) as exc:
            map_schema.main([workbook])
        assert exc.value.code == 1

    def test_missing_workbook_exits_with_status_1(self, paths):
        tmp_path, _ = paths
        (tmp_path / "schema.json").write_text('{"schema": {}}', encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            map_schema.main([str(tmp_path / "nope.xlsx")])
        assert exc.value.code == 1
