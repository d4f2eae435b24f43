import json
import pytest
from app.core.config import settings


class TestAuthentication:

    def test_missing_token(self, client):
        response = client.get("/api/rbac/capabilities")
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/rbac/capabilities", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_non_bearer_scheme(self, client):
        response = client.get("/api/rbac/permissions", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401


class TestCapabilitiesEndpoint:

    def test_superadmin_role_is_normalized(self, client, auth_header):
        client.post(
            "/api/rbac/permissions",
            json={"role": "superadmin", "module": "employees", "action": "delete", "allowed": True},
            headers=auth_header("superadmin"),
        )
        response = client.get("/api/rbac/capabilities", headers=auth_header("Super Admin"))
        assert response.status_code == 200
        body = response.json()
        assert body["roles"] == ["superadmin"]
        assert body["can_delete_employees"] is True
        assert body["can_read_employees"] is False
        assert "bank" in body["write_sections"]

    def test_column_grants_listed(self, client, auth_header):
        client.post(
            "/api/rbac/columns",
            json={"role": "employee", "section": "contact", "column": "phone", "write": True},
            headers=auth_header("admin"),
        )
        body = client.get("/api/rbac/capabilities", headers=auth_header("Employee")).json()
        assert body["read_sections"] == ["core"]
        assert body["column_read"] == {"contact": ["phone"]}
        assert body["column_write"] == {"contact": ["phone"]}

    def test_single_role_claim(self, client, auth_header):
        from jose import jwt
        token = jwt.encode({"sub": "x", "role": "Finance"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        body = client.get("/api/rbac/capabilities", headers={"Authorization": f"Bearer {token}"}).json()
        assert body["roles"] == ["finance"]


class TestGrantEndpoints:

    def test_non_admin_cannot_save(self, client, auth_header):
        response = client.post(
            "/api/rbac/permissions",
            json={"role": "hr_general", "module": "employees", "action": "update", "allowed": True},
            headers=auth_header("HR"),
        )
        assert response.status_code == 403

    def test_permission_upsert(self, client, auth_header):
        headers = auth_header("admin")
        grant = {"role": "finance", "module": "reports", "action": "read", "allowed": True}
        assert client.post("/api/rbac/permissions", json=grant, headers=headers).status_code == 200
        response = client.post("/api/rbac/permissions", json={**grant, "allowed": False}, headers=headers)
        assert response.json()["allowed"] is False

        listed = client.get("/api/rbac/permissions", headers=headers).json()
        assert listed == [{"role": "finance", "module": "reports", "action": "read", "allowed": False}]

    def test_blank_fields_rejected(self, client, auth_header):
        response = client.post(
            "/api/rbac/columns",
            json={"role": " ", "section": "core", "column": "name", "read": True},
            headers=auth_header("superadmin"),
        )
        assert response.status_code == 400

    def test_type_columns_and_index(self, client, auth_header):
        headers = auth_header("admin")
        response = client.post(
            "/api/rbac/type-columns",
            json={"type": "expat", "section": "Employee Core", "column": "kitas_no", "accessible": True},
            headers=headers,
        )
        assert response.status_code == 200

        listed = client.get("/api/rbac/type-columns", headers=headers).json()
        assert listed == [{"type": "expat", "section": "Employee Core", "column": "kitas_no", "accessible": True}]

        index = client.get("/api/rbac/type-access", headers=auth_header("employee")).json()
        assert index["expat"]["Core"]["kitas_no"] is True
        assert index["indonesia"] == {}

    def test_unknown_employee_type_rejected(self, client, auth_header):
        response = client.post(
            "/api/rbac/type-columns",
            json={"type": "contractor", "section": "Core", "column": "x"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 422


class TestMappingEndpoints:

    @pytest.fixture
    def mapping_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "MAPPING_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setattr(settings, "SCHEMA_SNAPSHOT_PATH", str(tmp_path / "schema.json"))
        return tmp_path

    @pytest.fixture
    def snapshot(self, mapping_dir):
        (mapping_dir / "schema.json").write_text(json.dumps({
            "database": "hr",
            "schema": {"dbo.employees": {"columns": [
                {"name": "emp_id", "type": "int", "nullable": False},
                {"name": "full_name", "type": "nvarchar", "nullable": True},
            ]}},
        }), encoding="utf-8")

    def test_dbinfo_not_found(self, client, auth_header, mapping_dir):
        response = client.get("/api/mapping/dbinfo", headers=auth_header("admin"))
        assert response.status_code == 404

    def test_reconcile_upload(self, client, auth_header, snapshot):
        content = b"Excel Column,DB Column,Table Name\nID,emp_id,employees\nName,fullname,employees\n"
        response = client.post(
            "/api/mapping/reconcile",
            files={"file": ("decl.csv", content, "text/csv")},
            headers=auth_header("admin"),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["total_rows"] == 2
        assert [r["status"] for r in body["mapping"]] == ["column_matched", "column_missing"]
        assert body["unmatched"][0]["suggestion"] == {"type": "column", "value": "full_name", "score": 0.89}
        assert body["table_coverage"]["dbo.employees"]["total"] == 2

    def test_reconcile_without_snapshot(self, client, auth_header, mapping_dir):
        response = client.post(
            "/api/mapping/reconcile",
            files={"file": ("decl.csv", b"DB Column,Table Name\nemp_id,employees\n", "text/csv")},
            headers=auth_header("admin"),
        )
        assert response.status_code == 404

    def test_reconcile_with_unusable_snapshot(self, client, auth_header, mapping_dir):
        (mapping_dir / "schema.json").write_text('{"tables": {}}', encoding="utf-8")
        response = client.post(
            "/api/mapping/reconcile",
            files={"file": ("decl.csv", b"DB Column,Table Name\nemp_id,employees\n", "text/csv")},
            headers=auth_header("admin"),
        )
        assert response.status_code == 500
        assert "rerun the schema scan" in response.json()["detail"]

    def test_reconcile_bad_headers(self, client, auth_header, snapshot):
        response = client.post(
            "/api/mapping/reconcile",
            files={"file": ("decl.csv", b"Foo,Bar\n1,2\n", "text/csv")},
            headers=auth_header("admin"),
        )
        assert response.status_code == 400

    def test_saved_dbinfo_report(self, client, auth_header, mapping_dir, snapshot, schema_map):
        from app.schemas.schema_mapping import Declaration
        from app.services.mapping_report import mapping_report_service
        from app.services.schema_mapping import reconcile

        report = reconcile([Declaration(table_field="employees", column="emp_id")], schema_map)
        mapping_report_service.save(report, str(mapping_dir), "dbinfo")
        response = client.get("/api/mapping/dbinfo", headers=auth_header("hr"))
        assert response.status_code == 200
        assert response.json()["mapping"][0]["status"] == "column_matched"


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "database": "connected"}


class TestCors:

    def test_cors_preflight_for_admin_ui(self, client):
        response = client.options(
            "/api/rbac/capabilities",
            headers={
                "Origin": settings.CORS_ORIGINS[0],
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == settings.CORS_ORIGINS[0]
