"""
Tests for the devotee register and its spreadsheet import.
"""

import io

import pandas as pd


def _devotee(client, headers, **overrides):
    payload = {"first_name": "Arjun", "last_name": "Sharma", "mobile_number": "9123456780", "gotra": "Kashyap"}
    payload.update(overrides)
    return client.post("/devotees/", json=payload, headers=headers)


class TestDevotees:

    def test_create_assigns_code(self, client, admin_headers):
        first = _devotee(client, admin_headers).json()
        second = _devotee(client, admin_headers, first_name="Bhavna", mobile_number="9123456781").json()
        assert first["devotee_code"].startswith("DEV-")
        assert first["devotee_code"].endswith("-0001")
        assert second["devotee_code"].endswith("-0002")
        assert first["full_name"] == "Arjun Sharma"

    def test_search(self, client, admin_headers):
        _devotee(client, admin_headers)
        _devotee(client, admin_headers, first_name="Bhavna", last_name="Iyer", mobile_number="9000000000")
        results = client.get("/devotees/", params={"search": "iye"}, headers=admin_headers).json()
        assert [d["first_name"] for d in results] == ["Bhavna"]

    def test_invalid_gender(self, client, admin_headers):
        assert _devotee(client, admin_headers, gender="Unknown").status_code == 422

    def test_other_tenant_cannot_see(self, client, admin_headers):
        from tests.conftest import make_token, OTHER_TENANT_ID
        devotee = _devotee(client, admin_headers).json()
        other = {"Authorization": f"Bearer {make_token(tenant_id=OTHER_TENANT_ID)}", "X-Tenant-ID": OTHER_TENANT_ID}
        assert client.get(f"/devotees/{devotee['id']}", headers=other).status_code == 404

    def test_soft_delete(self, client, admin_headers):
        devotee = _devotee(client, admin_headers).json()
        assert client.delete(f"/devotees/{devotee['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/devotees/{devotee['id']}", headers=admin_headers).status_code == 404
        assert client.get("/devotees/", headers=admin_headers).json() == []


class TestDevoteeImport:

    def _workbook(self, rows):
        buffer = io.BytesIO()
        pd.DataFrame(rows).to_excel(buffer, index=False)
        return buffer.getvalue()

    def test_import_skips_invalid_rows(self, client, admin_headers):
        contents = self._workbook([
            {"First Name": "Kavya", "Mobile": "9988776655", "City": "Madurai"},
            {"First Name": "R", "Mobile": "9988776656", "City": "Salem"},
        ])
        response = client.post("/devotees/import", files={
            "file": ("devotees.xlsx", contents, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        }, headers=admin_headers)
        assert response.status_code == 200, response.text
        result = response.json()
        assert result["imported"] == 1
        assert result["skipped"] == 1
        assert result["results"][1]["row"] == 3
        assert result["results"][1]["status"] == "Skipped"

    def test_import_needs_first_name_column(self, client, admin_headers):
        contents = self._workbook([{"Name": "Kavya"}])
        response = client.post("/devotees/import", files={"file": ("d.xlsx", contents)}, headers=admin_headers)
        assert response.status_code == 400

    def test_import_rejects_csv(self, client, admin_headers):
        response = client.post("/devotees/import", files={"file": ("d.csv", b"a,b")}, headers=admin_headers)
        assert response.status_code == 400
