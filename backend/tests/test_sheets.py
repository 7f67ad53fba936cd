"""
Tests for the Google Sheets import: cell parsing, sheet transformation,
the Sheets API client and the saved-sheet endpoints.
"""

import httpx
import pytest

from crud import sheets as crud_sheets
from utils.sheet_transformer import parse_number, transform_sheet_data
from utils.sheets_client import SheetsClient, SheetsAPIError


class TestParseNumber:

    @pytest.mark.parametrize("raw,expected", [
        ("₹ 1,200.50", 1200.5),
        ("Rs.1,500", 1500.0),
        ("(500)", -500.0),
        ("12%", 12.0),
        (42, 42.0),
        ("-3.5", -3.5),
    ])
    def test_numbers(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "April", "12-03-2024"])
    def test_not_numbers(self, raw):
        assert parse_number(raw) is None


class TestTransformSheetData:

    def test_financial_sheet(self):
        rows = [
            ["Category", "Apr", "May", "Total"],
            ["Donations", "₹ 1,000", "2,000", "3,000"],
            ["Pujas", "500", "", "500"],
        ]
        result = transform_sheet_data(rows)
        assert result["type"] == "financial"
        assert result["timePoints"] == ["Apr", "May"]
        assert result["rows"][0] == {"category": "Donations", "Apr": 1000.0, "May": 2000.0, "total": 3000.0}
        assert result["rows"][1]["May"] == 0.0

    def test_total_is_summed_without_total_column(self):
        result = transform_sheet_data([["Head", "Q1", "Q2"], ["Annadanam", "10", "15"]])
        assert result["rows"][0]["total"] == 25.0

    def test_text_cells_make_sheet_tabular(self):
        result = transform_sheet_data([["Name", "City"], ["Meera", "Chennai"], ["", ""]])
        assert result["type"] == "tabular"
        assert result["rows"] == [{"Name": "Meera", "City": "Chennai"}]

    def test_empty_sheet(self):
        with pytest.raises(ValueError):
            transform_sheet_data([])

    def test_blank_header(self):
        with pytest.raises(ValueError):
            transform_sheet_data([["", ""], ["1", "2"]])


class TestSheetsClient:

    def _client(self, handler):
        return SheetsClient("token-123", transport=httpx.MockTransport(handler))

    def test_tabs_and_values(self):
        def handler(request):
            assert request.headers["Authorization"] == "Bearer token-123"
            if request.url.path.endswith("/values:batchGet"):
                assert request.url.params.get_list("ranges") == ["Income", "Expenses"]
                return httpx.Response(200, json={"valueRanges": [{"values": [["a"]]}, {}]})
            return httpx.Response(200, json={"sheets": [
                {"properties": {"title": "Income"}}, {"properties": {"title": "Expenses"}},
            ]})

        with self._client(handler) as client:
            tabs = client.get_tab_titles("sheet-1")
            values = client.batch_get_values("sheet-1", tabs)
        assert tabs == ["Income", "Expenses"]
        assert values == {"Income": [["a"]], "Expenses": []}

    def test_http_error_carries_status(self):
        with self._client(lambda request: httpx.Response(403, json={})) as client:
            with pytest.raises(SheetsAPIError) as excinfo:
                client.get_tab_titles("sheet-1")
        assert excinfo.value.status_code == 403

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        with self._client(handler) as client:
            with pytest.raises(SheetsAPIError) as excinfo:
                client.get_tab_titles("sheet-1")
        assert excinfo.value.status_code is None

    def test_timeout_is_flagged(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with self._client(handler) as client:
            with pytest.raises(SheetsAPIError) as excinfo:
                client.get_tab_titles("sheet-1")
        assert excinfo.value.timed_out is True
        assert excinfo.value.status_code is None


class TestFetchBulkData:

    def test_unusable_tabs_are_left_out(self, monkeypatch):
        def handler(request):
            if request.url.path.endswith("/values:batchGet"):
                return httpx.Response(200, json={"valueRanges": [
                    {"values": [["Head", "Q1"], ["Annadanam", "10"]]},
                    {},
                    {"values": [["", ""], ["1", "2"]]},
                ]})
            return httpx.Response(200, json={"sheets": [
                {"properties": {"title": "Income"}}, {"properties": {"title": "Empty"}}, {"properties": {"title": "Notes"}},
            ]})

        monkeypatch.setattr(crud_sheets, "SheetsClient",
                            lambda token: SheetsClient(token, transport=httpx.MockTransport(handler)))
        data = crud_sheets.fetch_bulk_data("token-123", "sheet-1")
        assert list(data) == ["Income"]
        assert data["Income"]["rows"][0]["total"] == 10.0

    def test_spreadsheet_without_tabs(self, monkeypatch):
        handler = lambda request: httpx.Response(200, json={"sheets": []})
        monkeypatch.setattr(crud_sheets, "SheetsClient",
                            lambda token: SheetsClient(token, transport=httpx.MockTransport(handler)))
        assert crud_sheets.fetch_bulk_data("token-123", "sheet-1") is None


BULK = {"Income": {"type": "tabular", "headers": ["Name"], "rows": [{"Name": "x"}]}}


@pytest.fixture
def connected(client, user_headers):
    response = client.put("/api/google-token", json={"provider_token": "ya29.token"}, headers=user_headers)
    assert response.status_code == 204


class TestSheetEndpoints:

    def test_requires_spreadsheet_id(self, client, user_headers):
        assert client.get("/api/sheets/data-bulk", headers=user_headers).status_code == 400

    def test_requires_google_token(self, client, user_headers):
        response = client.get("/api/sheets/data-bulk", params={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.status_code == 401

    def test_bulk_data(self, client, user_headers, connected, monkeypatch):
        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", lambda token, sid: BULK)
        response = client.get("/api/sheets/data-bulk", params={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.json() == {"success": True, "data": BULK}

    def test_no_tabs(self, client, user_headers, connected, monkeypatch):
        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", lambda token, sid: None)
        response = client.get("/api/sheets/data-bulk", params={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize("upstream,expected", [(401, 401), (403, 403), (404, 404), (500, 502), (None, 502)])
    def test_upstream_errors(self, client, user_headers, connected, monkeypatch, upstream, expected):
        def failing(token, sid):
            raise SheetsAPIError("failed", upstream)

        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", failing)
        response = client.get("/api/sheets/data-bulk", params={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.status_code == expected

    def test_timeout_is_gateway_timeout(self, client, user_headers, connected, monkeypatch):
        def slow(token, sid):
            raise SheetsAPIError("Google Sheets did not respond: slow", timed_out=True)

        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", slow)
        response = client.get("/api/sheets/data-bulk", params={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.status_code == 504

    def test_save_bulk_requires_fields(self, client, user_headers, connected):
        response = client.post("/api/sheets/save-bulk", json={"spreadsheetId": "abc"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

    def test_save_bulk_with_no_usable_tabs(self, client, user_headers, connected, monkeypatch):
        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", lambda token, sid: {})
        response = client.post("/api/sheets/save-bulk", json={"spreadsheetId": "abc", "sheetName": "FY"},
                               headers=user_headers)
        assert response.status_code == 400

    def test_save_list_and_delete(self, client, user_headers, admin_headers, connected, monkeypatch):
        monkeypatch.setattr(crud_sheets, "fetch_bulk_data", lambda token, sid: BULK)
        saved = client.post("/api/sheets/save-bulk", json={"spreadsheetId": "abc", "sheetName": "FY 2024-25"},
                            headers=user_headers).json()["savedSheet"]
        assert saved["tab_name"] == "ALL_TABS"
        assert saved["metadata"]["tabCount"] == 1
        assert saved["metadata"]["isBulkSave"] is True

        listing = client.get("/saved-sheets", headers=user_headers).json()
        assert [s["sheet_name"] for s in listing] == ["FY 2024-25"]
        # saved sheets are private to the user who saved them
        assert client.get(f"/saved-sheets/{saved['id']}", headers=admin_headers).status_code == 404

        assert client.delete(f"/saved-sheets/{saved['id']}", headers=user_headers).status_code == 204
        assert client.get("/saved-sheets", headers=user_headers).json() == []
