"""
Tests for budgets with variance and GST return filing records.
"""

from decimal import Decimal

from crud.financial_periods import financial_year_label
from tests.conftest import account


class TestBudgets:

    def test_variance_against_actuals(self, client, admin_headers, db, accounting):
        today = accounting["today"]
        fy = financial_year_label(today)
        expense_account = account(db, "5200")
        response = client.post("/budgets/", json={
            "financial_year": fy, "account_id": expense_account.id, "budgeted_amount": "1000.00",
        }, headers=admin_headers)
        assert response.status_code == 201, response.text
        client.post("/expenses/", json={
            "expense_date": today.isoformat(), "amount": "250.00", "status": "Paid", "payment_mode": "Cash",
        }, headers=admin_headers)

        report = client.get("/budgets/variance", params={"financial_year": fy}, headers=admin_headers).json()
        row = report["rows"][0]
        assert Decimal(row["actual_amount"]) == Decimal("250.00")
        assert Decimal(row["variance"]) == Decimal("750.00")
        assert Decimal(row["utilisation_percent"]) == Decimal("25.00")

    def test_duplicate_budget_is_rejected(self, client, admin_headers, db, accounting):
        payload = {"financial_year": "2025-26", "account_id": account(db, "5100").id, "budgeted_amount": "10"}
        assert client.post("/budgets/", json=payload, headers=admin_headers).status_code == 201
        assert client.post("/budgets/", json=payload, headers=admin_headers).status_code == 400

    def test_financial_year_format(self, client, admin_headers, db, accounting):
        payload = {"financial_year": "2025-27", "account_id": account(db, "5100").id, "budgeted_amount": "10"}
        assert client.post("/budgets/", json=payload, headers=admin_headers).status_code == 422


class TestGSTReturns:

    def test_upsert_computes_total_and_status(self, client, admin_headers):
        payload = {
            "return_period": "2025-04", "return_type": "GSTR-3B",
            "cgst_amount": "90.00", "sgst_amount": "90.00", "igst_amount": "0",
        }
        draft = client.put("/gst-returns/", json=payload, headers=admin_headers)
        assert draft.status_code == 200, draft.text
        assert Decimal(draft.json()["total_tax"]) == Decimal("180.00")
        assert draft.json()["status"] == "Draft"

        payload.update({"filing_date": "2025-05-20", "acknowledgement_number": "AA0705250012345"})
        filed = client.put("/gst-returns/", json=payload, headers=admin_headers).json()
        assert filed["id"] == draft.json()["id"]
        assert filed["status"] == "Filed"
        assert len(client.get("/gst-returns/", headers=admin_headers).json()) == 1

    def test_invalid_return_type(self, client, admin_headers):
        response = client.put("/gst-returns/", json={"return_period": "2025-04", "return_type": "GSTR-2"},
                              headers=admin_headers)
        assert response.status_code == 422
