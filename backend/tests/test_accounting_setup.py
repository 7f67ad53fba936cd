"""
Tests for tenant accounting setup: default chart, settings and financial periods.
"""

from crud.financial_periods import financial_year_bounds
from tests.conftest import account


class TestInitializeAccounting:

    def test_seeds_chart_and_period(self, client, admin_headers):
        first = client.post("/tenants/initialize-accounting", headers=admin_headers)
        assert first.status_code == 201, first.text
        assert "4000" in first.json()["accounts_created"]

        again = client.post("/tenants/initialize-accounting", headers=admin_headers).json()
        assert again["accounts_created"] == []
        assert again["open_period"] == first.json()["open_period"]

        current = client.get("/financial-periods/current", headers=admin_headers)
        assert current.status_code == 200
        assert current.json()["status"] == "Open"

    def test_admin_only(self, client, user_headers):
        assert client.post("/tenants/initialize-accounting", headers=user_headers).status_code == 403


class TestChartOfAccounts:

    def test_duplicate_code(self, client, admin_headers, accounting):
        response = client.post("/chart-of-accounts/", json={
            "account_code": "1000", "account_name": "Petty Cash", "account_type": "Asset",
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_child_account_in_tree(self, client, admin_headers, db, accounting):
        cash = account(db, "1000")
        response = client.post("/chart-of-accounts/", json={
            "account_code": "1010", "account_name": "Hundi Cash", "account_type": "Asset", "parent_account_id": cash.id,
        }, headers=admin_headers)
        assert response.status_code == 201, response.text
        tree = client.get("/chart-of-accounts/tree", headers=admin_headers).json()
        cash_node = next(node for node in tree if node["account_code"] == "1000")
        assert [child["account_code"] for child in cash_node["children"]] == ["1010"]

    def test_parent_cycle_rejected(self, client, admin_headers, accounting):
        parent = client.post("/chart-of-accounts/", json={
            "account_code": "6000", "account_name": "Festival Expenses", "account_type": "Expense",
        }, headers=admin_headers).json()
        child = client.post("/chart-of-accounts/", json={
            "account_code": "6100", "account_name": "Decorations", "account_type": "Expense",
            "parent_account_id": parent["id"],
        }, headers=admin_headers).json()

        response = client.patch(f"/chart-of-accounts/{parent['id']}", json={"parent_account_id": child["id"]},
                                headers=admin_headers)
        assert response.status_code == 400
        roots = [node["account_code"] for node in client.get("/chart-of-accounts/tree", headers=admin_headers).json()]
        assert "6000" in roots

    def test_default_account_cannot_be_deactivated(self, client, admin_headers, db, accounting):
        cash = account(db, "1000")
        response = client.patch(f"/chart-of-accounts/{cash.id}", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_account_type(self, client, admin_headers):
        response = client.post("/chart-of-accounts/", json={
            "account_code": "9000", "account_name": "Misc", "account_type": "Suspense",
        }, headers=admin_headers)
        assert response.status_code == 422


class TestFinancialSettings:

    def test_default_must_match_type(self, client, admin_headers, db, accounting):
        expense = account(db, "5200")
        response = client.put("/financial-settings/", json={"default_cash_account_id": expense.id}, headers=admin_headers)
        assert response.status_code == 400


    def test_change_default_account(self, client, admin_headers, db, accounting):
        created = client.post("/chart-of-accounts/", json={
            "account_code": "1010", "account_name": "Hundi Cash", "account_type": "Asset",
        }, headers=admin_headers).json()
        response = client.put("/financial-settings/", json={"default_cash_account_id": created["id"]}, headers=admin_headers)
        assert response.status_code == 200, response.text
        assert response.json()["default_cash_account_id"] == created["id"]

        defaults = client.get("/financial-settings/accounts", headers=admin_headers).json()
        cash = next(d for d in defaults if d["setting"] == "default_cash_account_id")
        assert cash["account_code"] == "1010"
        assert cash["expected_type"] == "Asset"

    def test_reading_settings_needs_admin(self, client, user_headers):
        assert client.get("/financial-settings/", headers={"X-Tenant-ID": "temple-1"}).status_code == 401
        assert client.get("/financial-settings/", headers=user_headers).status_code == 403

class TestFinancialPeriods:

    def test_overlapping_open_period(self, client, admin_headers, accounting):
        start, end = financial_year_bounds(accounting["today"])
        response = client.post("/financial-periods/", json={
            "period_name": "Overlap", "start_date": start.isoformat(), "end_date": end.isoformat(),
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_closed_period_blocks_posting(self, client, admin_headers, accounting):
        period_id = accounting["period"].id
        assert client.post(f"/financial-periods/{period_id}/close", headers=admin_headers).json()["status"] == "Closed"
        response = client.post("/donations/", json={
            "donor_name": "Ravi", "amount": "100", "donation_date": accounting["today"].isoformat(), "payment_mode": "Cash",
        }, headers=admin_headers)
        assert response.status_code == 400
        assert client.get("/donations/", headers=admin_headers).json() == []

        assert client.post(f"/financial-periods/{period_id}/reopen", headers=admin_headers).json()["status"] == "Open"

    def test_end_before_start(self, client, admin_headers):
        response = client.post("/financial-periods/", json={
            "period_name": "Bad", "start_date": "2025-04-01", "end_date": "2025-03-01",
        }, headers=admin_headers)
        assert response.status_code == 422
