"""
Tests for vendor bills, invoices and expenses through the API, including the
ledger postings and the reports built from them.
"""

import io
from datetime import date, timedelta
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from tests.conftest import TENANT_ID, account


def _vendor(client, headers, code="V001"):
    response = client.post("/vendors/", json={"vendor_code": code, "vendor_name": "Shree Flowers"}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestBills:

    def test_bill_posts_expense_gst_and_payable(self, client, admin_headers, db, accounting):
        vendor = _vendor(client, admin_headers)
        today = accounting["today"].isoformat()

        response = client.post("/bills/", json={
            "vendor_id": vendor["id"], "bill_date": today, "subtotal": "1000.00", "gst_rate": "18",
        }, headers=admin_headers)
        assert response.status_code == 201, response.text
        bill = response.json()

        assert bill["bill_number"] == f"BILL-{accounting['today'].year}-0001"
        assert Decimal(bill["gst_amount"]) == Decimal("180.00")
        assert Decimal(bill["total_amount"]) == Decimal("1180.00")
        assert bill["status"] == "Unpaid"
        assert account(db, "5200").current_balance == Decimal("1000.00")
        assert account(db, "1400").current_balance == Decimal("180.00")
        assert account(db, "2000").current_balance == Decimal("1180.00")

    def test_partial_then_full_payment(self, client, admin_headers, db, accounting):
        vendor = _vendor(client, admin_headers)
        today = accounting["today"].isoformat()
        bill = client.post("/bills/", json={
            "vendor_id": vendor["id"], "bill_date": today, "subtotal": "500.00",
        }, headers=admin_headers).json()

        first = client.post(f"/bills/{bill['id']}/payments", json={
            "payment_date": today, "amount": "200.00", "payment_mode": "Cash",
        }, headers=admin_headers)
        assert first.status_code == 201, first.text
        assert client.get(f"/bills/{bill['id']}", headers=admin_headers).json()["status"] == "Partial"

        too_much = client.post(f"/bills/{bill['id']}/payments", json={
            "payment_date": today, "amount": "400.00", "payment_mode": "Cash",
        }, headers=admin_headers)
        assert too_much.status_code == 400
        assert "exceeds the outstanding balance" in too_much.json()["detail"]

        client.post(f"/bills/{bill['id']}/payments", json={
            "payment_date": today, "amount": "300.00", "payment_mode": "UPI",
        }, headers=admin_headers)
        paid = client.get(f"/bills/{bill['id']}", headers=admin_headers).json()
        assert paid["status"] == "Paid"
        assert account(db, "2000").current_balance == Decimal("0.00")
        assert account(db, "1000").current_balance == Decimal("-500.00")

    def test_posted_bill_cannot_be_deleted(self, client, admin_headers, accounting):
        vendor = _vendor(client, admin_headers)
        bill = client.post("/bills/", json={
            "vendor_id": vendor["id"], "bill_date": accounting["today"].isoformat(), "subtotal": "10.00",
        }, headers=admin_headers).json()
        response = client.delete(f"/bills/{bill['id']}", headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_vendor_is_rejected(self, client, admin_headers, accounting):
        response = client.post("/bills/", json={
            "vendor_id": 999, "bill_date": accounting["today"].isoformat(), "subtotal": "10.00",
        }, headers=admin_headers)
        assert response.status_code == 400


class TestInvoices:

    def test_invoice_posts_receivable_income_and_gst(self, client, admin_headers, db, accounting):
        response = client.post("/invoices/", json={
            "customer_name": "Sri Rama Trust", "invoice_date": accounting["today"].isoformat(),
            "subtotal": "2000.00", "gst_rate": "5",
        }, headers=admin_headers)
        assert response.status_code == 201, response.text
        invoice = response.json()

        assert Decimal(invoice["total_amount"]) == Decimal("2100.00")
        assert account(db, "1200").current_balance == Decimal("2100.00")
        assert account(db, "4300").current_balance == Decimal("2000.00")
        assert account(db, "2100").current_balance == Decimal("100.00")

    def test_payment_clears_receivable(self, client, admin_headers, db, accounting):
        today = accounting["today"].isoformat()
        invoice = client.post("/invoices/", json={
            "customer_name": "Sri Rama Trust", "invoice_date": today, "subtotal": "300.00",
        }, headers=admin_headers).json()
        response = client.post(f"/invoices/{invoice['id']}/payments", json={
            "payment_date": today, "amount": "300.00", "payment_mode": "Cash",
        }, headers=admin_headers)
        assert response.status_code == 201, response.text
        assert client.get(f"/invoices/{invoice['id']}", headers=admin_headers).json()["status"] == "Paid"
        assert account(db, "1200").current_balance == Decimal("0.00")
        assert account(db, "1000").current_balance == Decimal("300.00")


class TestExpenses:

    def test_unpaid_expense_is_not_posted_until_marked_paid(self, client, admin_headers, db, accounting):
        today = accounting["today"].isoformat()
        expense = client.post("/expenses/", json={
            "expense_date": today, "amount": "750.00", "description": "Electricity",
        }, headers=admin_headers).json()
        assert expense["status"] == "Unpaid"
        assert account(db, "5200").current_balance == Decimal("0.00")

        paid = client.post(f"/expenses/{expense['id']}/mark-paid", json={
            "paid_date": today, "payment_mode": "Cash",
        }, headers=admin_headers)
        assert paid.status_code == 200, paid.text
        assert paid.json()["status"] == "Paid"
        assert account(db, "5200").current_balance == Decimal("750.00")
        assert account(db, "1000").current_balance == Decimal("-750.00")

        again = client.post(f"/expenses/{expense['id']}/mark-paid", json={"payment_mode": "Cash"}, headers=admin_headers)
        assert again.status_code == 400

    def test_wrong_account_type_is_rejected(self, client, admin_headers, db, accounting):
        income = account(db, "4000")
        response = client.post("/expenses/", json={
            "expense_date": accounting["today"].isoformat(), "amount": "10.00", "expense_account_id": income.id,
        }, headers=admin_headers)
        assert response.status_code == 400
        assert "Expense account" in response.json()["detail"]


class TestReports:

    def _activity(self, client, headers, today):
        vendor = _vendor(client, headers)
        client.post("/bills/", json={
            "vendor_id": vendor["id"], "bill_date": today, "subtotal": "1000.00", "gst_rate": "18",
        }, headers=headers)
        client.post("/invoices/", json={
            "customer_name": "Sri Rama Trust", "invoice_date": today, "subtotal": "2000.00", "gst_rate": "5",
        }, headers=headers)
        client.post("/expenses/", json={
            "expense_date": today, "amount": "300.00", "status": "Paid", "payment_mode": "Cash",
        }, headers=headers)

    def test_trial_balance_balances(self, client, admin_headers, accounting):
        self._activity(client, admin_headers, accounting["today"].isoformat())
        report = client.get("/financial-reports/trial-balance", headers=admin_headers).json()
        assert report["is_balanced"] is True
        assert Decimal(report["total_debit"]) == Decimal(report["total_credit"])

    def test_balance_sheet_balances_with_surplus(self, client, admin_headers, accounting):
        self._activity(client, admin_headers, accounting["today"].isoformat())
        sheet = client.get("/financial-reports/balance-sheet", headers=admin_headers).json()
        assert sheet["is_balanced"] is True
        # 2000 other income - 1000 bill expense - 300 paid expense
        assert Decimal(sheet["current_surplus"]) == Decimal("700.00")

    def test_profit_and_loss(self, client, admin_headers, accounting):
        today = accounting["today"].isoformat()
        self._activity(client, admin_headers, today)
        pnl = client.get("/financial-reports/profit-and-loss", params={"start_date": today, "end_date": today},
                         headers=admin_headers).json()
        assert Decimal(pnl["total_income"]) == Decimal("2000.00")
        assert Decimal(pnl["total_expenses"]) == Decimal("1300.00")
        assert Decimal(pnl["net_surplus"]) == Decimal("700.00")

    def test_reversed_range_is_rejected(self, client, admin_headers, accounting):
        response = client.get("/financial-reports/profit-and-loss",
                              params={"start_date": "2025-05-02", "end_date": "2025-05-01"}, headers=admin_headers)
        assert response.status_code == 400

    def test_gst_report_counts_each_document_once(self, client, admin_headers, accounting):
        today = accounting["today"].isoformat()
        self._activity(client, admin_headers, today)
        report = client.get("/financial-reports/gst", params={"start_date": today, "end_date": today},
                            headers=admin_headers).json()
        rates = {Decimal(r["gst_rate"]): r for r in report["rates"]}
        assert Decimal(rates[Decimal("18.00")]["taxable_value"]) == Decimal("1000.00")
        assert Decimal(rates[Decimal("18.00")]["total_tax"]) == Decimal("180.00")
        assert Decimal(rates[Decimal("5.00")]["taxable_value"]) == Decimal("2000.00")
        assert Decimal(report["total_tax"]) == Decimal("280.00")
        assert Decimal(rates[Decimal("5.00")]["cgst"]) + Decimal(rates[Decimal("5.00")]["sgst"]) == Decimal("100.00")

    def test_cash_flow(self, client, admin_headers, accounting):
        today = accounting["today"].isoformat()
        self._activity(client, admin_headers, today)
        flow = client.get("/financial-reports/cash-flow", params={"start_date": today, "end_date": today},
                          headers=admin_headers).json()
        assert Decimal(flow["outflows"]) == Decimal("300.00")
        assert Decimal(flow["closing_cash"]) == Decimal(flow["opening_cash"]) - Decimal("300.00")

    def test_trial_balance_as_of_earlier_date(self, client, admin_headers, accounting):
        today = accounting["today"]
        self._activity(client, admin_headers, today.isoformat())
        earlier = client.get("/financial-reports/trial-balance",
                             params={"as_of_date": (today - timedelta(days=1)).isoformat()}, headers=admin_headers).json()
        assert earlier["rows"] == []
        assert Decimal(earlier["total_debit"]) == Decimal("0")

        as_of_today = client.get("/financial-reports/trial-balance", params={"as_of_date": today.isoformat()},
                                 headers=admin_headers).json()
        current = client.get("/financial-reports/trial-balance", headers=admin_headers).json()
        assert as_of_today["rows"] == current["rows"]
        assert as_of_today["is_balanced"] is True

    def test_trial_balance_export(self, client, admin_headers, accounting):
        self._activity(client, admin_headers, accounting["today"].isoformat())
        response = client.get("/financial-reports/trial-balance/export", headers=admin_headers)
        assert response.status_code == 200
        assert "trial_balance.xlsx" in response.headers["content-disposition"]

        ws = load_workbook(io.BytesIO(response.content)).active
        assert ws.cell(row=1, column=1).value == "Trial Balance"
        assert [c.value for c in ws[3]] == ["Code", "Account", "Type", "Debit", "Credit"]
        totals = [c.value for c in ws[ws.max_row]]
        assert totals[1] == "TOTAL"
        assert totals[3] == totals[4]

    def test_general_ledger_export(self, client, admin_headers, db, accounting):
        self._activity(client, admin_headers, accounting["today"].isoformat())
        cash = account(db, "1000")
        response = client.get("/general-ledger/export", params={"account_id": cash.id}, headers=admin_headers)
        assert response.status_code == 200

        ws = load_workbook(io.BytesIO(response.content)).active
        assert ws.cell(row=1, column=1).value == "Ledger - 1000 Cash"
        assert ws.max_row == 5
        entry = [c.value for c in ws[4]]
        assert entry[1] == "1000 Cash"
        assert entry[4] == 0
        assert entry[5] == 300
        assert [c.value for c in ws[5]][2] == "TOTAL"

    def test_reports_require_admin(self, client, user_headers):
        response = client.get("/financial-reports/trial-balance", headers=user_headers)
        assert response.status_code == 403
