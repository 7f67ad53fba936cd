"""
Tests for bank accounts, statement import and reconciliation.
"""

import io
from decimal import Decimal

import pandas as pd
import pytest

from models.general_ledger import GeneralLedger
from tests.conftest import account


@pytest.fixture
def bank(client, admin_headers, db, accounting):
    ledger = account(db, "1100")
    response = client.post("/bank-accounts/", json={
        "bank_name": "State Bank of India", "account_name": "Temple Trust", "account_number": "00112233",
        "ledger_account_id": ledger.id, "opening_balance": "1000.00",
    }, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


def _statement(client, headers, bank_id, today, lines):
    payload = [{"transaction_date": today, "transaction_type": t, "amount": a, "description": d} for t, a, d in lines]
    response = client.post(f"/bank-accounts/{bank_id}/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestStatementImport:

    def test_lines_move_statement_balance(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        _statement(client, admin_headers, bank["id"], today, [("Credit", "500.00", "UPI"), ("Debit", "200.00", "Cheque")])
        refreshed = client.get(f"/bank-accounts/{bank['id']}", headers=admin_headers).json()
        assert Decimal(refreshed["current_balance"]) == Decimal("1300.00")

    def test_unknown_bank_account(self, client, admin_headers, accounting):
        response = client.post("/bank-accounts/999/transactions", json=[], headers=admin_headers)
        assert response.status_code == 404


    def test_excel_upload_skips_bad_rows(self, client, admin_headers, bank, accounting):
        today = accounting["today"]
        buffer = io.BytesIO()
        pd.DataFrame([
            {"Date": today, "Narration": "UPI receipt", "Debit": None, "Credit": 500},
            {"Date": today, "Narration": "Bank charges", "Debit": 20, "Credit": None},
            {"Date": None, "Narration": "No date", "Debit": None, "Credit": 10},
            {"Date": today, "Narration": "Nothing", "Debit": None, "Credit": None},
        ]).to_excel(buffer, index=False)

        response = client.post(f"/bank-accounts/{bank['id']}/transactions/upload", files={
            "file": ("statement.xlsx", buffer.getvalue(), "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        }, headers=admin_headers)
        assert response.status_code == 200, response.text
        result = response.json()
        assert result["imported"] == 2
        assert result["skipped"] == 2
        assert [e.split(":")[0] for e in result["errors"]] == ["Row 4", "Row 5"]
        assert Decimal(result["current_balance"]) == Decimal("1480.00")

    def test_excel_upload_needs_amount_columns(self, client, admin_headers, bank):
        buffer = io.BytesIO()
        pd.DataFrame([{"Date": "01-04-2025", "Narration": "x"}]).to_excel(buffer, index=False)
        response = client.post(f"/bank-accounts/{bank['id']}/transactions/upload",
                               files={"file": ("statement.xlsx", buffer.getvalue())}, headers=admin_headers)
        assert response.status_code == 400

    def test_upload_rejects_csv(self, client, admin_headers, bank):
        response = client.post(f"/bank-accounts/{bank['id']}/transactions/upload",
                               files={"file": ("statement.csv", b"Date,Credit")}, headers=admin_headers)
        assert response.status_code == 400


class TestReconcile:

    def test_reconcile_reports_already_reconciled(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        txns = _statement(client, admin_headers, bank["id"], today, [("Credit", "500.00", "UPI")])
        ids = [t["id"] for t in txns]

        first = client.post(f"/bank-accounts/{bank['id']}/reconcile", json={"transaction_ids": ids}, headers=admin_headers)
        assert first.json()["reconciled"] == ids

        second = client.post(f"/bank-accounts/{bank['id']}/reconcile", json={"transaction_ids": ids}, headers=admin_headers)
        assert second.json()["reconciled"] == []
        assert second.json()["already_reconciled"] == ids

    def test_unknown_transaction_fails_whole_request(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        txns = _statement(client, admin_headers, bank["id"], today, [("Credit", "500.00", "UPI")])
        response = client.post(f"/bank-accounts/{bank['id']}/reconcile",
                               json={"transaction_ids": [txns[0]["id"], 9999]}, headers=admin_headers)
        assert response.status_code == 400
        unreconciled = client.get(f"/bank-accounts/{bank['id']}/unreconciled", headers=admin_headers).json()
        assert [t["id"] for t in unreconciled] == [txns[0]["id"]]

    def test_auto_match_links_ledger_entry(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        client.post("/donations/", json={
            "donor_name": "Ravi", "amount": "500.00", "donation_date": today,
            "payment_mode": "UPI", "bank_account_id": bank["id"],
        }, headers=admin_headers)
        txns = _statement(client, admin_headers, bank["id"], today, [("Credit", "500.00", "UPI donation")])

        result = client.post(f"/bank-accounts/{bank['id']}/reconcile",
                             json={"transaction_ids": [txns[0]["id"]], "auto_match": True}, headers=admin_headers).json()
        assert str(txns[0]["id"]) in {str(k) for k in result["matched"]}

    def test_explicit_match_is_not_claimed_by_auto_match(self, client, admin_headers, bank, accounting, db):
        today = accounting["today"].isoformat()
        client.post("/donations/", json={
            "donor_name": "Ravi", "amount": "500.00", "donation_date": today,
            "payment_mode": "UPI", "bank_account_id": bank["id"],
        }, headers=admin_headers)
        entry = db.query(GeneralLedger).filter(
            GeneralLedger.account_id == account(db, "1100").id,
            GeneralLedger.debit_amount == Decimal("500.00")
        ).one()
        first, second = _statement(client, admin_headers, bank["id"], today,
                                   [("Credit", "500.00", "UPI 1"), ("Credit", "500.00", "UPI 2")])

        result = client.post(f"/bank-accounts/{bank['id']}/reconcile", json={
            "transaction_ids": [first["id"], second["id"]],
            "ledger_matches": {str(second["id"]): entry.id},
            "auto_match": True,
        }, headers=admin_headers)
        assert result.status_code == 200, result.text
        assert result.json()["matched"] == {str(second["id"]): entry.id}
        assert result.json()["reconciled"] == [first["id"], second["id"]]

    def test_unreconcile(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        txns = _statement(client, admin_headers, bank["id"], today, [("Debit", "50.00", "Charges")])
        client.post(f"/bank-accounts/{bank['id']}/reconcile", json={"transaction_ids": [txns[0]["id"]]}, headers=admin_headers)
        response = client.post(f"/bank-accounts/{bank['id']}/unreconcile", json={"transaction_ids": [txns[0]["id"]]},
                               headers=admin_headers)
        assert response.json() == {"unreconciled": [txns[0]["id"]]}

    def test_summary_counts(self, client, admin_headers, bank, accounting):
        today = accounting["today"].isoformat()
        txns = _statement(client, admin_headers, bank["id"], today, [("Credit", "100.00", "a"), ("Debit", "40.00", "b")])
        client.post(f"/bank-accounts/{bank['id']}/reconcile", json={"transaction_ids": [txns[0]["id"]]}, headers=admin_headers)
        summary = client.get(f"/bank-accounts/{bank['id']}/reconciliation-summary", headers=admin_headers).json()
        assert summary["reconciled_count"] == 1
        assert summary["unreconciled_count"] == 1
        assert Decimal(summary["statement_balance"]) == Decimal("1060.00")
