"""
Tests for donations: receipt numbering, posting, status moves and receipts.
"""

from decimal import Decimal

import pytest

from crud.financial_periods import financial_year_label
from tests.conftest import account


def _donation(client, headers, today, **overrides):
    payload = {
        "donor_name": "Lakshmi Narayanan",
        "amount": "1001.00",
        "donation_date": today,
        "payment_mode": "Cash",
    }
    payload.update(overrides)
    return client.post("/donations/", json=payload, headers=headers)


class TestDonationCreate:

    def test_completed_donation_posts_to_ledger(self, client, admin_headers, db, accounting):
        today = accounting["today"]
        response = _donation(client, admin_headers, today.isoformat())
        assert response.status_code == 201, response.text
        donation = response.json()

        assert donation["receipt_number"] == f"DON-{today.year}-0001"
        assert donation["is_posted"] is True
        assert account(db, "1000").current_balance == Decimal("1001.00")
        assert account(db, "4000").current_balance == Decimal("1001.00")

    def test_receipt_numbers_increase(self, client, admin_headers, accounting):
        today = accounting["today"]
        _donation(client, admin_headers, today.isoformat())
        second = _donation(client, admin_headers, today.isoformat()).json()
        assert second["receipt_number"] == f"DON-{today.year}-0002"

    def test_pending_donation_is_not_posted(self, client, admin_headers, db, accounting):
        response = _donation(client, admin_headers, accounting["today"].isoformat(), payment_status="Pending")
        assert response.json()["is_posted"] is False
        assert account(db, "4000").current_balance == Decimal("0.00")

    def test_donor_is_required(self, client, admin_headers, accounting):
        response = _donation(client, admin_headers, accounting["today"].isoformat(), donor_name=None)
        assert response.status_code == 422

    def test_amount_below_one_rupee_is_rejected(self, client, admin_headers, accounting):
        response = _donation(client, admin_headers, accounting["today"].isoformat(), amount="0.50")
        assert response.status_code == 422

    def test_category_marks_80g_eligibility(self, client, admin_headers, accounting):
        category = client.post("/masters/donation-categories", json={
            "name": "Annadanam", "is_80g_eligible": True,
        }, headers=admin_headers)
        assert category.status_code == 201, category.text
        donation = _donation(client, admin_headers, accounting["today"].isoformat(),
                             category_id=category.json()["id"]).json()
        assert donation["is_80g_eligible"] is True


class TestDonationUpdate:

    def test_donor_name_cannot_be_cleared(self, client, admin_headers, accounting):
        donation = _donation(client, admin_headers, accounting["today"].isoformat()).json()
        for blank in (None, "  "):
            response = client.patch(f"/donations/{donation['id']}", json={"donor_name": blank}, headers=admin_headers)
            assert response.status_code == 400
        assert client.get(f"/donations/{donation['id']}", headers=admin_headers).json()["donor_name"] == "Lakshmi Narayanan"

    def test_purpose_can_change(self, client, admin_headers, accounting):
        donation = _donation(client, admin_headers, accounting["today"].isoformat()).json()
        response = client.patch(f"/donations/{donation['id']}", json={"purpose": "Gopuram renovation"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["purpose"] == "Gopuram renovation"


class TestDonationStatus:

    def test_pending_to_completed_posts(self, client, admin_headers, db, accounting):
        today = accounting["today"].isoformat()
        donation = _donation(client, admin_headers, today, payment_status="Pending").json()
        response = client.post(f"/donations/{donation['id']}/status", json={
            "payment_status": "Completed", "status_date": today,
        }, headers=admin_headers)
        assert response.status_code == 200, response.text
        assert response.json()["is_posted"] is True
        assert account(db, "4000").current_balance == Decimal("1001.00")

    def test_refund_reverses_posting(self, client, admin_headers, db, accounting):
        today = accounting["today"].isoformat()
        donation = _donation(client, admin_headers, today).json()
        response = client.post(f"/donations/{donation['id']}/status", json={
            "payment_status": "Refunded", "status_date": today,
        }, headers=admin_headers)
        assert response.status_code == 200, response.text
        assert response.json()["payment_status"] == "Refunded"
        assert account(db, "1000").current_balance == Decimal("0.00")
        assert account(db, "4000").current_balance == Decimal("0.00")

    @pytest.mark.parametrize("start,target", [("Completed", "Pending"), ("Pending", "Refunded")])
    def test_disallowed_moves(self, client, admin_headers, accounting, start, target):
        donation = _donation(client, admin_headers, accounting["today"].isoformat(), payment_status=start).json()
        response = client.post(f"/donations/{donation['id']}/status", json={"payment_status": target},
                               headers=admin_headers)
        assert response.status_code == 400

    def test_posted_donation_cannot_be_deleted(self, client, admin_headers, accounting):
        donation = _donation(client, admin_headers, accounting["today"].isoformat()).json()
        assert client.delete(f"/donations/{donation['id']}", headers=admin_headers).status_code == 400

    def test_pending_donation_can_be_deleted(self, client, admin_headers, accounting):
        donation = _donation(client, admin_headers, accounting["today"].isoformat(), payment_status="Pending").json()
        assert client.delete(f"/donations/{donation['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/donations/{donation['id']}", headers=admin_headers).status_code == 404


class TestReceipts:

    def test_receipt_pdf(self, client, admin_headers, accounting):
        donation = _donation(client, admin_headers, accounting["today"].isoformat()).json()
        response = client.get(f"/donations/{donation['id']}/receipt", headers=admin_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_summary(self, client, admin_headers, accounting):
        today = accounting["today"].isoformat()
        _donation(client, admin_headers, today)
        _donation(client, admin_headers, today, amount="500.00")
        summary = client.get("/donations/summary", headers=admin_headers).json()
        assert Decimal(summary["total_amount"]) == Decimal("1501.00")
        assert summary["donation_count"] == 2


class TestFinancialYear:

    def test_label(self):
        from datetime import date
        assert financial_year_label(date(2025, 3, 31)) == "2024-25"
        assert financial_year_label(date(2025, 4, 1)) == "2025-26"
