"""
Tests for masters, puja bookings, staff and temple inventory.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def devotee(client, admin_headers):
    return client.post("/devotees/", json={"first_name": "Gopal", "mobile_number": "9444012345"},
                       headers=admin_headers).json()


@pytest.fixture
def puja(client, admin_headers):
    response = client.post("/pujas/", json={"name": "Rudrabhishekam", "base_amount": "1100.00"}, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestMasters:

    def test_name_masters(self, client, admin_headers, user_headers):
        assert client.post("/masters/nakshatras", json={"name": " Rohini "}, headers=admin_headers).status_code == 201
        assert client.post("/masters/nakshatras", json={"name": "Rohini"}, headers=admin_headers).status_code == 400
        names = client.get("/masters/nakshatras", headers=user_headers).json()
        assert [n["name"] for n in names] == ["Rohini"]

    def test_unknown_master(self, client, admin_headers):
        assert client.get("/masters/planets", headers=admin_headers).status_code == 404


class TestPujaBookings:

    def _book(self, client, headers, devotee, puja, **overrides):
        payload = {
            "devotee_id": devotee["id"], "puja_id": puja["id"],
            "booking_date": "2025-01-10", "puja_date": "2025-01-14", "time_slot": "06:00",
        }
        payload.update(overrides)
        return client.post("/pujas/bookings", json=payload, headers=headers)

    def test_amount_defaults_to_base_amount(self, client, admin_headers, devotee, puja):
        booking = self._book(client, admin_headers, devotee, puja).json()
        assert Decimal(booking["amount"]) == Decimal("1100.00")
        assert booking["payment_status"] == "Pending"
        assert booking["puja"]["name"] == "Rudrabhishekam"

    def test_payment_status_follows_amount_paid(self, client, admin_headers, devotee, puja):
        booking = self._book(client, admin_headers, devotee, puja, amount_paid="500").json()
        assert booking["payment_status"] == "Partial"
        paid = client.patch(f"/pujas/bookings/{booking['id']}", json={"amount_paid": "1100"}, headers=admin_headers)
        assert paid.json()["payment_status"] == "Paid"
        refunded = client.patch(f"/pujas/bookings/{booking['id']}", json={"refunded": True, "status": "Cancelled"},
                                headers=admin_headers)
        assert refunded.json()["payment_status"] == "Refunded"

    def test_overpayment_rejected(self, client, admin_headers, devotee, puja):
        assert self._book(client, admin_headers, devotee, puja, amount_paid="2000").status_code == 400

    def test_puja_before_booking_rejected(self, client, admin_headers, devotee, puja):
        assert self._book(client, admin_headers, devotee, puja, puja_date="2025-01-01").status_code == 400

    def test_inactive_puja_cannot_be_booked(self, client, admin_headers, devotee, puja):
        client.patch(f"/pujas/{puja['id']}", json={"is_active": False}, headers=admin_headers)
        assert self._book(client, admin_headers, devotee, puja).status_code == 400

    def test_bookings_for_a_day(self, client, admin_headers, devotee, puja):
        self._book(client, admin_headers, devotee, puja)
        self._book(client, admin_headers, devotee, puja, puja_date="2025-01-15")
        day = client.get("/pujas/bookings", params={"puja_date": "2025-01-14"}, headers=admin_headers).json()
        assert len(day) == 1


class TestStaff:

    def test_create_and_deactivate(self, client, admin_headers):
        staff = client.post("/staff/", json={"name": "Ramesh Shastri", "monthly_salary": "18000"},
                            headers=admin_headers).json()
        assert staff["role"] == "Pandit ji"
        client.patch(f"/staff/{staff['id']}", json={"is_active": False}, headers=admin_headers)
        assert client.get("/staff/", headers=admin_headers).json() == []
        assert len(client.get("/staff/", params={"include_inactive": True}, headers=admin_headers).json()) == 1


class TestInventory:

    def _item(self, client, headers, **overrides):
        payload = {"name": "Camphor", "category": "Puja Samagri", "unit": "KG", "current_stock": "5", "min_stock_level": "2"}
        payload.update(overrides)
        return client.post("/inventory-items/", json=payload, headers=headers)

    def test_duplicate_name(self, client, admin_headers):
        self._item(client, admin_headers)
        assert self._item(client, admin_headers).status_code == 400

    def test_stock_adjustments(self, client, admin_headers):
        item = self._item(client, admin_headers).json()
        issued = client.post(f"/inventory-items/{item['id']}/adjust-stock", json={"direction": "out", "quantity": "3"},
                             headers=admin_headers).json()
        assert Decimal(issued["current_stock"]) == Decimal("2")
        assert issued["is_low_stock"] is True

        too_much = client.post(f"/inventory-items/{item['id']}/adjust-stock", json={"direction": "out", "quantity": "10"},
                               headers=admin_headers)
        assert too_much.status_code == 400

    def test_low_stock_list(self, client, admin_headers):
        self._item(client, admin_headers)
        self._item(client, admin_headers, name="Ghee", current_stock="1")
        low = client.get("/inventory-items/low-stock", headers=admin_headers).json()
        assert [i["name"] for i in low] == ["Ghee"]
