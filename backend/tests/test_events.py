"""
Tests for temple events: slugs, the public QR registration flow and analytics.
"""

import pytest

from tests.conftest import TENANT_ID, OTHER_TENANT_ID, make_token


@pytest.fixture
def event(client, admin_headers):
    response = client.post("/events/", json={
        "name": "Maha Shivaratri Utsav 2025!", "start_date": "2025-02-26", "is_published": True,
    }, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


REGISTRATION = {
    "name": "Meera Krishnan",
    "phone": "9876543210",
    "email": "",
    "dob": "1990-05-14",
    "occupation": "Teacher",
    "city": "Chennai",
    "state": "Tamil Nadu",
}


class TestEventAdmin:

    def test_slug_derived_from_name(self, event):
        assert event["slug"] == "maha-shivaratri-utsav-2025"
        assert event["tenant_id"] == TENANT_ID

    def test_duplicate_slug_rejected(self, client, admin_headers, event):
        response = client.post("/events/", json={
            "name": "Another", "slug": event["slug"], "start_date": "2025-03-01",
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_end_before_start_rejected(self, client, admin_headers):
        response = client.post("/events/", json={
            "name": "Backwards", "start_date": "2025-03-10", "end_date": "2025-03-01",
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_status_rejected(self, client, admin_headers):
        response = client.post("/events/", json={
            "name": "Odd", "start_date": "2025-03-10", "status": "Postponed",
        }, headers=admin_headers)
        assert response.status_code == 422


class TestPublicEvent:

    def test_published_event_by_slug(self, client, event):
        response = client.get(f"/public/events/{TENANT_ID}/{event['slug']}")
        assert response.status_code == 200
        assert response.json()["name"] == event["name"]
        assert "tenant_id" not in response.json()

    def test_unpublished_event_is_hidden(self, client, admin_headers, event):
        client.patch(f"/events/{event['id']}", json={"is_published": False}, headers=admin_headers)
        assert client.get(f"/public/events/{TENANT_ID}/{event['slug']}").status_code == 404

    def test_same_slug_in_two_temples(self, client, event):
        other_headers = {"Authorization": f"Bearer {make_token(tenant_id=OTHER_TENANT_ID)}", "X-Tenant-ID": OTHER_TENANT_ID}
        response = client.post("/events/", json={
            "name": "Shivaratri at the other temple", "slug": event["slug"], "start_date": "2025-02-26", "is_published": True,
        }, headers=other_headers)
        assert response.status_code == 201, response.text

        ours = client.get(f"/public/events/{TENANT_ID}/{event['slug']}").json()
        theirs = client.get(f"/public/events/{OTHER_TENANT_ID}/{event['slug']}").json()
        assert ours["id"] == event["id"]
        assert theirs["name"] == "Shivaratri at the other temple"

    def test_wrong_tenant_is_not_found(self, client, event):
        assert client.get(f"/public/events/{OTHER_TENANT_ID}/{event['slug']}").status_code == 404

    def test_track_scan_needs_session(self, client, event):
        assert client.post(f"/api/events/{event['id']}/track-scan", json={}).status_code == 400

    def test_track_scan(self, client, event):
        response = client.post(f"/api/events/{event['id']}/track-scan", json={"session_id": "s-1"})
        assert response.json() == {"success": True, "session_id": "s-1"}


class TestRegistration:

    def test_register_creates_devotee(self, client, admin_headers, event):
        client.post(f"/api/events/{event['id']}/track-scan", json={"session_id": "s-1"})
        response = client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "session_id": "s-1"})
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True

        devotee = client.get(f"/devotees/{body['devotee_id']}", headers=admin_headers).json()
        assert devotee["first_name"] == "Meera"
        assert devotee["last_name"] == "Krishnan"
        assert devotee["event_source"] == event["slug"]
        assert devotee["email"] is None

    def test_invalid_form_lists_fields(self, client, event):
        response = client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "phone": "123"})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "Invalid form data"
        assert [d["field"] for d in detail["details"]] == ["phone"]

    def test_blank_name_is_rejected(self, client, event):
        response = client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "name": "   "})
        assert response.status_code == 400
        assert [d["field"] for d in response.json()["detail"]["details"]] == ["name"]

    def test_name_is_trimmed(self, client, admin_headers, event):
        response = client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "name": "  Meera  "})
        assert response.status_code == 200
        devotee = client.get(f"/devotees/{response.json()['devotee_id']}", headers=admin_headers).json()
        assert devotee["first_name"] == "Meera"
        assert devotee["last_name"] is None

    def test_missing_event(self, client):
        assert client.post("/api/events/999/register", json=REGISTRATION).status_code == 404

    def test_unpublished_event(self, client, admin_headers, event):
        client.patch(f"/events/{event['id']}", json={"is_published": False}, headers=admin_headers)
        assert client.post(f"/api/events/{event['id']}/register", json=REGISTRATION).status_code == 403

    def test_unknown_session_does_not_fail_registration(self, client, event):
        response = client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "session_id": "nope"})
        assert response.status_code == 200


class TestAnalytics:

    def test_conversion_rate(self, client, admin_headers, event):
        for session in ("a", "b", "c"):
            client.post(f"/api/events/{event['id']}/track-scan", json={"session_id": session})
        client.post(f"/api/events/{event['id']}/register", json={**REGISTRATION, "session_id": "a"})

        analytics = client.get(f"/events/{event['id']}/analytics", headers=admin_headers).json()
        assert analytics["total_scans"] == 3
        assert analytics["total_submissions"] == 1
        assert analytics["conversion_rate"] == "33.33"
        assert analytics["registration_url"].endswith(f"/events/{TENANT_ID}/{event['slug']}")
        assert analytics["qr_code_data"] == analytics["registration_url"]
        assert [r["full_name"] for r in analytics["recent_registrations"]] == ["Meera Krishnan"]

    def test_event_with_scans_cannot_be_deleted(self, client, admin_headers, event):
        client.post(f"/api/events/{event['id']}/track-scan", json={"session_id": "a"})
        assert client.delete(f"/events/{event['id']}", headers=admin_headers).status_code == 400
