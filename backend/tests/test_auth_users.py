"""
Tests for registration, login, roles and linking accounts to devotees.
"""

from tests.conftest import TENANT_ID


def _register(client, email, password="om-namah-shivaya", tenant_id=TENANT_ID):
    return client.post("/auth/register", json={"email": email, "password": password, "full_name": "Test"},
                       headers={"X-Tenant-ID": tenant_id})


def _bearer(token):
    return {"Authorization": f"Bearer {token}", "X-Tenant-ID": TENANT_ID}


class TestRegistration:

    def test_first_user_is_admin(self, client):
        first = _register(client, "priest@temple.org").json()["access_token"]
        second = _register(client, "visitor@temple.org").json()["access_token"]
        assert client.get("/auth/me", headers=_bearer(first)).json()["role"] == "admin"
        assert client.get("/auth/me", headers=_bearer(second)).json()["role"] == "user"

    def test_duplicate_email(self, client):
        _register(client, "priest@temple.org")
        assert _register(client, "priest@temple.org").status_code == 400

    def test_short_password(self, client):
        assert _register(client, "priest@temple.org", password="short").status_code == 422

    def test_tenant_header_required(self, client):
        response = client.post("/auth/register", json={"email": "a@temple.org", "password": "long-enough"})
        assert response.status_code == 422


class TestLogin:

    def test_login(self, client):
        _register(client, "priest@temple.org")
        response = client.post("/auth/login", json={"email": "priest@temple.org", "password": "om-namah-shivaya"})
        assert response.status_code == 200
        me = client.get("/auth/me", headers=_bearer(response.json()["access_token"])).json()
        assert me["email"] == "priest@temple.org"
        assert me["tenant_id"] == TENANT_ID

    def test_wrong_password(self, client):
        _register(client, "priest@temple.org")
        response = client.post("/auth/login", json={"email": "priest@temple.org", "password": "wrong-password"})
        assert response.status_code == 401

    def test_me_requires_token(self, client):
        assert client.get("/auth/me").status_code == 401


class TestRoles:

    def test_admin_promotes_user(self, client):
        admin = _register(client, "priest@temple.org").json()["access_token"]
        visitor = _register(client, "visitor@temple.org").json()["access_token"]
        visitor_id = client.get("/auth/me", headers=_bearer(visitor)).json()["id"]

        response = client.put(f"/users/{visitor_id}/role", json={"role": "admin"}, headers=_bearer(admin))
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

        audit = client.get("/audit-log/", params={"table_name": "user_profiles"}, headers=_bearer(admin)).json()
        assert len(audit) == 1

    def test_admin_cannot_demote_self(self, client):
        admin = _register(client, "priest@temple.org").json()["access_token"]
        admin_id = client.get("/auth/me", headers=_bearer(admin)).json()["id"]
        response = client.put(f"/users/{admin_id}/role", json={"role": "user"}, headers=_bearer(admin))
        assert response.status_code == 400

    def test_unknown_role(self, client):
        admin = _register(client, "priest@temple.org").json()["access_token"]
        assert client.put("/users/1/role", json={"role": "trustee"}, headers=_bearer(admin)).status_code == 422

    def test_users_cannot_list_users(self, client):
        _register(client, "priest@temple.org")
        visitor = _register(client, "visitor@temple.org").json()["access_token"]
        assert client.get("/users/", headers=_bearer(visitor)).status_code == 403


class TestDevoteeLink:

    def test_link_by_mobile(self, client, admin_headers):
        devotee = client.post("/devotees/", json={"first_name": "Suresh", "mobile_number": "9840012345"},
                              headers=admin_headers).json()
        token = _register(client, "suresh@example.com").json()["access_token"]

        result = client.post("/users/me/link-devotee", json={"mobile_number": "9840012345"}, headers=_bearer(token))
        assert result.json() == {"linked": True, "devotee_id": devotee["id"]}
        assert client.get("/auth/me", headers=_bearer(token)).json()["devotee_id"] == devotee["id"]

    def test_no_matching_devotee(self, client):
        token = _register(client, "suresh@example.com").json()["access_token"]
        result = client.post("/users/me/link-devotee", json={"mobile_number": "9000000001"}, headers=_bearer(token))
        assert result.json() == {"linked": False, "devotee_id": None}

    def test_admin_link_unknown_devotee(self, client):
        admin = _register(client, "priest@temple.org").json()["access_token"]
        response = client.put("/users/1/devotee", json={"devotee_id": 999}, headers=_bearer(admin))
        assert response.status_code == 400


class TestTenantIsolation:

    def test_token_rejected_for_other_tenant(self, client, admin_headers, accounting):
        token = _register(client, "someone@elsewhere.org", tenant_id="other-temple").json()["access_token"]
        response = client.get("/chart-of-accounts/", headers=_bearer(token))
        assert response.status_code == 403
        assert client.get("/chart-of-accounts/", headers=admin_headers).status_code == 200

    def test_token_works_for_own_tenant(self, client):
        token = _register(client, "someone@elsewhere.org", tenant_id="other-temple").json()["access_token"]
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}", "X-Tenant-ID": "other-temple"})
        assert response.status_code == 200
        assert response.json()["tenant_id"] == "other-temple"
