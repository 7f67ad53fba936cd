"""
Temple Management API - Test Configuration

Runs the app against an in-memory SQLite database. Every test gets freshly
created tables; tokens are signed with the app's own secret.
"""

import os
import tempfile
from datetime import date

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="temple-logs-")
os.environ.pop("S3_BUCKET_NAME", None)

import pytest
from fastapi.testclient import TestClient

from database import Base, engine, SessionLocal, get_db
from main import app
from crud import financial_settings as crud_settings
from crud import financial_periods as crud_periods
from crud import chart_of_accounts as crud_accounts
from utils.auth_utils import create_access_token

TENANT_ID = "temple-1"
OTHER_TENANT_ID = "temple-2"
ADMIN_EMAIL = "admin@temple.org"


@pytest.fixture(autouse=True)
def fresh_tables():
    """Drop and recreate every table around each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(user_id: int = 1, email: str = ADMIN_EMAIL, groups=("admin",), tenant_id: str = TENANT_ID) -> str:
    return create_access_token({
        "sub": email,
        "email": email,
        "user_id": user_id,
        "tenant_id": tenant_id,
        "groups": list(groups),
    })


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}", "X-Tenant-ID": TENANT_ID}


@pytest.fixture
def user_headers():
    token = make_token(user_id=2, email="devotee@example.com", groups=("user",))
    return {"Authorization": f"Bearer {token}", "X-Tenant-ID": TENANT_ID}


@pytest.fixture
def accounting(db):
    """Default chart, settings and an open period for the current financial year."""
    settings = crud_settings.get_financial_settings(db, TENANT_ID)
    period = crud_periods.ensure_current_year_period(db, TENANT_ID, ADMIN_EMAIL)
    return {"settings": settings, "period": period, "today": date.today()}


def account(db, code: str, tenant_id: str = TENANT_ID):
    db.expire_all()
    return crud_accounts.get_account_by_code(db, code, tenant_id)
