"""
Shared test configuration.

The database URL must point at a throwaway SQLite file before the app
modules are imported, since settings and the engine are built at import.
"""
import os
import tempfile
from datetime import datetime, timedelta

_TEST_DIR = tempfile.mkdtemp(prefix="behavior-service-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.analysis.months import shift_year_month
from app.core.config import settings


class FakeStore:
    """In-memory stand-in for FinanceRepository."""

    def __init__(self, profile=None, rows=None, income=0.0, fail_on=None):
        self.profile = profile
        self.rows = rows or []
        self.income = income
        self.fail_on = fail_on
        self.saved = []
        self.requested_months_back = None

    def _maybe_fail(self, operation):
        if self.fail_on == operation:
            raise RuntimeError(f"{operation} failed")

    async def get_financial_profile(self, user_id):
        self._maybe_fail("profile")
        return self.profile

    async def get_monthly_category_totals(self, user_id, months_back, current_month):
        self._maybe_fail("totals")
        self.requested_months_back = months_back
        return list(self.rows)

    async def get_total_by_type(self, user_id, type, year, month):
        self._maybe_fail("income")
        return self.income

    async def save_behavioral_snapshot(self, user_id, snapshot):
        self._maybe_fail("save")
        self.saved.append((user_id, snapshot))


def build_rows(series, start="2026-01"):
    """Monthly total rows for {category: [total, ...]} starting at ``start``."""
    rows = []
    for category, totals in series.items():
        for offset, total in enumerate(totals):
            rows.append({
                "month": shift_year_month(start, offset),
                "category": category,
                "total": total,
                "count": 1,
            })
    return rows


@pytest.fixture
def make_rows():
    return build_rows


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def completed_profile():
    return {
        "user_id": 1,
        "salary": 1000.0,
        "payment_frequency": "mensual",
        "onboarding_completed": True,
        "transport_cost": 100.0,
        "food_cost": 200.0,
        "services_cost": 50.0,
        "study_cost": 0.0,
        "debt_monthly": 150.0,
        "debt_total": 3000.0,
        "leisure_cost": 300.0,
        "is_student": False,
    }


def make_token(expires_in=timedelta(minutes=5), **claims):
    payload = {
        "sub": "chat-bot",
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": datetime.utcnow() + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def expired_auth_headers():
    return {"Authorization": f"Bearer {make_token(expires_in=timedelta(minutes=-5))}"}


@pytest.fixture(scope="module")
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token_factory():
    return make_token
