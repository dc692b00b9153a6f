"""
Tests for the behavioral report orchestration.
"""
import asyncio
from unittest.mock import MagicMock

import pytest

from app.analysis import report as report_module
from app.analysis.months import current_year_month
from app.analysis.report import BehavioralReportService, UpstreamDataUnavailable, has_declared_income
from app.analysis.snapshot import decode_behavioral_snapshot

LEISURE_SPIKE = {"gusto": [100, 100, 100, 100, 200]}


def run_report(store, current_month="2026-05", user_id=1):
    return asyncio.run(BehavioralReportService(store).get_full_behavioral_report(user_id, current_month))


def test_report_without_profile(make_store, make_rows):
    store = make_store(rows=make_rows(LEISURE_SPIKE))
    report = run_report(store)

    assert report["user_id"] == 1
    assert report["current_month"] == "2026-05"
    assert report["months"] == ["2026-01", "2026-02", "2026-03", "2026-04", "2026-05"]
    assert len(report["anomalies"]) == 1
    assert report["recurring"] == []
    assert report["metrics"]["self_control_indicator"] == 0.55
    assert report["structural_analysis"] is None
    assert report["alerts"] == []
    assert report["monthly_income"] == 0
    assert report["profile"] is None
    assert len(report["split_recommendations"]) == 1
    assert "100.0% superior" in report["split_recommendations"][0]


def test_report_with_completed_profile(make_store, make_rows, completed_profile):
    store = make_store(profile=completed_profile, rows=make_rows(LEISURE_SPIKE), income=250.0)
    report = run_report(store)

    assert report["structural_analysis"]["monthly_income"] == 1000
    assert report["structural_analysis"]["savings_capacity"] == 200
    assert report["monthly_income"] == 1250.0
    assert report["alerts"] == []
    assert report["profile"] is completed_profile


def test_report_income_uses_declared_salary(make_store, completed_profile):
    completed_profile["payment_frequency"] = "quincenal"
    report = run_report(make_store(profile=completed_profile))

    assert report["monthly_income"] == 1000
    assert report["structural_analysis"]["monthly_income"] == 2000


def test_weekly_salary_plus_income_transactions(make_store, completed_profile):
    completed_profile.update(salary=500, payment_frequency="semanal")
    report = run_report(make_store(profile=completed_profile, income=100.0))

    assert report["monthly_income"] == 600.0
    assert report["structural_analysis"]["monthly_income"] == pytest.approx(2165.0)


def test_incomplete_onboarding_skips_structure(make_store, make_rows, completed_profile):
    completed_profile["onboarding_completed"] = False
    report = run_report(make_store(profile=completed_profile, rows=make_rows(LEISURE_SPIKE), income=80.0))

    assert report["structural_analysis"] is None
    assert report["alerts"] == []
    assert report["monthly_income"] == 80.0


@pytest.mark.parametrize("profile,expected", [
    (None, False),
    ({"onboarding_completed": True, "salary": 0}, False),
    ({"onboarding_completed": True, "salary": None}, False),
    ({"onboarding_completed": False, "salary": 900}, False),
    ({"onboarding_completed": True, "salary": 900}, True),
])
def test_has_declared_income(profile, expected):
    assert has_declared_income(profile) is expected


def test_empty_history(make_store):
    report = run_report(make_store())

    assert report["trends"] == {}
    assert report["months"] == []
    assert report["anomalies"] == []
    assert report["metrics"]["behavioral_risk_level"] == "normal"
    assert report["split_recommendations"] == []


def test_snapshot_is_persisted(make_store, make_rows):
    store = make_store(rows=make_rows({"gusto": [100, 100, 100, 100, 200, 210, 220]}))
    report = run_report(store, current_month="2026-07", user_id=7)

    assert len(store.saved) == 1
    user_id, snapshot = store.saved[0]
    assert user_id == 7

    decoded = decode_behavioral_snapshot(snapshot.dict())
    assert decoded["category_trends"] == report["trends"]
    assert decoded["recurring_spike_pattern"] == report["recurring"]
    assert decoded["monthly_deviation_score"] == 0.59
    assert decoded["behavioral_risk_level"] == "moderado"


def test_snapshot_failure_still_returns_report(make_store, make_rows, monkeypatch):
    mock_logger = MagicMock()
    monkeypatch.setattr(report_module, "logger", mock_logger)
    failures_before = report_module.service_metrics.snapshot_write_failures

    report = run_report(make_store(rows=make_rows(LEISURE_SPIKE), fail_on="save"))

    assert len(report["anomalies"]) == 1
    assert report_module.service_metrics.snapshot_write_failures == failures_before + 1
    mock_logger.error.assert_called_once()
    message = mock_logger.error.call_args[0][0]
    assert "Error persisting behavioral data for user 1" in message


@pytest.mark.parametrize("operation", ["profile", "totals", "income"])
def test_store_failure_raises(make_store, operation):
    with pytest.raises(UpstreamDataUnavailable) as exc_info:
        run_report(make_store(fail_on=operation))

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_store_failure_counts_as_failed_report(make_store):
    failed_before = report_module.service_metrics.failed_reports

    with pytest.raises(UpstreamDataUnavailable):
        run_report(make_store(fail_on="totals"))

    assert report_module.service_metrics.failed_reports == failed_before + 1


@pytest.mark.parametrize("month", ["2026-13", "2026-5", "May 2026", "x"])
def test_malformed_month(make_store, month):
    store = make_store()
    with pytest.raises(ValueError):
        run_report(store, current_month=month)
    assert store.saved == []


def test_defaults_to_current_month(make_store):
    store = make_store()
    report = asyncio.run(BehavioralReportService(store).get_full_behavioral_report(1))

    assert report["current_month"] == current_year_month()


def test_requests_six_month_window(make_store):
    store = make_store()
    run_report(store)
    assert store.requested_months_back == 6


def test_custom_window(make_store):
    store = make_store()
    asyncio.run(BehavioralReportService(store, trend_months=3).get_full_behavioral_report(1, "2026-05"))
    assert store.requested_months_back == 3
