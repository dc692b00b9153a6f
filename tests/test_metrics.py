"""
Tests for report generation counters.
"""
from app.analysis.metrics import BehavioralReportMetrics


def test_counts_successes_and_failures():
    metrics = BehavioralReportMetrics()
    metrics.record_report(1, anomalies_count=2, recurring_count=1, processing_time=0.2, risk_level="alto")
    metrics.record_report(2, anomalies_count=0, recurring_count=0, processing_time=0.4, success=False)
    metrics.record_snapshot_failure()

    stats = metrics.get_stats()
    assert stats["total_requests"] == 2
    assert stats["successful_reports"] == 1
    assert stats["failed_reports"] == 1
    assert stats["anomalies_detected"] == 2
    assert stats["recurring_patterns_detected"] == 1
    assert stats["snapshot_write_failures"] == 1
    assert stats["risk_levels"] == {"alto": 1}
    assert stats["success_rate"] == 0.5
    assert abs(stats["average_processing_time_seconds"] - 0.3) < 1e-9


def test_user_tracking_is_bounded():
    metrics = BehavioralReportMetrics(recent_users_window=3)
    for user_id in range(10):
        metrics.record_report(user_id, anomalies_count=0, recurring_count=0, processing_time=0.0)

    assert len(metrics.recent_users) == 3
    assert metrics.get_stats()["recent_unique_users"] == 3
    assert metrics.get_stats()["total_requests"] == 10


def test_repeat_users_count_once():
    metrics = BehavioralReportMetrics()
    for user_id in (5, 5, 6):
        metrics.record_report(user_id, anomalies_count=0, recurring_count=0, processing_time=0.0)

    assert metrics.get_stats()["recent_unique_users"] == 2


def test_empty_stats():
    stats = BehavioralReportMetrics().get_stats()
    assert stats["success_rate"] == 0.0
    assert stats["average_processing_time_seconds"] == 0.0
