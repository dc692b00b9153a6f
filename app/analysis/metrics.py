"""
Metrics and observability for behavioral report generation.
"""

from collections import Counter, deque
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

# Distinct-user stats cover only this many most recent reports
RECENT_USERS_WINDOW = 1000


class BehavioralReportMetrics:
    """Track metrics for behavioral report operations."""

    def __init__(self, recent_users_window: int = RECENT_USERS_WINDOW):
        self.total_requests = 0
        self.successful_reports = 0
        self.failed_reports = 0
        self.anomalies_detected = 0
        self.recurring_patterns_detected = 0
        self.snapshot_write_failures = 0
        self.total_processing_time = 0.0
        self.recent_users = deque(maxlen=recent_users_window)
        self.risk_levels = Counter()

    def record_report(
        self,
        user_id: int,
        anomalies_count: int,
        recurring_count: int,
        processing_time: float,
        risk_level: str = None,
        success: bool = True
    ):
        """Record a report generation."""
        self.total_requests += 1
        self.recent_users.append(user_id)
        self.total_processing_time += processing_time

        if success:
            self.successful_reports += 1
            self.anomalies_detected += anomalies_count
            self.recurring_patterns_detected += recurring_count
            if risk_level:
                self.risk_levels[risk_level] += 1
        else:
            self.failed_reports += 1

        logger.info(
            f"Metrics: requests={self.total_requests}, "
            f"success={self.successful_reports}, "
            f"failures={self.failed_reports}, "
            f"anomalies={self.anomalies_detected}, "
            f"avg_time={self.get_average_processing_time():.3f}s"
        )

    def record_snapshot_failure(self):
        self.snapshot_write_failures += 1

    def get_average_processing_time(self) -> float:
        """Get average processing time in seconds."""
        if self.total_requests == 0:
            return 0.0
        return self.total_processing_time / self.total_requests

    def get_stats(self) -> Dict[str, Any]:
        """Get current statistics."""
        return {
            'total_requests': self.total_requests,
            'successful_reports': self.successful_reports,
            'failed_reports': self.failed_reports,
            'anomalies_detected': self.anomalies_detected,
            'recurring_patterns_detected': self.recurring_patterns_detected,
            'snapshot_write_failures': self.snapshot_write_failures,
            'recent_unique_users': len(set(self.recent_users)),
            'risk_levels': dict(self.risk_levels),
            'average_processing_time_seconds': self.get_average_processing_time(),
            'success_rate': (
                self.successful_reports / self.total_requests
                if self.total_requests > 0 else 0.0
            )
        }


# Global metrics instance
metrics = BehavioralReportMetrics()
