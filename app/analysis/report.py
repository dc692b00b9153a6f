"""
Full behavioral report for a user.

Sequences trend analysis, anomaly and recurring-spike detection, composite
metrics, structural analysis and recommendations, then writes the derived
snapshot back to the profile. The snapshot write is best-effort: a failure
is logged and the report is still returned.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional

from app.analysis.anomaly_detector import IncrementAnomalyDetector
from app.analysis.behavioral_metrics import BehavioralMetricsCalculator
from app.analysis.metrics import metrics as service_metrics
from app.analysis.months import current_year_month, parse_year_month
from app.analysis.recommendations import SplitRecommendationSynthesizer
from app.analysis.recurring_detector import RecurringSpikeDetector
from app.analysis.snapshot import encode_behavioral_snapshot
from app.analysis.structural import analyze_financial_structure, detect_alerts
from app.analysis.trends import CategoryTrendAnalyzer
from app.core.config import settings

logger = logging.getLogger(__name__)


class UpstreamDataUnavailable(RuntimeError):
    """The store could not provide the data a report is built from."""


def has_declared_income(profile: Optional[Dict[str, Any]]) -> bool:
    return bool(profile and profile.get("onboarding_completed") and (profile.get("salary") or 0) > 0)


class BehavioralReportService:
    """
    Builds behavioral reports on top of a finance store.

    The store must provide the async methods ``get_financial_profile``,
    ``get_monthly_category_totals``, ``get_total_by_type`` and
    ``save_behavioral_snapshot`` (see ``FinanceRepository``).
    """

    def __init__(self, store, trend_months: Optional[int] = None):
        self.store = store
        self.trend_months = trend_months or settings.BEHAVIOR_TREND_MONTHS
        self.trend_analyzer = CategoryTrendAnalyzer()
        self.anomaly_detector = IncrementAnomalyDetector()
        self.recurring_detector = RecurringSpikeDetector()
        self.metrics_calculator = BehavioralMetricsCalculator()
        self.recommender = SplitRecommendationSynthesizer()

    async def get_full_behavioral_report(
        self,
        user_id: int,
        current_month: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run every analysis for ``user_id`` and persist the derived snapshot.

        Args:
            user_id: User identifier in the store
            current_month: Month being evaluated (YYYY-MM). Defaults to the
                           current UTC month.

        Returns:
            Report dictionary. Consumers must treat it as read-only.

        Raises:
            ValueError: If ``current_month`` is malformed
            UpstreamDataUnavailable: If the store fails while loading data
        """
        start_time = datetime.utcnow()
        current_month = current_month or current_year_month()
        year, month = parse_year_month(current_month)

        try:
            profile = await self.store.get_financial_profile(user_id)
            rows = await self.store.get_monthly_category_totals(user_id, self.trend_months, current_month)
            variable_income = await self.store.get_total_by_type(user_id, "income", year, month)
        except Exception as e:
            processing_time = (datetime.utcnow() - start_time).total_seconds()
            service_metrics.record_report(
                user_id=user_id,
                anomalies_count=0,
                recurring_count=0,
                processing_time=processing_time,
                success=False
            )
            logger.error(f"Failed to load financial data for user {user_id}: {e}", exc_info=True)
            raise UpstreamDataUnavailable(f"Financial data unavailable for user {user_id}") from e

        trends, months, monthly_data = self.trend_analyzer.analyze(rows)
        anomalies = self.anomaly_detector.detect(trends, current_month)
        recurring = self.recurring_detector.detect(trends)
        metrics = self.metrics_calculator.calculate(trends, anomalies, recurring)

        structural_analysis = None
        alerts = []
        if has_declared_income(profile):
            structural_analysis = analyze_financial_structure(profile)
            alerts = detect_alerts(structural_analysis)

        split_recommendations = self.recommender.generate(
            anomalies, recurring, metrics, structural_analysis
        )

        # Declared salary as entered; only the structural analysis normalizes by pay frequency
        fixed_income = profile["salary"] if has_declared_income(profile) else 0
        monthly_income = fixed_income + variable_income

        report = {
            "user_id": user_id,
            "current_month": current_month,
            "monthly_income": monthly_income,
            "trends": trends,
            "months": months,
            "monthly_data": monthly_data,
            "anomalies": anomalies,
            "recurring": recurring,
            "metrics": metrics,
            "structural_analysis": structural_analysis,
            "alerts": alerts,
            "split_recommendations": split_recommendations,
            "profile": profile,
        }

        try:
            await self.store.save_behavioral_snapshot(
                user_id, encode_behavioral_snapshot(trends, recurring, metrics)
            )
        except Exception as e:
            service_metrics.record_snapshot_failure()
            logger.error(f"Error persisting behavioral data for user {user_id}: {e}", exc_info=True)

        processing_time = (datetime.utcnow() - start_time).total_seconds()
        service_metrics.record_report(
            user_id=user_id,
            anomalies_count=len(anomalies),
            recurring_count=len(recurring),
            processing_time=processing_time,
            risk_level=metrics["behavioral_risk_level"],
            success=True
        )
        logger.info(
            f"Behavioral report for user {user_id} ({current_month}): "
            f"{len(anomalies)} anomalies, {len(recurring)} recurring patterns, "
            f"risk={metrics['behavioral_risk_level']}, processing_time={processing_time:.3f}s"
        )

        return report
