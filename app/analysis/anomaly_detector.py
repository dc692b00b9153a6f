"""
Increment anomaly detection for monthly category spending.

Compares the current month of each category against the mean of its most
recent preceding months and flags increases above a fixed threshold.
"""

import logging
from typing import List, Dict, Any, Optional

import numpy as np

from app.analysis.constants import category_label
from app.analysis.months import round_half_up
from app.core.config import settings

logger = logging.getLogger(__name__)


class IncrementAnomalyDetector:
    """
    Flags categories whose current-month spending exceeds their trailing
    baseline by more than the configured threshold.
    """

    def __init__(
        self,
        threshold: Optional[float] = None,
        baseline_months: Optional[int] = None,
    ):
        """
        Args:
            threshold: Fractional increase over the baseline required to flag
                       (strictly greater). Defaults to settings.
            baseline_months: Maximum number of preceding months averaged into
                             the baseline. Defaults to settings.
        """
        self.threshold = settings.BEHAVIOR_ANOMALY_THRESHOLD if threshold is None else threshold
        self.baseline_months = baseline_months or settings.BEHAVIOR_BASELINE_MONTHS

    def detect(
        self,
        trends: Dict[str, List[Dict[str, Any]]],
        current_month: str,
    ) -> List[Dict[str, Any]]:
        """
        Detect anomalies for ``current_month``.

        Categories without a current entry, without prior months, or with a
        zero baseline are skipped.

        Returns:
            Anomalies in category order, each with 'category', 'label',
            'current_total', 'avg_past', 'deviation_pct' and 'month'.
        """
        anomalies = []

        for category in sorted(trends):
            entries = trends[category]
            current_entry = next((e for e in entries if e["month"] == current_month), None)
            past_entries = [e for e in entries if e["month"] != current_month][-self.baseline_months:]

            if current_entry is None or not past_entries:
                logger.debug(f"No baseline for category {category} in {current_month}")
                continue

            avg_past = float(np.mean([e["total"] for e in past_entries]))
            if avg_past == 0:
                continue

            deviation = (current_entry["total"] - avg_past) / avg_past
            if deviation <= self.threshold:
                continue

            anomaly = {
                "category": category,
                "label": category_label(category),
                "current_total": current_entry["total"],
                "avg_past": round_half_up(avg_past, 2),
                "deviation_pct": round_half_up(deviation * 1000) / 10,
                "month": current_month,
            }
            anomalies.append(anomaly)
            logger.info(
                f"Anomaly detected: {category} {anomaly['deviation_pct']:+.1f}% "
                f"(current: {anomaly['current_total']:.2f}, avg: {anomaly['avg_past']:.2f})"
            )

        return anomalies
