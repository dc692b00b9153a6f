"""
Recurring spike detection.

A spike month is one whose total exceeds the mean of the three months before
it by more than the anomaly threshold. Runs of consecutive spike months of
at least the minimum length are reported as recurring patterns, including a
run still open at the end of the series.
"""

import logging
from typing import List, Dict, Any, Optional

import numpy as np

from app.analysis.constants import category_label
from app.analysis.months import round_half_up
from app.core.config import settings

logger = logging.getLogger(__name__)


class RecurringSpikeDetector:
    """Finds sustained multi-month spending spikes per category."""

    def __init__(
        self,
        threshold: Optional[float] = None,
        baseline_months: Optional[int] = None,
        min_months: Optional[int] = None,
        full_confidence_months: Optional[int] = None,
    ):
        self.threshold = settings.BEHAVIOR_ANOMALY_THRESHOLD if threshold is None else threshold
        self.baseline_months = baseline_months or settings.BEHAVIOR_BASELINE_MONTHS
        self.min_months = min_months or settings.BEHAVIOR_RECURRING_MIN_MONTHS
        self.full_confidence_months = (
            full_confidence_months or settings.BEHAVIOR_RECURRING_FULL_CONFIDENCE_MONTHS
        )

    def detect(self, trends: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """
        Detect recurring spikes.

        Args:
            trends: category -> chronological trend entries

        Returns:
            Patterns ordered by category then by first month, each with
            'category', 'label', 'months' ([{'month', 'deviation'}]) and
            'confidence'.
        """
        recurring = []

        for category in sorted(trends):
            entries = trends[category]
            if len(entries) < self.baseline_months + 1:
                continue

            streak = []
            for i in range(self.baseline_months, len(entries)):
                window = entries[i - self.baseline_months:i]
                baseline = float(np.mean([e["total"] for e in window]))

                deviation = (entries[i]["total"] - baseline) / baseline if baseline != 0 else None
                if deviation is not None and deviation > self.threshold:
                    streak.append({
                        "month": entries[i]["month"],
                        "deviation": round_half_up(deviation * 1000) / 10,
                    })
                    continue

                if len(streak) >= self.min_months:
                    recurring.append(self._pattern(category, streak))
                streak = []

            if len(streak) >= self.min_months:
                recurring.append(self._pattern(category, streak))

        return recurring

    def _pattern(self, category: str, streak: List[Dict[str, Any]]) -> Dict[str, Any]:
        confidence = min(len(streak) / self.full_confidence_months, 1.0)
        logger.info(
            f"Recurring spike in {category}: {len(streak)} consecutive months "
            f"({streak[0]['month']} to {streak[-1]['month']}), confidence={confidence:.2f}"
        )
        return {
            "category": category,
            "label": category_label(category),
            "months": list(streak),
            "confidence": confidence,
        }
