"""
Composite behavioral indicators.

The self-control indicator is a hand-tuned linear combination of penalties,
not a fitted model. Its weights come from settings; the risk cut points are
fixed because downstream alerting is tuned to them.
"""

import logging
from typing import List, Dict, Any, Optional

from app.analysis.months import round_half_up
from app.core.config import settings

logger = logging.getLogger(__name__)

# (upper bound, level), checked in order with strict less-than
RISK_LEVEL_CUTS = (
    (0.4, "alto"),
    (0.65, "moderado"),
    (0.85, "bajo"),
)
DEFAULT_RISK_LEVEL = "normal"


def classify_risk_level(self_control_indicator: float) -> str:
    for upper, level in RISK_LEVEL_CUTS:
        if self_control_indicator < upper:
            return level
    return DEFAULT_RISK_LEVEL


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(value, high))


class BehavioralMetricsCalculator:
    """Derives scalar behavioral indicators from trends, anomalies and spikes."""

    def __init__(
        self,
        drift_scale: Optional[float] = None,
        anomaly_weight: Optional[float] = None,
        anomaly_cap: Optional[float] = None,
        drift_weight: Optional[float] = None,
        spike_weight: Optional[float] = None,
    ):
        self.drift_scale = drift_scale or settings.BEHAVIOR_DRIFT_SCALE
        self.anomaly_weight = settings.SELF_CONTROL_ANOMALY_WEIGHT if anomaly_weight is None else anomaly_weight
        self.anomaly_cap = settings.SELF_CONTROL_ANOMALY_CAP if anomaly_cap is None else anomaly_cap
        self.drift_weight = settings.SELF_CONTROL_DRIFT_WEIGHT if drift_weight is None else drift_weight
        self.spike_weight = settings.SELF_CONTROL_SPIKE_WEIGHT if spike_weight is None else spike_weight

    def calculate(
        self,
        trends: Dict[str, List[Dict[str, Any]]],
        anomalies: List[Dict[str, Any]],
        recurring: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Compute the composite metrics.

        Returns:
            Dictionary with 'category_growth_rate' (percent),
            'behavioral_drift_index', 'recurring_spike_confidence',
            'self_control_indicator' (all three in [0, 1]) and
            'behavioral_risk_level'.
        """
        category_growth_rate = self._category_growth_rate(trends)

        drift_raw = sum(a["deviation_pct"] for a in anomalies) / self.drift_scale
        behavioral_drift_index = round_half_up(_clamp(drift_raw), 2)

        recurring_spike_confidence = max((r["confidence"] for r in recurring), default=0.0)

        anomaly_penalty = min(len(anomalies) * self.anomaly_weight, self.anomaly_cap)
        drift_penalty = behavioral_drift_index * self.drift_weight
        spike_penalty = recurring_spike_confidence * self.spike_weight
        self_control_indicator = round_half_up(
            _clamp(1 - anomaly_penalty - drift_penalty - spike_penalty), 2
        )

        metrics = {
            "category_growth_rate": category_growth_rate,
            "behavioral_drift_index": behavioral_drift_index,
            "recurring_spike_confidence": recurring_spike_confidence,
            "self_control_indicator": self_control_indicator,
            "behavioral_risk_level": classify_risk_level(self_control_indicator),
        }
        logger.debug(f"Behavioral metrics: {metrics}")
        return metrics

    @staticmethod
    def _category_growth_rate(trends: Dict[str, List[Dict[str, Any]]]) -> float:
        # Latest month only: a "current drift" signal, not a full-trend average
        latest = [abs(entries[-1]["growth_pct"]) for entries in trends.values() if len(entries) >= 2]
        if not latest:
            return 0.0
        return round_half_up(sum(latest) / len(latest), 1)
