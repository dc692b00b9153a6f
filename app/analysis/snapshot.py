"""
Serialization of the behavioral snapshot stored on the financial profile.

Other consumers (dashboards, prompt builders) read the last known risk state
from the profile without re-running the engine.
"""

import json
import logging
from typing import List, Dict, Any, Optional

from app.db.schemas import BehavioralSnapshot

logger = logging.getLogger(__name__)


def encode_behavioral_snapshot(
    trends: Dict[str, List[Dict[str, Any]]],
    recurring: List[Dict[str, Any]],
    metrics: Dict[str, Any],
) -> BehavioralSnapshot:
    return BehavioralSnapshot(
        category_trends=json.dumps(trends, ensure_ascii=False),
        monthly_deviation_score=metrics["behavioral_drift_index"],
        recurring_spike_pattern=json.dumps(recurring, ensure_ascii=False),
        behavioral_risk_level=metrics["behavioral_risk_level"],
    )


def _load_blob(raw: Optional[str], expected_type: type, field: str):
    if not raw:
        return expected_type()
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not decode stored {field}: {e}")
        return expected_type()
    if not isinstance(value, expected_type):
        logger.warning(f"Stored {field} has unexpected type {type(value).__name__}")
        return expected_type()
    return value


def decode_behavioral_snapshot(profile: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Read the persisted snapshot fields back into engine structures."""
    profile = profile or {}
    return {
        "category_trends": _load_blob(profile.get("category_trends"), dict, "category_trends"),
        "monthly_deviation_score": profile.get("monthly_deviation_score"),
        "recurring_spike_pattern": _load_blob(profile.get("recurring_spike_pattern"), list, "recurring_spike_pattern"),
        "behavioral_risk_level": profile.get("behavioral_risk_level"),
    }
