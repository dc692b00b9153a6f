"""
Split-adjustment recommendations.

Each rule is independent; the output order follows the rule order below,
not the order anomalies or patterns were found in.
"""

import logging
from typing import List, Dict, Any, Optional

from app.analysis.constants import NEEDS, WANTS
from app.analysis.months import round_half_up

logger = logging.getLogger(__name__)

NEEDS_INCOME_PCT_LIMIT = 60
LOW_SAVINGS_PERCENT = 0.15
HIGH_DEBT_INCOME_RATIO = 0.3
LOW_SELF_CONTROL = 0.5


class SplitRecommendationSynthesizer:
    """Turns detections and metrics into ordered recommendation messages."""

    def generate(
        self,
        anomalies: List[Dict[str, Any]],
        recurring: List[Dict[str, Any]],
        metrics: Dict[str, Any],
        structural_analysis: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        suggestions = []

        leisure_spike = self._find(anomalies, WANTS)
        leisure_recurring = self._find(recurring, WANTS)

        if leisure_recurring:
            suggestions.append(
                f"📉 Tu gasto en ocio ha crecido de forma recurrente "
                f"({len(leisure_recurring['months'])} meses consecutivos). "
                f"Considera reducir tu % variable del presupuesto."
            )
        elif leisure_spike:
            suggestions.append(
                f"⚠️ Tu gasto en ocio este mes es {leisure_spike['deviation_pct']}% superior al promedio. "
                f"Si continúa, conviene ajustar tu split."
            )

        needs_spike = self._find(anomalies, NEEDS)
        if needs_spike and structural_analysis:
            income = structural_analysis["monthly_income"]
            # Compared at the precision shown to the user
            needs_pct = round_half_up(needs_spike["current_total"] / income * 100, 1) if income > 0 else 0
            if needs_pct > NEEDS_INCOME_PCT_LIMIT:
                suggestions.append(
                    f"🔴 Tus necesidades representan {needs_pct:.1f}% del ingreso (ideal: 50%). "
                    f"Evalúa si tus ingresos son suficientes o si algún gasto fijo puede reducirse."
                )

        if structural_analysis and structural_analysis["savings_percent"] < LOW_SAVINGS_PERCENT:
            suggestions.append(
                f"💡 Tu ahorro actual es {structural_analysis['savings_percent'] * 100:.1f}%. "
                f"Prioriza aumentar tu fondo de emergencia antes de gastos variables."
            )

        if (
            structural_analysis
            and structural_analysis["debt_income_ratio"] > HIGH_DEBT_INCOME_RATIO
            and leisure_spike
        ):
            suggestions.append(
                f"🚨 Tu ratio deuda/ingreso es {structural_analysis['debt_income_ratio'] * 100:.1f}% "
                f"y tu gasto variable está en alza. Prioriza reducir la deuda antes de gastos de ocio."
            )

        if metrics["self_control_indicator"] < LOW_SELF_CONTROL:
            suggestions.append(
                f"⚡ Tu indicador de autocontrol financiero es bajo "
                f"({metrics['self_control_indicator'] * 100:.0f}%). "
                f"Se detecta un patrón de gasto impulsivo. Considera establecer límites diarios."
            )

        logger.debug(f"Generated {len(suggestions)} split recommendations")
        return suggestions

    @staticmethod
    def _find(items: List[Dict[str, Any]], category: str) -> Optional[Dict[str, Any]]:
        return next((item for item in items if item["category"] == category), None)
