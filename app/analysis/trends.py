"""
Category trend analysis.

Turns monthly (month, category) expense totals into one chronological
series per category with month-over-month growth percentages.
"""

import logging
from collections import defaultdict
from typing import List, Dict, Any, Tuple

from app.analysis.months import month_span, round_half_up

logger = logging.getLogger(__name__)


class CategoryTrendAnalyzer:
    """Builds per-category growth series from aggregated monthly totals."""

    def analyze(
        self,
        rows: List[Dict[str, Any]],
    ) -> Tuple[Dict[str, List[Dict[str, Any]]], List[str], Dict[str, Dict[str, float]]]:
        """
        Compute month-over-month growth per category.

        Args:
            rows: Monthly totals with keys 'month' (YYYY-MM), 'category'
                  and 'total'. Duplicate (month, category) rows are summed.

        Returns:
            Tuple of (trends, months, monthly_data):
            - trends: category -> [{'month', 'total', 'growth_pct'}, ...]
            - months: every month key between the first and last observed
              month, ascending, without gaps
            - monthly_data: month -> {category -> total}
        """
        monthly_data = self._build_month_category_map(rows)
        if not monthly_data:
            return {}, [], {}

        observed = sorted(monthly_data)
        months = month_span(observed[0], observed[-1])
        categories = sorted({row["category"] for row in rows})

        trends = {}
        for category in categories:
            entries = []
            prev = None
            for month in months:
                total = monthly_data.get(month, {}).get(category, 0.0)
                if prev is None or prev == 0:
                    growth_pct = 0.0
                else:
                    growth_pct = (total - prev) / prev * 100
                entries.append({
                    "month": month,
                    "total": round_half_up(total, 2),
                    "growth_pct": round_half_up(growth_pct, 1),
                })
                prev = total
            trends[category] = entries

        logger.debug(f"Built trends for {len(categories)} categories over {len(months)} months")
        return trends, months, monthly_data

    @staticmethod
    def _build_month_category_map(rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, float]]:
        grouped = defaultdict(lambda: defaultdict(float))
        for row in rows:
            grouped[row["month"]][row["category"]] += float(row["total"])
        return {month: dict(totals) for month, totals in grouped.items()}
