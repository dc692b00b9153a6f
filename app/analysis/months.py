"""
Calendar-month helpers shared by the behavioral engine and the store.

Months are represented as ``YYYY-MM`` strings so they sort chronologically
as plain text.
"""

import math
import re
from datetime import date, datetime
from typing import List, Optional, Tuple

YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def current_year_month(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"{now.year}-{now.month:02d}"


def parse_year_month(value: str) -> Tuple[int, int]:
    if not isinstance(value, str) or not YEAR_MONTH_PATTERN.match(value):
        raise ValueError(f"Invalid month key: {value!r} (expected YYYY-MM)")
    year, month = value.split("-")
    return int(year), int(month)


def format_year_month(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def shift_year_month(value: str, delta: int) -> str:
    year, month = parse_year_month(value)
    index = year * 12 + (month - 1) + delta
    return format_year_month(index // 12, index % 12 + 1)


def month_span(first: str, last: str) -> List[str]:
    """Every month key from ``first`` to ``last`` inclusive."""
    if first > last:
        return []
    months = [first]
    while months[-1] != last:
        months.append(shift_year_month(months[-1], 1))
    return months


def month_bounds(value: str) -> Tuple[date, date]:
    """First day of the month and first day of the following month."""
    year, month = parse_year_month(value)
    next_year, next_month = parse_year_month(shift_year_month(value, 1))
    return date(year, month, 1), date(next_year, next_month, 1)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with .5 going up, the way currency figures are shown to users."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
