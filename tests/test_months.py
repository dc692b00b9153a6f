"""
Tests for calendar-month helpers.
"""
from datetime import date, datetime

import pytest

from app.analysis.months import (
    current_year_month,
    month_bounds,
    month_span,
    parse_year_month,
    round_half_up,
    shift_year_month,
)


def test_parse_year_month():
    assert parse_year_month("2026-03") == (2026, 3)


@pytest.mark.parametrize("value", ["2026-00", "2026-13", "26-01", "2026/01", None])
def test_parse_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_year_month(value)


def test_current_year_month():
    assert current_year_month(datetime(2026, 2, 28, 23, 59)) == "2026-02"


@pytest.mark.parametrize("value,delta,expected", [
    ("2026-01", -1, "2025-12"),
    ("2026-12", 1, "2027-01"),
    ("2026-05", -5, "2025-12"),
    ("2026-05", 0, "2026-05"),
])
def test_shift_year_month(value, delta, expected):
    assert shift_year_month(value, delta) == expected


def test_month_span():
    assert month_span("2025-11", "2026-02") == ["2025-11", "2025-12", "2026-01", "2026-02"]
    assert month_span("2026-02", "2026-02") == ["2026-02"]
    assert month_span("2026-03", "2026-02") == []


def test_month_bounds():
    assert month_bounds("2026-12") == (date(2026, 12, 1), date(2027, 1, 1))


@pytest.mark.parametrize("value,ndigits,expected", [
    (2.5, 0, 3),
    (-2.5, 0, -2),
    (0.125, 2, 0.13),
    (33.333, 1, 33.3),
])
def test_round_half_up(value, ndigits, expected):
    assert round_half_up(value, ndigits) == expected
