"""
Tests for month-over-month category trends.
"""
from app.analysis.trends import CategoryTrendAnalyzer


def test_first_entry_has_zero_growth(make_rows):
    trends, _, _ = CategoryTrendAnalyzer().analyze(
        make_rows({"gusto": [250, 100], "necesidad": [80, 90]})
    )
    for entries in trends.values():
        assert entries[0]["growth_pct"] == 0


def test_growth_percentages(make_rows):
    trends, months, _ = CategoryTrendAnalyzer().analyze(make_rows({"gusto": [100, 150, 0, 50]}))

    assert months == ["2026-01", "2026-02", "2026-03", "2026-04"]
    assert [e["growth_pct"] for e in trends["gusto"]] == [0, 50.0, -100.0, 0]


def test_growth_is_rounded_to_one_decimal(make_rows):
    trends, _, _ = CategoryTrendAnalyzer().analyze(make_rows({"gusto": [300, 400]}))
    assert trends["gusto"][1]["growth_pct"] == 33.3


def test_missing_months_are_zero_filled():
    rows = [
        {"month": "2026-01", "category": "necesidad", "total": 100.0, "count": 2},
        {"month": "2026-03", "category": "necesidad", "total": 120.0, "count": 1},
        {"month": "2026-03", "category": "gusto", "total": 40.0, "count": 1},
    ]
    trends, months, _ = CategoryTrendAnalyzer().analyze(rows)

    assert months == ["2026-01", "2026-02", "2026-03"]
    assert [e["total"] for e in trends["necesidad"]] == [100.0, 0, 120.0]
    assert [e["total"] for e in trends["gusto"]] == [0, 0, 40.0]
    assert trends["necesidad"][2]["growth_pct"] == 0


def test_span_crosses_year_boundary(make_rows):
    _, months, _ = CategoryTrendAnalyzer().analyze(make_rows({"ahorro": [1, 2, 3]}, start="2025-11"))
    assert months == ["2025-11", "2025-12", "2026-01"]


def test_duplicate_rows_are_summed():
    rows = [
        {"month": "2026-02", "category": "gusto", "total": 10.5, "count": 1},
        {"month": "2026-02", "category": "gusto", "total": 4.5, "count": 1},
    ]
    trends, _, monthly_data = CategoryTrendAnalyzer().analyze(rows)

    assert trends["gusto"][0]["total"] == 15.0
    assert monthly_data == {"2026-02": {"gusto": 15.0}}


def test_categories_are_sorted(make_rows):
    trends, _, _ = CategoryTrendAnalyzer().analyze(
        make_rows({"necesidad": [1], "ahorro": [1], "gusto": [1]})
    )
    assert list(trends) == ["ahorro", "gusto", "necesidad"]


def test_empty_input():
    assert CategoryTrendAnalyzer().analyze([]) == ({}, [], {})
