"""
Tests for recurring multi-month spending spikes.
"""
from app.analysis.recurring_detector import RecurringSpikeDetector
from app.analysis.trends import CategoryTrendAnalyzer


def detect(make_rows, series, start="2026-01"):
    trends, _, _ = CategoryTrendAnalyzer().analyze(make_rows(series, start=start))
    return RecurringSpikeDetector().detect(trends)


def test_single_spike_month_is_not_recurring(make_rows):
    assert detect(make_rows, {"gusto": [100, 100, 100, 100, 200]}) == []


def test_two_month_spike(make_rows):
    recurring = detect(make_rows, {"gusto": [100, 100, 100, 100, 200, 240]})

    assert len(recurring) == 1
    assert [m["month"] for m in recurring[0]["months"]] == ["2026-05", "2026-06"]
    assert recurring[0]["confidence"] == 0.5


def test_three_month_spike(make_rows):
    """Seven months where the last three each beat their trailing average."""
    recurring = detect(make_rows, {"gusto": [100, 100, 100, 100, 200, 210, 220]})

    assert len(recurring) == 1
    pattern = recurring[0]
    assert pattern["category"] == "gusto"
    assert pattern["label"] == "Ocio"
    assert [m["month"] for m in pattern["months"]] == ["2026-05", "2026-06", "2026-07"]
    assert pattern["months"][0]["deviation"] == 100.0
    assert pattern["confidence"] == 0.75


def test_confidence_is_capped(make_rows):
    recurring = detect(make_rows, {"gusto": [10, 10, 10, 20, 40, 80, 160, 320]})

    assert len(recurring[0]["months"]) == 5
    assert recurring[0]["confidence"] == 1.0


def test_separate_streaks_in_one_category(make_rows):
    recurring = detect(
        make_rows,
        {"necesidad": [100, 100, 100, 200, 250, 100, 100, 100, 100, 200, 300]},
        start="2025-01",
    )

    assert [[m["month"] for m in r["months"]] for r in recurring] == [
        ["2025-04", "2025-05"],
        ["2025-10", "2025-11"],
    ]


def test_requires_four_months_of_history(make_rows):
    assert detect(make_rows, {"gusto": [100, 200, 400]}) == []


def test_zero_baseline_never_spikes(make_rows):
    assert detect(make_rows, {"gusto": [0, 0, 0, 0, 0]}) == []
    assert detect(make_rows, {"gusto": [0, 0, 0, 50, 60]}) == []


def test_patterns_are_ordered_by_category(make_rows):
    recurring = detect(make_rows, {
        "necesidad": [100, 100, 100, 100, 200, 240],
        "gusto": [100, 100, 100, 100, 200, 240],
    })
    assert [r["category"] for r in recurring] == ["gusto", "necesidad"]
