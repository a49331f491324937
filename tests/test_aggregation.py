from datetime import datetime

import pytest

from aggregation import (
    category_percentages, category_totals, delta_percent, expenses_for_category_in_timeframe,
    expenses_in_timeframe, previous_period_total, sorted_category_totals, summarize_timeframe,
    timeframe_total,
)
from timeframes import Timeframe

NOW = datetime(2024, 5, 15, 12, 0)


def sample_expenses():
    return [
        {"id": "e1", "name": "Lunch", "amount": 50, "category": "food", "created_at": datetime(2024, 5, 14, 13)},
        {"id": "e2", "name": "Power", "amount": 100, "category": "bills", "created_at": "2024-05-02T09:00:00"},
        {"id": "e3", "name": "Shoes", "amount": 30, "category": "shopping", "created_at": datetime(2024, 5, 13)},
        {"id": "e4", "name": "Dinner", "amount": 20, "category": "food", "created_at": datetime(2024, 5, 20)},
        {"id": "e5", "name": "Train", "amount": 80, "category": "transport", "created_at": datetime(2024, 4, 20)},
        {"id": "e6", "name": "No date", "amount": 999, "category": "food"},
        {"id": "e7", "name": "Bad amount", "amount": "abc", "category": "food", "created_at": datetime(2024, 5, 14)},
        {"id": "e8", "name": "Blank", "amount": None, "category": None, "created_at": datetime(2024, 5, 10)},
        {"id": "e9", "name": "Gym", "amount": 40, "category": "health", "date": "2024-05-03"},
        None,
    ]


def test_week_window_is_half_open():
    ids = [e["id"] for e in expenses_in_timeframe(sample_expenses(), "week", NOW)]
    assert sorted(ids) == ["e1", "e3"]
    assert timeframe_total(sample_expenses(), "week", NOW) == 80


def test_month_category_totals_sorted_descending():
    totals = sorted_category_totals(sample_expenses(), "month", NOW)
    assert [(t.category, t.total) for t in totals] == [
        ("bills-utilities", 100),
        ("food", 70),
        ("health-fitness", 40),
        ("shopping", 30),
        ("uncategorized", 0),
    ]


def test_category_totals_keep_encounter_order():
    totals = category_totals(sample_expenses(), "month", NOW)
    assert [t.category for t in totals][:3] == ["food", "bills-utilities", "shopping"]


def test_percentages():
    shares = category_percentages(sample_expenses(), "month", NOW)
    by_cat = {s.category: s.percent for s in shares}
    assert by_cat["bills-utilities"] == pytest.approx(100 / 240 * 100)
    assert by_cat["uncategorized"] == 0
    assert sum(by_cat.values()) == pytest.approx(100)


def test_percentages_are_zero_when_total_is_zero():
    expenses = [
        {"amount": 0, "category": "food", "created_at": datetime(2024, 5, 14)},
        {"amount": 0, "category": "home", "created_at": datetime(2024, 5, 14)},
    ]
    shares = category_percentages(expenses, "week", NOW)
    assert [s.percent for s in shares] == [0, 0]


@pytest.mark.parametrize("timeframe", list(Timeframe))
def test_category_totals_partition_timeframe_total(timeframe):
    expenses = sample_expenses()
    totals = category_totals(expenses, timeframe, NOW)
    assert sum(t.total for t in totals) == pytest.approx(timeframe_total(expenses, timeframe, NOW))
    shares = category_percentages(expenses, timeframe, NOW)
    if timeframe_total(expenses, timeframe, NOW) > 0:
        assert sum(s.percent for s in shares) == pytest.approx(100)


def test_expenses_for_category_newest_first():
    rows = expenses_for_category_in_timeframe(sample_expenses(), "month", "food", NOW)
    assert [r["id"] for r in rows] == ["e4", "e1"]
    rows = expenses_for_category_in_timeframe(sample_expenses(), "month", "utilities", NOW)
    assert [r["id"] for r in rows] == ["e2"]


def test_previous_period_totals():
    assert previous_period_total(sample_expenses(), "month", NOW) == 80
    assert previous_period_total(sample_expenses(), "week", NOW) == 0
    assert previous_period_total(sample_expenses(), "year", NOW) == 0


def test_delta_percent():
    assert delta_percent(0, 0) == 0
    assert delta_percent(100, 0) == 100
    assert delta_percent(150, 100) == 50
    assert delta_percent(50, 100) == -50


def test_summarize_timeframe():
    summary = summarize_timeframe(sample_expenses(), Timeframe.MONTH, NOW)
    assert summary.timeframe == "month"
    assert summary.start == datetime(2024, 5, 1)
    assert summary.total == 240
    assert summary.previous_total == 80
    assert summary.delta_percent == pytest.approx(200)
    assert summary.categories[0].category == "bills-utilities"

    weekly = summarize_timeframe(sample_expenses(), "week", NOW)
    assert weekly.delta_percent == 100


def test_empty_input():
    summary = summarize_timeframe([], "year", NOW)
    assert summary.total == 0
    assert summary.delta_percent == 0
    assert summary.categories == []
    assert timeframe_total(None, "week", NOW) == 0
