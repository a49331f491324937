from datetime import date, datetime

import pytest

from timeframes import Timeframe, compute_previous_bounds, compute_timeframe_bounds, parse_timestamp

WEDNESDAY = datetime(2024, 5, 15, 12, 30)


def test_week_starts_on_monday():
    bounds = compute_timeframe_bounds(Timeframe.WEEK, WEDNESDAY)
    assert bounds.start == datetime(2024, 5, 13)
    assert bounds.end == datetime(2024, 5, 20)


def test_sunday_belongs_to_week_started_previous_monday():
    bounds = compute_timeframe_bounds("week", datetime(2024, 5, 19, 23, 59))
    assert bounds.start == datetime(2024, 5, 13)


def test_month_and_year_bounds():
    assert compute_timeframe_bounds("month", WEDNESDAY) == (datetime(2024, 5, 1), datetime(2024, 6, 1))
    assert compute_timeframe_bounds("month", datetime(2024, 12, 31)) == (datetime(2024, 12, 1), datetime(2025, 1, 1))
    assert compute_timeframe_bounds("year", WEDNESDAY) == (datetime(2024, 1, 1), datetime(2025, 1, 1))


def test_previous_bounds_end_where_current_starts():
    for tf in Timeframe:
        current = compute_timeframe_bounds(tf, WEDNESDAY)
        previous = compute_previous_bounds(tf, WEDNESDAY)
        assert previous.end == current.start
        assert previous.start < previous.end


def test_previous_month_crosses_year():
    assert compute_previous_bounds("month", datetime(2024, 1, 10)) == (datetime(2023, 12, 1), datetime(2024, 1, 1))
    assert compute_previous_bounds("week", WEDNESDAY) == (datetime(2024, 5, 6), datetime(2024, 5, 13))
    assert compute_previous_bounds("year", WEDNESDAY) == (datetime(2023, 1, 1), datetime(2024, 1, 1))


def test_bounds_are_half_open():
    bounds = compute_timeframe_bounds("week", WEDNESDAY)
    assert bounds.contains(datetime(2024, 5, 13))
    assert not bounds.contains(datetime(2024, 5, 20))


def test_unknown_timeframe_is_rejected():
    with pytest.raises(ValueError):
        compute_timeframe_bounds("fortnight", WEDNESDAY)


def test_parse_timestamp():
    assert parse_timestamp("2024-05-15T10:00:00") == datetime(2024, 5, 15, 10)
    assert parse_timestamp(date(2024, 5, 15)) == datetime(2024, 5, 15)
    assert parse_timestamp("2024-05-15T10:00:00Z").tzinfo is None
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp(12345) is None
