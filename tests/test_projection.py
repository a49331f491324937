from datetime import datetime, timedelta, timezone

import pytest

from projection import (
    CompoundFrequency, InterestType, PacingStatus, TimeUnit, apply_goal_progress, classify_pacing,
    duration_in_years, goal_pacing, interest_schedule, months_until, project_interest,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_compound_monthly_projection():
    result = project_interest(10000, 4.5, 5, TimeUnit.YEARS, InterestType.COMPOUND, CompoundFrequency.MONTHLY)
    assert result.interest_type is InterestType.COMPOUND
    assert result.final_balance == pytest.approx(12517.96, abs=0.01)
    assert result.interest_earned == pytest.approx(2517.96, abs=0.01)
    assert result.simple_total == pytest.approx(12250)
    assert result.simple_interest == pytest.approx(2250)
    assert result.difference == pytest.approx(267.96, abs=0.01)


def test_simple_projection_reports_both_totals():
    result = project_interest(10000, 4.5, 5, interest_type="simple")
    assert result.final_balance == pytest.approx(12250)
    assert result.interest_earned == pytest.approx(2250)
    assert result.compound_total == pytest.approx(12517.96, abs=0.01)


@pytest.mark.parametrize("frequency,expected", [
    ("Annually", 12461.82),
    ("Monthly", 12517.96),
    ("Daily", 12523.05),
])
def test_compound_frequencies(frequency, expected):
    result = project_interest(10000, 4.5, 5, frequency=frequency)
    assert result.compound_total == pytest.approx(expected, abs=0.01)


def test_months_duration_matches_years():
    in_months = project_interest(10000, 4.5, 60, time_unit="months")
    in_years = project_interest(10000, 4.5, 5)
    assert in_months.final_balance == pytest.approx(in_years.final_balance)
    assert duration_in_years(18, "months") == pytest.approx(1.5)


@pytest.mark.parametrize("principal,rate,duration", [
    (0, 4.5, 5),
    (10000, 0, 5),
    (10000, 4.5, 0),
    (-100, 4.5, 5),
    ("abc", 4.5, 5),
    (10000, None, 5),
])
def test_non_positive_inputs_give_no_projection(principal, rate, duration):
    assert project_interest(principal, rate, duration) is None
    assert interest_schedule(principal, rate, duration) == []


def test_compounding_never_trails_simple_interest():
    for years in (0.5, 1, 3, 10):
        result = project_interest(2500, 7, years)
        assert result.compound_total >= result.simple_total - 1e-9


def test_interest_schedule_ends_on_exact_duration():
    points = interest_schedule(1000, 10, 2.5, frequency="Annually")
    assert [p.year for p in points] == [0, 1, 2, 2.5]
    assert points[0].simple_balance == pytest.approx(1000)
    assert points[1].compound_balance == pytest.approx(1100)
    assert points[2].simple_balance == pytest.approx(1200)
    assert points[-1].simple_balance == pytest.approx(1250)


def test_months_until():
    assert months_until(NOW + timedelta(days=90), NOW) == 3
    assert months_until(NOW + timedelta(days=91), NOW) == 4
    assert months_until(NOW - timedelta(days=10), NOW) == 0
    assert months_until(None, NOW) == 0
    assert months_until("2024-01-31T00:00:00Z", NOW) == 1


def goal(**overrides):
    base = {
        "name": "Car",
        "target_amount": 3000,
        "current_amount": 0,
        "target_date": NOW + timedelta(days=90),
        "monthly_contribution": 1000,
        "completed_at": None,
    }
    base.update(overrides)
    return base


@pytest.mark.parametrize("contribution,status", [
    (1000, PacingStatus.ON_TRACK),
    (950, PacingStatus.ON_TRACK),
    (900, PacingStatus.BEHIND),
    (750, PacingStatus.BEHIND),
    (700, PacingStatus.OFF_TRACK),
    (0, PacingStatus.OFF_TRACK),
])
def test_goal_pacing_status(contribution, status):
    pacing = goal_pacing(goal(monthly_contribution=contribution), NOW)
    assert pacing.months_remaining == 3
    assert pacing.amount_remaining == pytest.approx(3000)
    assert pacing.monthly_needed == pytest.approx(1000)
    assert pacing.status is status


def test_goal_pacing_progress_is_clamped():
    assert goal_pacing(goal(current_amount=1500), NOW).progress_percent == pytest.approx(50)
    over = goal_pacing(goal(current_amount=4500), NOW)
    assert over.progress_percent == 100
    assert over.amount_remaining == 0
    assert over.status is PacingStatus.ON_TRACK
    assert goal_pacing(goal(target_amount=0), NOW).progress_percent == 0


def test_goal_past_its_date_needs_nothing_per_month():
    pacing = goal_pacing(goal(target_date=NOW - timedelta(days=5)), NOW)
    assert pacing.months_remaining == 0
    assert pacing.monthly_needed == 0
    assert pacing.status is PacingStatus.ON_TRACK


def test_completed_goal_has_no_status():
    pacing = goal_pacing(goal(current_amount=3000, completed_at=NOW), NOW)
    assert pacing.completed is True
    assert pacing.status is None


def test_classify_pacing_boundaries():
    assert classify_pacing(75, 100) is PacingStatus.BEHIND
    assert classify_pacing(74.99, 100) is PacingStatus.OFF_TRACK
    assert classify_pacing(95, 100) is PacingStatus.ON_TRACK


def test_apply_goal_progress_stamps_completion_once():
    first = apply_goal_progress(goal(), 3000, now=NOW)
    assert first["current_amount"] == 3000
    assert first["completed_at"] == NOW

    later = NOW + timedelta(days=3)
    again = apply_goal_progress(first, 3500, now=later)
    assert again["completed_at"] == NOW

    lowered = apply_goal_progress(first, 100, now=later)
    assert lowered["completed_at"] == NOW
    assert lowered["current_amount"] == 100


def test_apply_goal_progress_below_target():
    updated = apply_goal_progress(goal(), 2999.99, now=NOW)
    assert updated["completed_at"] is None


def test_goal_already_at_target_completes_on_next_update():
    funded = goal(target_amount=1000, current_amount=1000)
    assert goal_pacing(funded, NOW).completed is False
    updated = apply_goal_progress(funded, 1000, now=NOW)
    assert updated["completed_at"] == NOW
    assert goal_pacing(updated, NOW).status is None


def test_totals_beyond_float_range_give_no_projection():
    assert project_interest(1000, 100, 2000, frequency="Daily") is None
    assert project_interest(1e308, 50, 10, interest_type="simple") is None
    assert interest_schedule(1000, 100, 900, frequency="Daily") == []


def test_schedule_length_is_capped():
    assert interest_schedule(1000, 0.01, 1e8) == []
    assert len(interest_schedule(1000, 0.01, 1000)) == 1001
