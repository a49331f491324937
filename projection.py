"""
Interest and savings-goal projections

Pure arithmetic behind the interest calculator and the savings goal cards.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Union

from timeframes import parse_timestamp


class InterestType(str, Enum):
    SIMPLE = "simple"
    COMPOUND = "compound"


class TimeUnit(str, Enum):
    YEARS = "years"
    MONTHS = "months"


class CompoundFrequency(str, Enum):
    ANNUALLY = "Annually"
    SEMI_ANNUALLY = "Semi-Annually"
    QUARTERLY = "Quarterly"
    MONTHLY = "Monthly"
    DAILY = "Daily"

    @property
    def periods_per_year(self) -> int:
        return COMPOUNDS_PER_YEAR[self]


COMPOUNDS_PER_YEAR = {
    CompoundFrequency.ANNUALLY: 1,
    CompoundFrequency.SEMI_ANNUALLY: 2,
    CompoundFrequency.QUARTERLY: 4,
    CompoundFrequency.MONTHLY: 12,
    CompoundFrequency.DAILY: 365,
}


MAX_SCHEDULE_YEARS = 1000


class PacingStatus(str, Enum):
    ON_TRACK = "On Track"
    BEHIND = "Behind"
    OFF_TRACK = "Off Track"


@dataclass(frozen=True)
class InterestProjection:
    interest_type: InterestType
    final_balance: float
    interest_earned: float
    simple_interest: float
    simple_total: float
    compound_interest: float
    compound_total: float
    difference: float


@dataclass(frozen=True)
class SchedulePoint:
    year: float
    simple_balance: float
    compound_balance: float


@dataclass(frozen=True)
class GoalPacing:
    completed: bool
    progress_percent: float
    months_remaining: int
    amount_remaining: float
    monthly_needed: float
    status: Optional[PacingStatus]


def _number(value) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def duration_in_years(duration, unit: Union[TimeUnit, str] = TimeUnit.YEARS) -> float:
    duration = _number(duration)
    return duration if TimeUnit(unit) is TimeUnit.YEARS else duration / 12


def simple_total(principal: float, rate: float, years: float) -> float:
    return principal + principal * rate * years


def compound_total(principal: float, rate: float, years: float, periods_per_year: int) -> float:
    try:
        return principal * (1 + rate / periods_per_year) ** (periods_per_year * years)
    except OverflowError:
        return math.inf


def project_interest(principal, annual_rate, duration, time_unit=TimeUnit.YEARS,
                     interest_type=InterestType.COMPOUND,
                     frequency=CompoundFrequency.MONTHLY) -> Optional[InterestProjection]:
    """Project simple and compound growth of a principal.

    ``annual_rate`` is a percentage (4.5 means 4.5%). Returns None when the
    principal, rate or duration is not positive, or when a total leaves the
    float range.
    """
    interest_type = InterestType(interest_type)
    n = CompoundFrequency(frequency).periods_per_year
    p = _number(principal)
    r = _number(annual_rate) / 100
    t = duration_in_years(duration, time_unit)
    if p <= 0 or r <= 0 or t <= 0:
        return None

    total_simple = simple_total(p, r, t)
    total_compound = compound_total(p, r, t, n)
    if not (math.isfinite(total_simple) and math.isfinite(total_compound)):
        return None
    simple_interest = total_simple - p
    compound_interest = total_compound - p
    if interest_type is InterestType.SIMPLE:
        final, earned = total_simple, simple_interest
    else:
        final, earned = total_compound, compound_interest

    return InterestProjection(
        interest_type=interest_type,
        final_balance=final,
        interest_earned=earned,
        simple_interest=simple_interest,
        simple_total=total_simple,
        compound_interest=compound_interest,
        compound_total=total_compound,
        difference=total_compound - total_simple,
    )


def interest_schedule(principal, annual_rate, duration, time_unit=TimeUnit.YEARS,
                      frequency=CompoundFrequency.MONTHLY) -> List[SchedulePoint]:
    """Year-by-year balances for both interest types, ending on the exact duration.

    Durations beyond MAX_SCHEDULE_YEARS give an empty schedule.
    """
    n = CompoundFrequency(frequency).periods_per_year
    p = _number(principal)
    r = _number(annual_rate) / 100
    t = duration_in_years(duration, time_unit)
    if p <= 0 or r <= 0 or t <= 0 or t > MAX_SCHEDULE_YEARS:
        return []
    if not math.isfinite(compound_total(p, r, t, n)):
        return []

    years = [float(y) for y in range(0, int(math.floor(t)) + 1)]
    if years[-1] < t:
        years.append(t)
    return [SchedulePoint(y, simple_total(p, r, y), compound_total(p, r, y, n)) for y in years]


def _utc(value) -> Optional[datetime]:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.astimezone(timezone.utc)


def months_until(target_date, now: Optional[datetime] = None) -> int:
    target = _utc(target_date)
    if target is None:
        return 0
    now = _utc(now) if now is not None else datetime.now(timezone.utc)
    remaining = (target - now) / timedelta(days=30)
    return max(0, math.ceil(remaining))


def is_completed(goal: dict) -> bool:
    return bool(goal.get("completed_at"))


def classify_pacing(contribution: float, monthly_needed: float) -> PacingStatus:
    if contribution < monthly_needed * 0.75:
        return PacingStatus.OFF_TRACK
    if contribution < monthly_needed * 0.95:
        return PacingStatus.BEHIND
    return PacingStatus.ON_TRACK


def goal_pacing(goal: dict, now: Optional[datetime] = None) -> GoalPacing:
    target = _number(goal.get("target_amount"))
    current = _number(goal.get("current_amount"))
    completed = is_completed(goal)

    progress = current / target * 100 if target > 0 else 0.0
    months = months_until(goal.get("target_date"), now)
    remaining = max(0.0, target - current)
    needed = remaining / months if months > 0 else 0.0

    status = None
    if not completed:
        status = PacingStatus.ON_TRACK
        if needed > 0:
            status = classify_pacing(_number(goal.get("monthly_contribution")), needed)

    return GoalPacing(
        completed=completed,
        progress_percent=min(100.0, max(0.0, progress)),
        months_remaining=months,
        amount_remaining=remaining,
        monthly_needed=needed,
        status=status,
    )


def apply_goal_progress(goal: dict, current_amount: float, now: Optional[datetime] = None) -> dict:
    """Return a copy of the goal with new progress; completion is stamped once."""
    updated = dict(goal)
    updated["current_amount"] = current_amount
    if current_amount >= _number(goal.get("target_amount")) and not goal.get("completed_at"):
        updated["completed_at"] = now or datetime.now(timezone.utc)
    return updated
