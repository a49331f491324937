"""
Expense aggregation

Derived data over a flat list of expense documents for a selected
timeframe: category totals, percentages and the change against the
previous period. All functions are pure; records without a usable
timestamp or with a non-numeric amount are skipped.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from categories import normalize_category_id
from timeframes import Timeframe, TimeframeBounds, compute_previous_bounds, compute_timeframe_bounds, parse_timestamp


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float
    percent: float = 0.0


@dataclass(frozen=True)
class TimeframeSummary:
    timeframe: str
    start: datetime
    end: datetime
    total: float
    previous_total: float
    delta_percent: float
    categories: List[CategoryTotal] = field(default_factory=list)


def expense_timestamp(expense) -> Optional[datetime]:
    if not isinstance(expense, dict):
        return None
    return parse_timestamp(expense.get("created_at") or expense.get("date"))


def expense_amount(expense) -> Optional[float]:
    raw = expense.get("amount")
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _in_bounds(expenses: Iterable, bounds: TimeframeBounds) -> List[dict]:
    selected = []
    for e in expenses or []:
        moment = expense_timestamp(e)
        if moment is None or not bounds.contains(moment):
            continue
        if expense_amount(e) is None:
            continue
        selected.append(e)
    return selected


def _sum(expenses: Iterable[dict]) -> float:
    return sum(expense_amount(e) for e in expenses)


def expenses_in_timeframe(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> List[dict]:
    return _in_bounds(expenses, compute_timeframe_bounds(timeframe, now))


def category_totals(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> List[CategoryTotal]:
    """Totals per normalized category, in first-encounter order."""
    totals: Dict[str, float] = {}
    for e in expenses_in_timeframe(expenses, timeframe, now):
        cat = normalize_category_id(e.get("category"))
        totals[cat] = totals.get(cat, 0.0) + expense_amount(e)
    return [CategoryTotal(category=cat, total=total) for cat, total in totals.items()]


def sorted_category_totals(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> List[CategoryTotal]:
    return sorted(category_totals(expenses, timeframe, now), key=lambda t: t.total, reverse=True)


def timeframe_total(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> float:
    return _sum(expenses_in_timeframe(expenses, timeframe, now))


def category_percentages(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> List[CategoryTotal]:
    totals = sorted_category_totals(expenses, timeframe, now)
    grand_total = sum(t.total for t in totals)
    if grand_total <= 0:
        return [CategoryTotal(t.category, t.total, 0.0) for t in totals]
    return [CategoryTotal(t.category, t.total, t.total / grand_total * 100) for t in totals]


def expenses_for_category_in_timeframe(expenses: Iterable, timeframe, category: Optional[str],
                                       now: Optional[datetime] = None) -> List[dict]:
    target = normalize_category_id(category)
    matching = [e for e in expenses_in_timeframe(expenses, timeframe, now)
                if normalize_category_id(e.get("category")) == target]
    return sorted(matching, key=expense_timestamp, reverse=True)


def previous_period_total(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> float:
    return _sum(_in_bounds(expenses, compute_previous_bounds(timeframe, now)))


def delta_percent(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def summarize_timeframe(expenses: Iterable, timeframe, now: Optional[datetime] = None) -> TimeframeSummary:
    expenses = list(expenses or [])
    bounds = compute_timeframe_bounds(timeframe, now)
    current = timeframe_total(expenses, timeframe, now)
    previous = previous_period_total(expenses, timeframe, now)
    return TimeframeSummary(
        timeframe=Timeframe(timeframe).value,
        start=bounds.start,
        end=bounds.end,
        total=current,
        previous_total=previous,
        delta_percent=delta_percent(current, previous),
        categories=category_percentages(expenses, timeframe, now),
    )
