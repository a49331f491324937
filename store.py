"""
Client application state

``AppState`` is a plain object owned by the UI layer and passed by
reference. ``FinanceStore`` runs one request at a time, folds the outcome
into the state and returns a ``Result``; failures leave a generic message
on the affected slice instead of raising.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from aggregation import (
    TimeframeSummary, category_percentages, expenses_for_category_in_timeframe, summarize_timeframe,
)
from categories import normalize_category_id, recover_category
from client import PROFILE_KEY, ApiClient, ApiError
from currency import format_currency
from income import DEFAULT_INCOME_NAMES, merge_income_update, normalize_income
from projection import GoalPacing, goal_pacing

logger = logging.getLogger(__name__)


def default_profile() -> dict:
    return {
        "name": "",
        "profile_photo": None,
        "currency": "USD",
        "theme": "dark",
        "monthly_budget": None,
        "notifications_enabled": True,
        "language": "en",
        "haptic_feedback_enabled": True,
    }


@dataclass
class Slice:
    items: List[dict] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None


@dataclass
class UserState:
    token: Optional[str] = None
    profile: dict = field(default_factory=default_profile)
    loading: bool = False
    error: Optional[str] = None


@dataclass
class AppState:
    expenses: Slice = field(default_factory=Slice)
    income: Slice = field(default_factory=Slice)
    savings: Slice = field(default_factory=Slice)
    user: UserState = field(default_factory=UserState)


@dataclass(frozen=True)
class Result:
    ok: bool
    data: Any = None
    error: Optional[str] = None


def record_id(record: Optional[dict]) -> Optional[str]:
    if not record:
        return None
    value = record.get("id") or record.get("_id")
    return str(value) if value is not None else None


def _replace(items: List[dict], updated: dict) -> List[dict]:
    key = record_id(updated)
    return [{**it, **updated} if record_id(it) == key else it for it in items]


class FinanceStore:
    def __init__(self, api: ApiClient, state: Optional[AppState] = None):
        self.api = api
        self.state = state if state is not None else AppState()

    def _run(self, target, failure: str, request: Callable[[], Any], apply: Callable[[Any], Any],
             use_detail: bool = False) -> Result:
        target.loading = True
        target.error = None
        try:
            data = request()
        except ApiError as e:
            logger.error("%s: %s", failure, e)
            message = (e.detail if use_detail and e.detail else None) or failure
            target.loading = False
            target.error = message
            return Result(ok=False, error=message)
        value = apply(data)
        target.loading = False
        return Result(ok=True, data=value)

    # User
    def _cached_profile(self) -> Optional[dict]:
        cached = self.api.storage.get_item(PROFILE_KEY)
        if not cached:
            return None
        try:
            profile = json.loads(cached)
        except ValueError:
            logger.warning("ignoring unreadable cached profile")
            return None
        return profile if isinstance(profile, dict) else None

    def initialize_user(self) -> Result:
        def request():
            return self.api.get_or_create_user_token(), self._cached_profile()

        def apply(data):
            token, profile = data
            self.state.user.token = token
            if profile:
                self.state.user.profile = {**self.state.user.profile, **profile}
            return token

        return self._run(self.state.user, "Failed to initialize user token", request, apply)

    def update_profile(self, updates: dict) -> Result:
        merged = {**self.state.user.profile, **updates}

        def apply(saved):
            profile = {**merged, **(saved or {})}
            self.api.storage.set_item(PROFILE_KEY, json.dumps(profile))
            self.state.user.profile = profile
            return profile

        return self._run(self.state.user, "Failed to update profile", lambda: self.api.update_profile(merged), apply)

    def reset_all_app_data(self) -> Result:
        token = self.state.user.token
        self.api.storage.clear()
        self.state.expenses = Slice()
        self.state.income = Slice()
        self.state.savings = Slice()
        self.state.user = UserState(token=token)
        return Result(ok=True, data=True)

    def format_amount(self, amount: float) -> str:
        return format_currency(amount, self.state.user.profile.get("currency"))

    # Expenses
    def fetch_all_expenses(self) -> Result:
        def apply(payload):
            items = [{**e, "category": recover_category(e)} for e in payload or []]
            self.state.expenses.items = items
            return items

        return self._run(self.state.expenses, "Failed to fetch expenses", self.api.fetch_expenses, apply)

    def add_expense(self, expense: dict) -> Result:
        def apply(created):
            merged = {**created, "category": created.get("category") or expense.get("category") or "uncategorized"}
            self.state.expenses.items.append(merged)
            return merged

        return self._run(self.state.expenses, "Failed to add expense", lambda: self.api.create_expense(expense), apply)

    def update_expense(self, expense_id: str, update: dict) -> Result:
        def apply(updated):
            merged = {**updated, "category": normalize_category_id(updated.get("category") or update.get("category"))}
            self.state.expenses.items = _replace(self.state.expenses.items, merged)
            return merged

        return self._run(self.state.expenses, "Failed to update expense",
                         lambda: self.api.update_expense(expense_id, update), apply)

    def remove_expense(self, expense_id: str) -> Result:
        def apply(_):
            self.state.expenses.items = [e for e in self.state.expenses.items if record_id(e) != expense_id]
            return expense_id

        return self._run(self.state.expenses, "Failed to delete expense",
                         lambda: self.api.delete_expense(expense_id), apply)

    # Income
    def fetch_all_income(self) -> Result:
        def request():
            rows = self.api.fetch_income()
            if rows:
                return rows
            logger.info("[income] no data found, creating defaults")
            for name in DEFAULT_INCOME_NAMES:
                self.api.create_income({"name": name, "amount": 0})
            return self.api.fetch_income() or []

        def apply(rows):
            self.state.income.items = normalize_income(rows)
            return self.state.income.items

        return self._run(self.state.income, "Failed to fetch income", request, apply)

    def add_income(self, income: dict) -> Result:
        def apply(created):
            self.state.income.items = normalize_income([*self.state.income.items, created])
            return created

        return self._run(self.state.income, "Failed to add income", lambda: self.api.create_income(income), apply)

    def update_income(self, income_id: str, amount: float) -> Result:
        def apply(updated):
            self.state.income.items = merge_income_update(self.state.income.items, updated)
            return updated

        return self._run(self.state.income, "Failed to update income",
                         lambda: self.api.update_income(income_id, {"amount": amount}), apply, use_detail=True)

    # Savings goals
    def fetch_all_goals(self) -> Result:
        def apply(goals):
            self.state.savings.items = list(goals or [])
            return self.state.savings.items

        return self._run(self.state.savings, "Failed to fetch savings goals", self.api.fetch_savings_goals, apply)

    def add_goal(self, goal: dict) -> Result:
        def apply(created):
            self.state.savings.items.append(created)
            return created

        return self._run(self.state.savings, "Failed to create savings goal",
                         lambda: self.api.create_savings_goal(goal), apply)

    def _apply_goal(self, updated: dict) -> dict:
        key = record_id(updated)
        self.state.savings.items = [updated if record_id(g) == key else g for g in self.state.savings.items]
        return updated

    def update_goal(self, goal_id: str, update: dict) -> Result:
        return self._run(self.state.savings, "Failed to update savings goal",
                         lambda: self.api.update_savings_goal(goal_id, update), self._apply_goal)

    def update_goal_progress(self, goal_id: str, current_amount: float) -> Result:
        return self._run(self.state.savings, "Failed to update goal progress",
                         lambda: self.api.update_savings_goal_progress(goal_id, current_amount), self._apply_goal)

    def contribute_to_goal(self, goal_id: str, amount: float) -> Result:
        goal = self.find_goal(goal_id)
        if goal is None:
            return Result(ok=False, error="Goal not found")
        return self.update_goal_progress(goal_id, (goal.get("current_amount") or 0) + amount)

    def complete_goal(self, goal_id: str) -> Result:
        goal = self.find_goal(goal_id)
        if goal is None:
            return Result(ok=False, error="Goal not found")
        return self.update_goal_progress(goal_id, goal.get("target_amount") or 0)

    def remove_goal(self, goal_id: str) -> Result:
        def apply(_):
            self.state.savings.items = [g for g in self.state.savings.items if record_id(g) != goal_id]
            return goal_id

        return self._run(self.state.savings, "Failed to delete savings goal",
                         lambda: self.api.delete_savings_goal(goal_id), apply)

    # Selectors
    def find_goal(self, goal_id: str) -> Optional[dict]:
        return next((g for g in self.state.savings.items if record_id(g) == goal_id), None)

    def active_goals(self) -> List[dict]:
        return [g for g in self.state.savings.items if not g.get("completed_at")]

    def completed_goals(self) -> List[dict]:
        return [g for g in self.state.savings.items if g.get("completed_at")]

    def goal_pacing(self, goal_id: str, now: Optional[datetime] = None) -> Optional[GoalPacing]:
        goal = self.find_goal(goal_id)
        return goal_pacing(goal, now) if goal is not None else None

    def timeframe_summary(self, timeframe: str, now: Optional[datetime] = None) -> TimeframeSummary:
        return summarize_timeframe(self.state.expenses.items, timeframe, now)

    def category_breakdown(self, timeframe: str, now: Optional[datetime] = None):
        return category_percentages(self.state.expenses.items, timeframe, now)

    def category_expenses(self, timeframe: str, category: str, now: Optional[datetime] = None) -> List[dict]:
        return expenses_for_category_in_timeframe(self.state.expenses.items, timeframe, category, now)
