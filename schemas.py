"""
Database Schemas for Prospera

Each Pydantic model corresponds to a MongoDB collection (lowercased class name).
Update models carry only optional fields; request handlers dump them with
``exclude_unset`` and drop nulls on required fields, so partial updates
never overwrite stored values.
"""
from typing import Annotated, Optional, List, Literal
from pydantic import BaseModel, BeforeValidator, Field, field_validator
from datetime import datetime

from categories import UNCATEGORIZED, normalize_category_id
from projection import MAX_SCHEDULE_YEARS, CompoundFrequency, InterestType, TimeUnit


def _strip(value):
    return value.strip() if isinstance(value, str) else value


Trimmed = Annotated[str, BeforeValidator(_strip)]
GoalIcon = Literal["car", "home", "airplane", "school", "heart-pulse", "piggy-bank", "star"]


class Expense(BaseModel):
    name: Trimmed = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    category: str = UNCATEGORIZED
    color: Optional[Trimmed] = None

    @field_validator("category", mode="before")
    @classmethod
    def canonical_category(cls, value):
        return normalize_category_id(value)


class ExpenseUpdate(BaseModel):
    name: Optional[Trimmed] = None
    amount: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    color: Optional[Trimmed] = None

    @field_validator("category", mode="before")
    @classmethod
    def canonical_category(cls, value):
        return normalize_category_id(value) if value is not None else None


class Income(BaseModel):
    name: Trimmed = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


class IncomeUpdate(BaseModel):
    name: Optional[Trimmed] = None
    amount: Optional[float] = Field(None, ge=0)


class SavingsGoal(BaseModel):
    name: Trimmed = Field(..., min_length=1)
    target_amount: float = Field(..., ge=0)
    current_amount: float = Field(0, ge=0)
    target_date: datetime
    icon: GoalIcon = "piggy-bank"
    color: Optional[Trimmed] = None
    monthly_contribution: float = Field(0, ge=0)

    @field_validator("icon", "current_amount", "monthly_contribution", mode="before")
    @classmethod
    def default_when_null(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class SavingsGoalUpdate(BaseModel):
    name: Optional[Trimmed] = None
    target_amount: Optional[float] = Field(None, ge=0)
    current_amount: Optional[float] = Field(None, ge=0)
    target_date: Optional[datetime] = None
    icon: Optional[GoalIcon] = None
    color: Optional[Trimmed] = None
    monthly_contribution: Optional[float] = Field(None, ge=0)


class GoalProgress(BaseModel):
    current_amount: float = Field(..., ge=0)


class UserProfile(BaseModel):
    name: str = ""
    profile_photo: Optional[Trimmed] = None
    currency: str = "USD"
    theme: Literal["dark", "light"] = "dark"
    monthly_budget: Optional[float] = Field(None, ge=0)
    notifications_enabled: bool = True
    language: str = "en"
    haptic_feedback_enabled: bool = True


class UserProfileUpdate(BaseModel):
    name: Optional[Trimmed] = None
    profile_photo: Optional[Trimmed] = None
    currency: Optional[Trimmed] = None
    theme: Optional[Literal["dark", "light"]] = None
    monthly_budget: Optional[float] = Field(None, ge=0)
    notifications_enabled: Optional[bool] = None
    language: Optional[Trimmed] = None
    haptic_feedback_enabled: Optional[bool] = None


class InterestRequest(BaseModel):
    principal: float
    annual_rate: float = Field(..., description="Percent, e.g. 4.5")
    duration: float = Field(..., le=MAX_SCHEDULE_YEARS * 12)
    time_unit: TimeUnit = TimeUnit.YEARS
    interest_type: InterestType = InterestType.COMPOUND
    frequency: CompoundFrequency = CompoundFrequency.MONTHLY


# Response models

class CategoryShare(BaseModel):
    category: str
    total: float
    percent: float


class TimeframeSummaryOut(BaseModel):
    timeframe: str
    start: datetime
    end: datetime
    total: float
    previous_total: float
    delta_percent: float
    categories: List[CategoryShare]


class IncomeOut(BaseModel):
    id: Optional[str] = None
    name: str
    amount: str
    created_at: Optional[str] = None


class GoalPacingOut(BaseModel):
    completed: bool
    progress_percent: float
    months_remaining: int
    amount_remaining: float
    monthly_needed: float
    status: Optional[str] = None


class InterestProjectionOut(BaseModel):
    interest_type: str
    final_balance: float
    interest_earned: float
    simple_interest: float
    simple_total: float
    compound_interest: float
    compound_total: float
    difference: float
