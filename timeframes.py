from datetime import date, datetime, timedelta
from enum import Enum
from typing import NamedTuple, Optional, Union


class Timeframe(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TimeframeBounds(NamedTuple):
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a stored timestamp into naive local time, or None if unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return _local_naive(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None


def _start_of_week(d: datetime) -> datetime:
    # Monday = 0
    return datetime(d.year, d.month, d.day) - timedelta(days=d.weekday())


def _start_of_month(d: datetime) -> datetime:
    return datetime(d.year, d.month, 1)


def _start_of_year(d: datetime) -> datetime:
    return datetime(d.year, 1, 1)


def _add_months(d: datetime, months: int) -> datetime:
    index = d.year * 12 + (d.month - 1) + months
    return d.replace(year=index // 12, month=index % 12 + 1)


def _now(now: Optional[datetime]) -> datetime:
    return _local_naive(now) if now is not None else datetime.now()


def compute_timeframe_bounds(timeframe: Union[Timeframe, str], now: Optional[datetime] = None) -> TimeframeBounds:
    timeframe = Timeframe(timeframe)
    now = _now(now)
    if timeframe is Timeframe.WEEK:
        start = _start_of_week(now)
        return TimeframeBounds(start, start + timedelta(days=7))
    if timeframe is Timeframe.MONTH:
        start = _start_of_month(now)
        return TimeframeBounds(start, _add_months(start, 1))
    start = _start_of_year(now)
    return TimeframeBounds(start, start.replace(year=start.year + 1))


def compute_previous_bounds(timeframe: Union[Timeframe, str], now: Optional[datetime] = None) -> TimeframeBounds:
    timeframe = Timeframe(timeframe)
    current = compute_timeframe_bounds(timeframe, now)
    if timeframe is Timeframe.WEEK:
        return TimeframeBounds(current.start - timedelta(days=7), current.start)
    if timeframe is Timeframe.MONTH:
        return TimeframeBounds(_add_months(current.start, -1), current.start)
    return TimeframeBounds(current.start.replace(year=current.start.year - 1), current.start)
