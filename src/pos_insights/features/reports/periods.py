"""Reporting windows and time-bucket arithmetic.

All bounds are naive UTC datetimes. A named period covers the calendar
day, ISO week (Monday first), month or year containing "now", and ends on
the last millisecond before the next period starts, which is the finest
resolution MongoDB stores."""

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ...common.models import to_naive_utc
from ...core.config import MAX_REPORT_YEAR, MIN_REPORT_YEAR
from .exceptions import InvalidPeriod

Clock = Callable[[], datetime.datetime]

MONTHS = range(1, 13)
HOURS = range(24)

_LAST_TICK = datetime.timedelta(milliseconds=1)


class ReportPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class ReportWindow:
    start: datetime.datetime
    end: datetime.datetime
    end_inclusive: bool = True

    def created_at_filter(self) -> dict:
        upper = "$lte" if self.end_inclusive else "$lt"
        return {"$gte": self.start, upper: self.end}


def system_clock() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _next_month(start: datetime.datetime) -> datetime.datetime:
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def resolve_period(period: ReportPeriod, now: datetime.datetime) -> ReportWindow:
    """Returns the inclusive window of the calendar period containing ``now``."""
    midnight = to_naive_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
    if period == ReportPeriod.DAY:
        start = midnight
        next_start = start + datetime.timedelta(days=1)
    elif period == ReportPeriod.WEEK:
        start = midnight - datetime.timedelta(days=midnight.weekday())
        next_start = start + datetime.timedelta(days=7)
    elif period == ReportPeriod.MONTH:
        start = midnight.replace(day=1)
        next_start = _next_month(start)
    else:
        start = midnight.replace(month=1, day=1)
        next_start = start.replace(year=start.year + 1)
    return ReportWindow(start=start, end=next_start - _LAST_TICK)


def validate_window(start: datetime.datetime, end: datetime.datetime) -> ReportWindow:
    start, end = to_naive_utc(start), to_naive_utc(end)
    for bound in (start, end):
        if not MIN_REPORT_YEAR <= bound.year <= MAX_REPORT_YEAR:
            raise InvalidPeriod(
                f"Period bound {bound.isoformat()} is outside the supported years {MIN_REPORT_YEAR}-{MAX_REPORT_YEAR}"
            )
    if start > end:
        raise InvalidPeriod(f"Period start {start.isoformat()} is after its end {end.isoformat()}")
    return ReportWindow(start=start, end=end)


def request_window(
    period: ReportPeriod,
    start: Optional[datetime.datetime],
    end: Optional[datetime.datetime],
    now: datetime.datetime,
) -> ReportWindow:
    """Explicit start/end win over the named period; they must come together."""
    if start is None and end is None:
        return resolve_period(period, now)
    if start is None or end is None:
        raise InvalidPeriod("Both start and end are required for a custom period")
    return validate_window(start, end)


def validate_year(year: int) -> int:
    if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
        raise InvalidPeriod(
            f"Year {year} is outside the supported range {MIN_REPORT_YEAR}-{MAX_REPORT_YEAR}"
        )
    return year


def previous_window(window: ReportWindow) -> ReportWindow:
    """The preceding window of equal length, half-open so the boundary instant
    belongs to the current window only."""
    length = window.end - window.start
    return ReportWindow(start=window.start - length, end=window.start, end_inclusive=False)


def year_window(year: int) -> ReportWindow:
    start = datetime.datetime(year, 1, 1)
    return ReportWindow(start=start, end=start.replace(year=year + 1), end_inclusive=False)
