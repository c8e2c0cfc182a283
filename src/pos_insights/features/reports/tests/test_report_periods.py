import datetime

import pytest

from pos_insights.features.reports.exceptions import InvalidPeriod
from pos_insights.features.reports.periods import (
    ReportPeriod,
    ReportWindow,
    previous_window,
    request_window,
    resolve_period,
    validate_window,
    validate_year,
    year_window,
)

NOW = datetime.datetime(2024, 3, 14, 15, 9, 26)  # a Thursday
MS = datetime.timedelta(milliseconds=1)


@pytest.mark.parametrize(
    "period, start, next_start",
    [
        (ReportPeriod.DAY, datetime.datetime(2024, 3, 14), datetime.datetime(2024, 3, 15)),
        (ReportPeriod.WEEK, datetime.datetime(2024, 3, 11), datetime.datetime(2024, 3, 18)),
        (ReportPeriod.MONTH, datetime.datetime(2024, 3, 1), datetime.datetime(2024, 4, 1)),
        (ReportPeriod.YEAR, datetime.datetime(2024, 1, 1), datetime.datetime(2025, 1, 1)),
    ],
)
def test_resolve_period_covers_calendar_period(period, start, next_start):
    window = resolve_period(period, NOW)
    assert window.start == start
    assert window.end == next_start - MS
    assert window.end_inclusive is True


def test_resolve_month_in_december_rolls_year():
    window = resolve_period(ReportPeriod.MONTH, datetime.datetime(2023, 12, 31, 23, 59))
    assert window.start == datetime.datetime(2023, 12, 1)
    assert window.end == datetime.datetime(2024, 1, 1) - MS


def test_resolve_period_normalizes_aware_now_to_utc():
    # 01:30 on the 15th in UTC+3 is still the 14th in UTC
    now = datetime.datetime(2024, 3, 15, 1, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=3)))
    window = resolve_period(ReportPeriod.DAY, now)
    assert window.start == datetime.datetime(2024, 3, 14)
    assert window.start.tzinfo is None


def test_validate_window_rejects_start_after_end():
    with pytest.raises(InvalidPeriod):
        validate_window(datetime.datetime(2024, 3, 2), datetime.datetime(2024, 3, 1))


def test_validate_window_accepts_single_instant():
    instant = datetime.datetime(2024, 3, 1, 12)
    window = validate_window(instant, instant)
    assert window.start == window.end == instant


def test_request_window_requires_both_bounds():
    with pytest.raises(InvalidPeriod):
        request_window(ReportPeriod.MONTH, datetime.datetime(2024, 3, 1), None, NOW)
    with pytest.raises(InvalidPeriod):
        request_window(ReportPeriod.MONTH, None, datetime.datetime(2024, 3, 1), NOW)


def test_request_window_explicit_bounds_override_period():
    start, end = datetime.datetime(2024, 2, 1), datetime.datetime(2024, 2, 10)
    assert request_window(ReportPeriod.YEAR, start, end, NOW) == ReportWindow(start, end)


def test_request_window_defaults_to_named_period():
    assert request_window(ReportPeriod.DAY, None, None, NOW) == resolve_period(ReportPeriod.DAY, NOW)


def test_previous_window_has_equal_length_and_excludes_boundary():
    window = ReportWindow(datetime.datetime(2024, 3, 10), datetime.datetime(2024, 3, 20))
    previous = previous_window(window)
    assert previous.start == datetime.datetime(2024, 2, 29)
    assert previous.end == window.start
    assert previous.created_at_filter() == {"$gte": previous.start, "$lt": window.start}


@pytest.mark.parametrize("year", [1999, 2101])
def test_validate_year_out_of_range(year):
    with pytest.raises(InvalidPeriod):
        validate_year(year)


def test_year_window_is_half_open():
    window = year_window(2024)
    assert window.created_at_filter() == {
        "$gte": datetime.datetime(2024, 1, 1),
        "$lt": datetime.datetime(2025, 1, 1),
    }


@pytest.mark.parametrize(
    "start, end",
    [
        (datetime.datetime(1, 6, 1), datetime.datetime(2024, 1, 1)),
        (datetime.datetime(2024, 1, 1), datetime.datetime(9999, 12, 31)),
    ],
)
def test_validate_window_rejects_bounds_outside_supported_years(start, end):
    with pytest.raises(InvalidPeriod):
        validate_window(start, end)


def test_previous_window_of_widest_window_is_representable():
    window = validate_window(datetime.datetime(2000, 1, 1), datetime.datetime(2100, 12, 31))
    assert previous_window(window).start.year == 1899
