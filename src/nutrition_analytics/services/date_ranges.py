"""Resolve dashboard time ranges into concrete dates."""

import calendar
from datetime import date, timedelta
from enum import StrEnum

from nutrition_analytics.domain.errors import InvalidDateRangeError

MONTHS_IN_YEAR = 12
QUARTER_MONTHS = 3
QUARTER_MAX_DAYS = 90
CUSTOM_MAX_DAYS = 365
LONG_RANGE_BATCH_SIZE = 30
DEFAULT_BATCH_SIZE = 50


class TimeRange(StrEnum):
    """Time range selections offered by the dashboard."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "3m"
    YEAR = "1y"
    CUSTOM = "custom"


def resolve_date_range(
    time_range: TimeRange,
    today: date,
    custom_start: str | None = None,
    custom_end: str | None = None,
) -> list[date]:
    """Return the ordered anchors for a range, oldest first.

    Year ranges return one anchor per month. Custom ranges without both
    bounds, or with the start after the end, resolve to an empty list.
    """
    if time_range == TimeRange.WEEK:
        return trailing_days(today, 7)
    if time_range == TimeRange.MONTH:
        return trailing_days(today, 30)
    if time_range == TimeRange.QUARTER:
        quarter_start = subtract_months(today, QUARTER_MONTHS)
        days = min((today - quarter_start).days, QUARTER_MAX_DAYS)
        return trailing_days(today, days)
    if time_range == TimeRange.YEAR:
        return [
            subtract_months(today, MONTHS_IN_YEAR - 1 - offset)
            for offset in range(MONTHS_IN_YEAR)
        ]
    if not custom_start or not custom_end:
        return []
    start = _parse_iso_date(custom_start)
    end = _parse_iso_date(custom_end)
    if start > end:
        return []
    length = min((end - start).days + 1, CUSTOM_MAX_DAYS)
    return [start + timedelta(days=offset) for offset in range(length)]


def fetch_dates_for(
    time_range: TimeRange, anchors: list[date], today: date
) -> list[date]:
    """Return the calendar days whose logs are needed for the anchors."""
    if time_range != TimeRange.YEAR:
        return list(anchors)
    days: list[date] = []
    for anchor in anchors:
        last_day = calendar.monthrange(anchor.year, anchor.month)[1]
        month_end = min(anchor.replace(day=last_day), today)
        current = anchor.replace(day=1)
        while current <= month_end:
            days.append(current)
            current += timedelta(days=1)
    return days


def batch_size_for(time_range: TimeRange) -> int:
    """Return how many dates are fetched concurrently per batch."""
    if time_range in {TimeRange.QUARTER, TimeRange.YEAR}:
        return LONG_RANGE_BATCH_SIZE
    return DEFAULT_BATCH_SIZE


def correlation_window_days(time_range: TimeRange) -> int:
    """Return the look-back window used for correlation queries."""
    if time_range == TimeRange.WEEK:
        return 7
    if time_range == TimeRange.MONTH:
        return 30
    return QUARTER_MAX_DAYS


def bucket_label(day: date, monthly: bool) -> str:
    """Format a chart label such as ``Oct 18`` or ``Oct 2026``."""
    if monthly:
        return f"{day:%b} {day.year}"
    return f"{day:%b} {day.day}"


def subtract_months(day: date, months: int) -> date:
    """Move back a number of calendar months, clamping the day of month."""
    month_index = day.year * MONTHS_IN_YEAR + (day.month - 1) - months
    year, month_zero = divmod(month_index, MONTHS_IN_YEAR)
    month = month_zero + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def trailing_days(today: date, days: int) -> list[date]:
    """Return the last ``days`` calendar days ending today."""
    return [today - timedelta(days=days - 1 - offset) for offset in range(days)]


def _parse_iso_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise InvalidDateRangeError(f"Invalid date: {raw!r}") from exc
