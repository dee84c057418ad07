"""Billing period helpers.

A period is a calendar month represented by its first day. All conversions
from timestamps happen in UTC so that client and server clocks agree on
which month a moment belongs to.
"""

import calendar
import re
from datetime import date, datetime, UTC
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]

_WHOLE_UNIT = Decimal("1")
_YEAR_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


def to_utc_date(value: DateLike) -> date:
    """Return the UTC calendar date for a date or datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def normalize_period(value: DateLike) -> date:
    """Return the first day of the month containing ``value`` (UTC)."""
    return to_utc_date(value).replace(day=1)


def add_months(period: date, months: int) -> date:
    """Shift a period by a number of calendar months."""
    return period + relativedelta(months=months)


def days_in_month(value: date) -> int:
    """Number of days in the month containing ``value``."""
    return calendar.monthrange(value.year, value.month)[1]


def iter_periods(start: date, end: date) -> Iterator[date]:
    """Yield every period from ``start`` to ``end`` inclusive."""
    period = normalize_period(start)
    last = normalize_period(end)
    while period <= last:
        yield period
        if period == last:
            # December 9999 has no following month
            return
        period = add_months(period, 1)


def month_bounds(period: date) -> tuple[date, date]:
    """Return the first and last day of the period's month."""
    first = normalize_period(period)
    return first, first.replace(day=days_in_month(first))


def round_half_up(amount: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero."""
    return Decimal(amount).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def parse_year_month(value: Union[str, DateLike]) -> date:
    """Parse ``YYYY-MM`` (or accept a date) into a period.

    Raises:
        ValueError: If the string is not a valid year-month
    """
    if isinstance(value, (date, datetime)):
        return normalize_period(value)

    match = _YEAR_MONTH_RE.match(value)
    if match is None:
        raise ValueError(f"Could not parse month '{value}': expected YYYY-MM")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Could not parse month '{value}': month must be 1-12")
    return date(year, month, 1)


def format_period(period: date) -> str:
    """Render a period as ``YYYY-MM``."""
    return f"{period.year:04d}-{period.month:02d}"
