# src/financial_history/core/fiscal_calendar.py
"""
Fiscal Calendar Utilities

Month-end arithmetic and fiscal-year boundary resolution. Every dense
series in this package is keyed by month-end dates, so all helpers here
return month-end dates unless stated otherwise.

A fiscal year is identified by the month-end date it finishes on. For a
fiscal year end month of 6, the fiscal year ending 2023-06-30 runs from
2022-07-31 to 2023-06-30.
"""

import calendar
from datetime import date, datetime
from typing import List, Tuple

from .exceptions import DateError, InvalidFiscalYearEndMonthError


def validate_fiscal_year_end_month(month: int) -> None:
    """
    Fail fast on a fiscal year end month outside [1, 12].

    Raises:
        InvalidFiscalYearEndMonthError
    """
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidFiscalYearEndMonthError(month)


def last_day_of_month(year: int, month: int) -> date:
    """
    Calendar-correct month-end date (leap-year aware).

    Examples:
        >>> last_day_of_month(2024, 2)
        datetime.date(2024, 2, 29)
    """
    return date(year, month, calendar.monthrange(year, month)[1])


def to_month_end(d: date) -> date:
    """Snap a date to the last day of its month."""
    return last_day_of_month(d.year, d.month)


def is_month_end(d: date) -> bool:
    return d == to_month_end(d)


def next_month_end(d: date) -> date:
    """Step forward one month, staying on month-end."""
    if d.month == 12:
        return last_day_of_month(d.year + 1, 1)
    return last_day_of_month(d.year, d.month + 1)


def prev_month_end(d: date) -> date:
    """Step back one month, staying on month-end."""
    if d.month == 1:
        return last_day_of_month(d.year - 1, 12)
    return last_day_of_month(d.year, d.month - 1)


def fiscal_year_start(fiscal_year_end: date) -> date:
    """
    First month-end of the fiscal year finishing on `fiscal_year_end`.

    This is the month-end 11 months before the fiscal year end.

    Examples:
        >>> fiscal_year_start(date(2023, 12, 31))
        datetime.date(2023, 1, 31)
        >>> fiscal_year_start(date(2023, 6, 30))
        datetime.date(2022, 7, 31)
    """
    if fiscal_year_end.month == 12:
        return last_day_of_month(fiscal_year_end.year, 1)
    return last_day_of_month(fiscal_year_end.year - 1, fiscal_year_end.month + 1)


def fiscal_year_end_date(year: int, fiscal_year_end_month: int) -> date:
    """Month-end date closing the fiscal year that ends in calendar `year`."""
    validate_fiscal_year_end_month(fiscal_year_end_month)
    return last_day_of_month(year, fiscal_year_end_month)


def month_ends_in_period(start: date, end: date) -> List[date]:
    """
    Every month-end date falling inside [start, end].

    Args:
        start: First date of the period (any day of the month)
        end: Last date of the period, inclusive

    Returns:
        Ascending list of month-end dates; empty when end < start
    """
    dates = []
    current = to_month_end(start)
    while current <= end:
        if current >= start:
            dates.append(current)
        current = next_month_end(current)
    return dates


def months_between(start: date, end: date) -> int:
    """Signed number of calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def fiscal_year_end_for_date(d: date, fiscal_year_end_month: int) -> date:
    """
    Fiscal year end date that `d` belongs to.

    The fiscal year ends in the current calendar year if d.month is on or
    before the fiscal year end month, otherwise in the next one.
    """
    validate_fiscal_year_end_month(fiscal_year_end_month)
    if d.month <= fiscal_year_end_month:
        return last_day_of_month(d.year, fiscal_year_end_month)
    return last_day_of_month(d.year + 1, fiscal_year_end_month)


def fiscal_month_index(calendar_month: int, fiscal_year_end_month: int) -> int:
    """
    0-based position of a calendar month within the fiscal year.

    Used to map calendar months onto rotated seasonality weights.

    Examples:
        - FY ends Dec (12): Jan=0, Feb=1, ..., Dec=11
        - FY ends Jun (6): Jul=0, Aug=1, ..., Jun=11
        - FY ends Sep (9): Oct=0, Jan=3, ..., Sep=11
    """
    validate_fiscal_year_end_month(fiscal_year_end_month)
    if not 1 <= calendar_month <= 12:
        raise DateError(f"Invalid calendar month {calendar_month}: must be between 1 and 12")

    fy_start_month = 1 if fiscal_year_end_month == 12 else fiscal_year_end_month + 1
    return (calendar_month - fy_start_month) % 12


def _parse_month(segment: str, label: str) -> date:
    try:
        return datetime.strptime(f"{segment.strip()}-01", "%Y-%m-%d").date()
    except ValueError:
        raise DateError(
            f"Invalid {label}date format in period: {segment}. Expected YYYY-MM"
        ) from None


def parse_period(period: str) -> Tuple[date, date]:
    """
    Parse "YYYY-MM" or "YYYY-MM:YYYY-MM" into an inclusive date range.

    Returns:
        (first day of the start month, last day of the end month)

    Raises:
        DateError: malformed segment or wrong number of segments

    Examples:
        >>> parse_period("2023-02")
        (datetime.date(2023, 2, 1), datetime.date(2023, 2, 28))
        >>> parse_period("2023-01:2023-03")
        (datetime.date(2023, 1, 1), datetime.date(2023, 3, 31))
    """
    parts = period.split(':')

    if len(parts) == 1:
        start = _parse_month(parts[0], "")
        return start, to_month_end(start)

    if len(parts) == 2:
        start = _parse_month(parts[0], "start ")
        end_month = _parse_month(parts[1], "end ")
        return start, to_month_end(end_month)

    raise DateError(
        f"Invalid period format: {period}. Expected 'YYYY-MM' or 'YYYY-MM:YYYY-MM'"
    )
