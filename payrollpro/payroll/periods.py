"""Helpers for ``YYYY-MM`` payroll periods."""

from __future__ import annotations

import calendar
import re
from datetime import date

from django.utils import timezone

from .exceptions import PayrollValidationError

PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
MIN_YEAR = 2020
MAX_YEAR = 2100


def format_period(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def parse_period(value: str) -> tuple[int, int]:
    """Return ``(year, month)`` for a ``YYYY-MM`` string."""
    if not isinstance(value, str) or not PERIOD_RE.match(value):
        msg = f"Invalid period {value!r}; expected YYYY-MM."
        raise PayrollValidationError(msg)
    year, month = (int(part) for part in value.split("-"))
    validate_year(year)
    return year, month


def validate_year(year) -> int:
    try:
        year = int(year)
    except (TypeError, ValueError) as exc:
        msg = "Year must be an integer."
        raise PayrollValidationError(msg) from exc
    if not MIN_YEAR <= year <= MAX_YEAR:
        msg = f"Year must be between {MIN_YEAR} and {MAX_YEAR}."
        raise PayrollValidationError(msg)
    return year


def coerce_period(month, year=None) -> tuple[int, int]:
    """Accept ``("2024-03", None)``, ``(3, 2024)`` or ``("03", "2024")``."""
    if year is None:
        return parse_period(str(month))
    try:
        month_num, year_num = int(month), int(year)
    except (TypeError, ValueError) as exc:
        msg = "Month and year must be integers."
        raise PayrollValidationError(msg) from exc
    if not 1 <= month_num <= 12:  # noqa: PLR2004
        msg = "Month must be between 1 and 12."
        raise PayrollValidationError(msg)
    return validate_year(year_num), month_num


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def current_period() -> str:
    today = timezone.localdate()
    return format_period(today.year, today.month)
