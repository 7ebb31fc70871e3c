# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Calendar helpers shared by the schedule, covenant and reporting modules."""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def to_date(value: DateLike) -> date:
    """Normalize a date or datetime to a plain date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def months_between(start: DateLike, end: DateLike) -> int:
    """
    Whole calendar months from ``start`` to ``end``.

    Partial months are truncated, and an ``end`` before ``start`` yields a
    negative count. A month-end start counts a whole month at the next
    month end, matching ``add_months``.

    Example:
        >>> months_between(date(2024, 1, 1), date(2025, 1, 1))
        12
        >>> months_between(date(2024, 1, 31), date(2024, 2, 29))
        1
        >>> months_between(date(2024, 1, 31), date(2024, 2, 28))
        0
    """
    delta = relativedelta(to_date(end), to_date(start))
    return delta.years * 12 + delta.months


def add_months(value: DateLike, months: int) -> date:
    """Shift a date by calendar months, clamping to month end (Jan 31 + 1M = Feb 29)."""
    return to_date(value) + relativedelta(months=months)


def start_of_year(value: DateLike) -> date:
    """January 1st of the year containing ``value``."""
    return date(to_date(value).year, 1, 1)


def days_between(start: DateLike, end: DateLike) -> int:
    """Actual calendar days from ``start`` to ``end`` (negative if reversed)."""
    return (to_date(end) - to_date(start)).days
