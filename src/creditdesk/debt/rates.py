# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Interest rate resolution and day-count interest for loans"""

from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional

from pydantic import Field
from typing_extensions import assert_never

from ..core.primitives import (
    BaseRateKey,
    CreditEngineSettings,
    DayCountConvention,
    Model,
    RateTypeEnum,
    days_between,
    resolve_settings,
    round_money,
)
from .loan import Loan

logger = logging.getLogger(__name__)

# Average days per month used to scale actual days onto a 30-day month
_AVERAGE_DAYS_PER_MONTH = 30.44

BaseRates = Mapping[BaseRateKey, float]


class InterestCalculation(Model):
    """
    Interest on a balance over one accrual window.

    Attributes:
        principal: Balance the interest accrues on
        annual_rate_pct: Annual rate in percent
        start_date: First day of the window
        end_date: Last day of the window (exclusive)
        days: Actual calendar days in the window (never negative)
        accrual_days: Days after day-count adjustment
        day_count: Day-count method used
        year_basis: Day-count divisor (360 or 365)
        interest: Interest amount, rounded to the minor unit
    """

    principal: float
    annual_rate_pct: float
    start_date: date
    end_date: date
    days: int
    accrual_days: float
    day_count: DayCountConvention
    year_basis: int
    interest: float = Field(..., description="Interest for the window, rounded to cents")


def get_current_rate(
    loan: Loan,
    base_rates: Optional[BaseRates] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> float:
    """
    Resolve the effective annual rate (percent) for a loan.

    For fixed loans returns the fixed rate (or the recorded current rate if no
    fixed rate is set). For floating loans looks up the base rate for the
    loan's index, preferring ``base_rates`` over the configured defaults,
    adds the spread and applies the optional floor, then cap.

    Args:
        loan: Loan to price
        base_rates: Live base-rate fixings in percent, keyed by index
        settings: Engine settings supplying default base rates

    Returns:
        All-in annual rate in percent

    Example:
        >>> get_current_rate(floating_sofr_loan, {BaseRateKey.SOFR: 5.3})  # spread 2.5
        7.8
    """
    if loan.rate_type == RateTypeEnum.FIXED:
        if loan.fixed_rate_pct is not None:
            return loan.fixed_rate_pct
        return loan.current_rate_pct or 0.0

    if loan.rate_type == RateTypeEnum.FLOATING:
        settings = resolve_settings(settings)
        if loan.base_rate_key is None:
            logger.warning(
                f"Floating loan {loan.id} has no base_rate_key; pricing at spread only"
            )
            base_rate = 0.0
        else:
            base_rate = settings.base_rate_for(loan.base_rate_key, base_rates)

        effective_rate = base_rate + loan.spread_pct

        # Floor first, then cap
        if loan.rate_floor_pct is not None:
            effective_rate = max(effective_rate, loan.rate_floor_pct)
        if loan.rate_cap_pct is not None:
            effective_rate = min(effective_rate, loan.rate_cap_pct)

        return effective_rate

    assert_never(loan.rate_type)


def _year_basis(method: DayCountConvention) -> int:
    if method == DayCountConvention.ACTUAL_365:
        return 365
    if method in (DayCountConvention.ACTUAL_360, DayCountConvention.THIRTY_360):
        return 360
    assert_never(method)


def calculate_period_interest(
    principal: float,
    annual_rate_pct: float,
    start: date,
    end: date,
    method: DayCountConvention = DayCountConvention.ACTUAL_360,
    places: int = 2,
) -> InterestCalculation:
    """
    Calculate simple interest on a balance between two dates.

    Day-count methods:
        - actual_360: actual days / 360
        - actual_365: actual days / 365
        - 30_360: actual days scaled by 30/30.44, / 360 (planning approximation)

    A window whose end precedes its start accrues nothing.

    Args:
        principal: Balance the interest accrues on
        annual_rate_pct: Annual rate in percent
        start: Window start
        end: Window end
        method: Day-count method
        places: Decimal places for the interest amount

    Returns:
        InterestCalculation with the day counts and rounded interest
    """
    method = DayCountConvention(method)
    days = max(0, days_between(start, end))

    if method == DayCountConvention.THIRTY_360:
        accrual_days = days * 30 / _AVERAGE_DAYS_PER_MONTH
    else:
        accrual_days = float(days)

    year_basis = _year_basis(method)
    interest = principal * (annual_rate_pct / 100) * (accrual_days / year_basis)

    return InterestCalculation(
        principal=principal,
        annual_rate_pct=annual_rate_pct,
        start_date=start,
        end_date=end,
        days=days,
        accrual_days=accrual_days,
        day_count=method,
        year_basis=year_basis,
        interest=round_money(interest, places),
    )
