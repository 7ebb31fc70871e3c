# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio interest cost aggregation.

Year-to-date interest blends realized and projected cost: interest settled on
paid ledger payments since January 1st, plus interest accrued on each loan's
outstanding balance since its last settled payment. Forecast consumers need
the forward-looking total, not only settled cash.

This module only reads loans and payments; it never writes to them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

import numpy as np

from ..core.primitives import (
    CreditEngineSettings,
    DayCountConvention,
    Model,
    PaymentStatusEnum,
    resolve_settings,
    round_money,
    start_of_year,
    sum_money,
)
from .loan import Loan
from .payment import Payment
from .rates import BaseRates, calculate_period_interest, get_current_rate

logger = logging.getLogger(__name__)


class LoanInterestCost(Model):
    """Year-to-date interest cost for one loan."""

    loan_id: str
    outstanding_amount: float
    rate_pct: float
    interest_paid: float
    interest_accrued: float
    accrual_start: date
    accrual_days: int

    @property
    def total_interest(self) -> float:
        return round_money(self.interest_paid + self.interest_accrued)


class InterestCostSummary(Model):
    """
    Year-to-date interest cost across the active loans in one currency.

    Attributes:
        currency: Currency the summary is expressed in
        as_of: Evaluation date
        year_start: January 1st of the evaluation year
        interest_paid: Interest on paid payments settled since year start
        interest_accrued: Interest accrued since each loan's last settled payment
        total_interest_ytd: interest_paid + interest_accrued
        total_outstanding: Outstanding balance of the loans included
        weighted_average_rate_pct: Outstanding-weighted current rate
        day_count: Day-count method used for the accrual
        loans: Per-loan breakdown
    """

    currency: str
    as_of: date
    year_start: date
    interest_paid: float
    interest_accrued: float
    total_interest_ytd: float
    total_outstanding: float
    weighted_average_rate_pct: float
    day_count: DayCountConvention
    loans: List[LoanInterestCost]


def _active_loans_in(loans: Iterable[Loan], currency: str) -> List[Loan]:
    return [loan for loan in loans if loan.is_active and loan.currency == currency]


def calculate_weighted_average_rate(
    loans: Iterable[Loan],
    currency: str,
    base_rates: Optional[BaseRates] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> float:
    """
    Outstanding-weighted average current rate (percent) of active loans.

    Returns 0 when nothing is outstanding.
    """
    active = _active_loans_in(loans, currency)
    weights = np.array([loan.outstanding_amount for loan in active], dtype=float)
    if weights.sum() <= 0:
        return 0.0
    rates = np.array([get_current_rate(loan, base_rates, settings) for loan in active])
    return float(np.average(rates, weights=weights))


def calculate_interest_cost_ytd(
    loans: Iterable[Loan],
    payments: Iterable[Payment],
    currency: str,
    as_of: date,
    base_rates: Optional[BaseRates] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> InterestCostSummary:
    """
    Year-to-date interest cost for active loans in ``currency``.

    For each loan:
        - interest_paid: sum of ``interest_part`` on paid payments settled
          between January 1st and ``as_of``
        - interest_accrued: interest on the current outstanding balance at the
          loan's current rate, from its latest settled payment (or its start
          date) through ``as_of``; the window never starts before January 1st
          so that prior-year accrual is not counted

    Args:
        loans: Loan collection (filtered to active loans in ``currency``)
        payments: Payment ledger for those loans
        currency: Currency to aggregate
        as_of: Evaluation date ("now")
        base_rates: Live base-rate fixings for floating loans
        settings: Engine settings (accrual day count, default base rates)

    Returns:
        InterestCostSummary with totals and a per-loan breakdown
    """
    settings = resolve_settings(settings)
    year_start = start_of_year(as_of)
    active = _active_loans_in(loans, currency)

    paid_by_loan: Dict[str, List[Payment]] = defaultdict(list)
    for payment in payments:
        if payment.status == PaymentStatusEnum.PAID:
            paid_by_loan[payment.loan_id].append(payment)

    breakdown: List[LoanInterestCost] = []
    for loan in active:
        paid = [p for p in paid_by_loan.get(loan.id, []) if p.settlement_date <= as_of]

        interest_paid = sum_money(
            p.interest_part or 0.0 for p in paid if p.settlement_date >= year_start
        )

        last_settled = max((p.settlement_date for p in paid), default=None)
        accrual_start = max(last_settled or loan.start_date, year_start)

        rate = get_current_rate(loan, base_rates, settings)
        accrual = calculate_period_interest(
            loan.outstanding_amount,
            rate,
            accrual_start,
            as_of,
            settings.accrual_day_count,
            settings.money_decimal_places,
        )
        logger.debug(
            f"Loan {loan.id}: accrued {accrual.interest:,.2f} over {accrual.days} days "
            f"from {accrual_start} at {rate:.4f}%"
        )

        breakdown.append(
            LoanInterestCost(
                loan_id=loan.id,
                outstanding_amount=loan.outstanding_amount,
                rate_pct=rate,
                interest_paid=interest_paid,
                interest_accrued=accrual.interest,
                accrual_start=accrual_start,
                accrual_days=accrual.days,
            )
        )

    interest_paid_total = sum_money(item.interest_paid for item in breakdown)
    interest_accrued_total = sum_money(item.interest_accrued for item in breakdown)

    return InterestCostSummary(
        currency=currency,
        as_of=as_of,
        year_start=year_start,
        interest_paid=interest_paid_total,
        interest_accrued=interest_accrued_total,
        total_interest_ytd=round_money(interest_paid_total + interest_accrued_total),
        total_outstanding=sum_money(loan.outstanding_amount for loan in active),
        weighted_average_rate_pct=calculate_weighted_average_rate(
            active, currency, base_rates, settings
        ),
        day_count=settings.accrual_day_count,
        loans=breakdown,
    )
