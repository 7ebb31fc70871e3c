# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Loan amortization schedules"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

import pandas as pd
from pydantic import Field
from pyxirr import pmt
from typing_extensions import assert_never

from ..core.primitives import (
    AmortizationTypeEnum,
    CreditEngineSettings,
    Model,
    PaymentFrequencyEnum,
    PaymentStatusEnum,
    add_months,
    months_between,
    resolve_settings,
    round_money,
    sum_money,
)
from .loan import Loan
from .payment import Payment

logger = logging.getLogger(__name__)


class ScheduleRow(Model):
    """
    One projected payment period.

    ``closing_balance == opening_balance - principal_payment`` for every row,
    and each row opens at the previous row's closing balance.
    """

    period: int = Field(..., ge=1, description="1-based, contiguous period number")
    due_date: date
    opening_balance: float
    principal_payment: float
    interest_payment: float
    total_payment: float
    closing_balance: float


class GeneratedSchedule(Model):
    """
    Full amortization schedule for one loan.

    Attributes:
        loan_id: Loan the schedule was generated for
        amortization_type: Algorithm used
        payment_frequency: Installment frequency used
        annual_rate_pct: Annual rate (percent) the schedule was priced at
        periodic_rate: Rate per period as a decimal
        payment_amount: Level installment for amortizing schedules, else None
        rows: Schedule rows in period order
        total_principal: Sum of principal payments
        total_interest: Sum of interest payments
        total_payments: Sum of total payments
    """

    loan_id: str
    amortization_type: AmortizationTypeEnum
    payment_frequency: PaymentFrequencyEnum
    annual_rate_pct: float
    periodic_rate: float
    payment_amount: Optional[float] = None
    rows: List[ScheduleRow]
    total_principal: float
    total_interest: float
    total_payments: float

    @property
    def periods(self) -> int:
        return len(self.rows)

    @property
    def final_balance(self) -> float:
        return self.rows[-1].closing_balance if self.rows else 0.0

    def to_dataframe(self) -> pd.DataFrame:
        """
        Schedule rows as a DataFrame indexed by period.

        Columns: due_date, opening_balance, principal_payment,
        interest_payment, total_payment, closing_balance.
        """
        df = pd.DataFrame([row.model_dump() for row in self.rows])
        if df.empty:
            return df
        return df.set_index("period")


def generate_schedule(
    loan: Loan,
    start_date: Optional[date] = None,
    assumed_rate: Optional[float] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> GeneratedSchedule:
    """
    Generate the amortization schedule for a loan.

    Without ``start_date`` the schedule amortizes ``principal_amount`` from
    ``loan.start_date``. With an explicit ``start_date`` it re-projects the
    current ``outstanding_amount`` from that date to maturity.

    The number of periods is the whole number of payment periods between
    start and maturity, never less than one. Every monetary figure is
    rounded to the minor unit as it is produced, so rows reconcile with
    ledgered payments; the final period always repays the remaining balance
    exactly.

    Args:
        loan: Loan to schedule
        start_date: Optional re-projection date
        assumed_rate: Annual rate in percent; defaults to the loan's recorded rate
        settings: Engine settings (rounding precision)

    Returns:
        GeneratedSchedule with rows and totals

    Example:
        >>> schedule = generate_schedule(loan)  # 1M, 5%, monthly, 12 months
        >>> schedule.periods
        12
        >>> schedule.final_balance
        0.0
    """
    settings = resolve_settings(settings)
    places = settings.money_decimal_places

    frequency = loan.payment_frequency
    months_per_period = frequency.months_per_period

    if start_date is None:
        start = loan.start_date
        balance = loan.principal_amount
    else:
        start = start_date
        balance = loan.outstanding_amount
    balance = round_money(balance, places)

    annual_rate = assumed_rate if assumed_rate is not None else loan.recorded_rate_pct
    periodic_rate = annual_rate / 100 / frequency.periods_per_year

    total_periods = max(1, months_between(start, loan.maturity_date) // months_per_period)
    due_dates = [
        add_months(start, (n + 1) * months_per_period) for n in range(total_periods)
    ]

    payment_amount: Optional[float] = None
    amortization_type = loan.amortization_type
    if amortization_type == AmortizationTypeEnum.AMORTIZING:
        payment_amount = _level_payment(balance, periodic_rate, total_periods, places)
        rows = _amortizing_rows(balance, periodic_rate, due_dates, payment_amount, places)
    elif amortization_type in (
        AmortizationTypeEnum.INTEREST_ONLY,
        AmortizationTypeEnum.BULLET,
    ):
        rows = _interest_only_rows(balance, periodic_rate, due_dates, places)
    else:
        assert_never(amortization_type)

    logger.debug(
        f"Loan {loan.id}: {amortization_type.value} schedule, {total_periods} "
        f"{frequency.value} periods at {annual_rate:.4f}%"
    )

    return GeneratedSchedule(
        loan_id=loan.id,
        amortization_type=amortization_type,
        payment_frequency=frequency,
        annual_rate_pct=annual_rate,
        periodic_rate=periodic_rate,
        payment_amount=payment_amount,
        rows=rows,
        total_principal=sum_money((r.principal_payment for r in rows), places),
        total_interest=sum_money((r.interest_payment for r in rows), places),
        total_payments=sum_money((r.total_payment for r in rows), places),
    )


def _level_payment(balance: float, periodic_rate: float, periods: int, places: int) -> float:
    """Annuity installment: P * r * (1+r)^n / ((1+r)^n - 1)."""
    if periodic_rate == 0:
        return round_money(balance / periods, places)
    return round_money(pmt(periodic_rate, periods, balance) * -1, places)


def _interest_only_rows(
    balance: float, periodic_rate: float, due_dates: List[date], places: int
) -> List[ScheduleRow]:
    """Interest on the full balance each period; principal repaid in the last period."""
    rows = []
    last = len(due_dates)
    for period, due in enumerate(due_dates, start=1):
        interest = round_money(balance * periodic_rate, places)
        principal = balance if period == last else 0.0
        closing = round_money(balance - principal, places)
        rows.append(
            ScheduleRow(
                period=period,
                due_date=due,
                opening_balance=balance,
                principal_payment=principal,
                interest_payment=interest,
                total_payment=round_money(principal + interest, places),
                closing_balance=closing,
            )
        )
        balance = closing
    return rows


def _amortizing_rows(
    balance: float,
    periodic_rate: float,
    due_dates: List[date],
    payment: float,
    places: int,
) -> List[ScheduleRow]:
    """
    Level installments; the final period repays whatever balance remains.

    At very high rates over long terms the early principal share is below a
    cent, so rounding pays the balance down faster than the annuity. Once the
    installment for the remaining balance drifts more than 1% from the current
    one, the remaining periods are re-levelled.
    """
    rows = []
    last = len(due_dates)
    for period, due in enumerate(due_dates, start=1):
        interest = round_money(balance * periodic_rate, places)
        if period == last:
            # absorbs accumulated rounding drift
            principal = balance
        else:
            releveled = _level_payment(balance, periodic_rate, last - period + 1, places)
            if abs(releveled - payment) > max(0.01 * payment, 1.0):
                payment = releveled
            principal = min(balance, max(0.0, round_money(payment - interest, places)))
        closing = round_money(balance - principal, places)
        rows.append(
            ScheduleRow(
                period=period,
                due_date=due,
                opening_balance=balance,
                principal_payment=principal,
                interest_payment=interest,
                total_payment=round_money(principal + interest, places),
                closing_balance=closing,
            )
        )
        balance = closing
    return rows


def schedule_to_payments(schedule: GeneratedSchedule, loan: Loan) -> List[Payment]:
    """
    Materialize schedule rows as ``scheduled`` ledger payments.

    Payment ids are derived from the loan id and period number so that
    regenerating a schedule yields the same ids.
    """
    return [
        Payment(
            id=f"{loan.id}-P{row.period:03d}",
            loan_id=loan.id,
            currency=loan.currency,
            due_date=row.due_date,
            amount=row.total_payment,
            principal_part=row.principal_payment,
            interest_part=row.interest_payment,
            fees_part=0.0,
            status=PaymentStatusEnum.SCHEDULED,
        )
        for row in schedule.rows
    ]
