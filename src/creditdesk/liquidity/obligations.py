# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt obligation export for liquidity forecasting.

Ledger payments and projected schedule rows are converted into ``CashFlow``
records. Each obligation is split into a principal flow and an interest flow
(fees travel with interest) so the consumer can categorize them separately.

Rules:
- Only obligations due on or after the evaluation date are exported; settled
  history is excluded.
- Ledger payments are confirmed (``is_confirmed=True``); schedule rows are
  projections (``is_confirmed=False``).
- A ``partial`` payment exports its unpaid remainder as a single debt-service
  flow, as does any payment recorded without a principal/interest breakdown.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, timedelta
from typing import Dict, Iterable, List

import pandas as pd

from ..core.primitives import (
    CashFlowCategoryEnum,
    CashFlowDirection,
    FinancingSubcategoryEnum,
    Model,
    PaymentStatusEnum,
    enum_to_string,
    round_money,
    sum_money,
)
from ..debt.amortization import GeneratedSchedule
from ..debt.loan import Loan
from ..debt.payment import Payment
from .records import CashFlow

logger = logging.getLogger(__name__)


class DebtPaymentTotals(Model):
    """
    Debt service due in a date window for one currency.

    ``unallocated`` holds amounts on payments recorded without a
    principal/interest breakdown.
    """

    currency: str
    start_date: date
    end_date: date
    payment_count: int
    principal: float
    interest: float
    fees: float
    unallocated: float
    total: float


class LoanLiquidityImpact(Model):
    """
    Cash a single loan will draw over a forward horizon.

    ``outstanding_after_horizon`` only reflects principal flows. Debt service
    on payments without a principal/interest breakdown is counted in
    ``debt_service_outflow`` but leaves the outstanding balance unchanged.
    """

    loan_id: str
    currency: str
    as_of: date
    horizon_end: date
    payment_count: int
    principal_outflow: float
    interest_outflow: float
    debt_service_outflow: float
    total_outflow: float
    outstanding_after_horizon: float
    flows: List[CashFlow]


def _flow(
    flow_id: str,
    flow_date: date,
    amount: float,
    currency: str,
    subcategory: FinancingSubcategoryEnum,
    description: str,
    is_confirmed: bool,
    loan_id: str,
    source_ref: str,
) -> CashFlow:
    return CashFlow(
        id=flow_id,
        flow_date=flow_date,
        amount=amount,
        currency=currency,
        direction=CashFlowDirection.OUTFLOW,
        category=CashFlowCategoryEnum.DEBT,
        subcategory=subcategory,
        description=description,
        is_confirmed=is_confirmed,
        loan_id=loan_id,
        source_ref=source_ref,
    )


def _split_flows(
    base_id: str,
    flow_date: date,
    principal: float,
    interest: float,
    currency: str,
    label: str,
    is_confirmed: bool,
    loan_id: str,
    source_ref: str,
) -> List[CashFlow]:
    flows = []
    if principal > 0:
        flows.append(
            _flow(
                f"{base_id}-principal",
                flow_date,
                principal,
                currency,
                FinancingSubcategoryEnum.PRINCIPAL_PAYMENT,
                f"{label} principal",
                is_confirmed,
                loan_id,
                source_ref,
            )
        )
    if interest > 0:
        flows.append(
            _flow(
                f"{base_id}-interest",
                flow_date,
                interest,
                currency,
                FinancingSubcategoryEnum.INTEREST_PAYMENT,
                f"{label} interest",
                is_confirmed,
                loan_id,
                source_ref,
            )
        )
    return flows


def _payment_flows(payment: Payment, loan: Loan) -> List[CashFlow]:
    label = loan.name or loan.id

    if payment.status == PaymentStatusEnum.PARTIAL or not payment.has_breakdown:
        amount = payment.remaining_amount
        if amount <= 0:
            return []
        return [
            _flow(
                f"{payment.id}-debt_service",
                payment.due_date,
                amount,
                payment.currency,
                FinancingSubcategoryEnum.DEBT_SERVICE,
                f"{label} debt service",
                True,
                loan.id,
                payment.id,
            )
        ]

    interest = round_money((payment.interest_part or 0.0) + (payment.fees_part or 0.0))
    return _split_flows(
        payment.id,
        payment.due_date,
        payment.principal_part or 0.0,
        interest,
        payment.currency,
        label,
        True,
        loan.id,
        payment.id,
    )


def payments_to_liquidity_flows(
    payments: Iterable[Payment], loans: Iterable[Loan], as_of: date
) -> List[CashFlow]:
    """
    Export unpaid ledger payments due on or after ``as_of`` as confirmed flows.

    Payments whose loan is not in ``loans`` are skipped with a warning.

    Args:
        payments: Payment ledger
        loans: Loans the payments belong to
        as_of: Evaluation date; earlier due dates are history

    Returns:
        Cash flows ordered by date
    """
    loans_by_id: Dict[str, Loan] = {loan.id: loan for loan in loans}

    flows: List[CashFlow] = []
    for payment in payments:
        if payment.is_paid or payment.due_date < as_of:
            continue
        loan = loans_by_id.get(payment.loan_id)
        if loan is None:
            logger.warning(f"Payment {payment.id}: loan {payment.loan_id} not found; skipped")
            continue
        flows.extend(_payment_flows(payment, loan))

    flows.sort(key=lambda f: f.flow_date)
    return flows


def schedule_to_liquidity_flows(
    schedule: GeneratedSchedule, loan: Loan, as_of: date
) -> List[CashFlow]:
    """
    Export projected schedule rows due on or after ``as_of`` as unconfirmed flows.

    Rows due before ``as_of`` are history and are skipped.
    """
    label = loan.name or loan.id
    flows: List[CashFlow] = []
    for row in schedule.rows:
        if row.due_date < as_of:
            continue
        ref = f"{loan.id}-S{row.period:03d}"
        flows.extend(
            _split_flows(
                ref,
                row.due_date,
                row.principal_payment,
                row.interest_payment,
                loan.currency,
                f"{label} period {row.period}",
                False,
                loan.id,
                ref,
            )
        )
    return flows


def get_total_debt_payments(
    payments: Iterable[Payment], start: date, end: date, currency: str
) -> DebtPaymentTotals:
    """
    Total debt service due between ``start`` and ``end`` (inclusive).

    Every payment in ``currency`` due in the window is counted regardless of
    status, so the result is the contractual debt service for the period.
    """
    in_window = [
        p
        for p in payments
        if p.currency == currency and start <= p.due_date <= end
    ]
    broken_down = [p for p in in_window if p.has_breakdown]

    return DebtPaymentTotals(
        currency=currency,
        start_date=start,
        end_date=end,
        payment_count=len(in_window),
        principal=sum_money(p.principal_part or 0.0 for p in broken_down),
        interest=sum_money(p.interest_part or 0.0 for p in broken_down),
        fees=sum_money(p.fees_part or 0.0 for p in in_window),
        unallocated=sum_money(p.amount for p in in_window if not p.has_breakdown),
        total=sum_money(p.amount for p in in_window),
    )


def get_loan_liquidity_impact(
    loan: Loan, payments: Iterable[Payment], horizon_days: int, as_of: date
) -> LoanLiquidityImpact:
    """
    Outflows a loan generates from ``as_of`` through ``as_of + horizon_days``.

    ``outstanding_after_horizon`` deducts the principal flows from the
    current outstanding balance. Undivided and partial-remainder payments
    export as debt service with no principal share, so they do not reduce it.
    """
    horizon_end = as_of + timedelta(days=horizon_days)
    own = [p for p in payments if p.loan_id == loan.id and p.due_date <= horizon_end]
    flows = payments_to_liquidity_flows(own, [loan], as_of)

    def _total(subcategory: FinancingSubcategoryEnum) -> float:
        return sum_money(f.amount for f in flows if f.subcategory == subcategory)

    principal = _total(FinancingSubcategoryEnum.PRINCIPAL_PAYMENT)

    return LoanLiquidityImpact(
        loan_id=loan.id,
        currency=loan.currency,
        as_of=as_of,
        horizon_end=horizon_end,
        payment_count=len({f.source_ref for f in flows}),
        principal_outflow=principal,
        interest_outflow=_total(FinancingSubcategoryEnum.INTEREST_PAYMENT),
        debt_service_outflow=_total(FinancingSubcategoryEnum.DEBT_SERVICE),
        total_outflow=sum_money(f.amount for f in flows),
        outstanding_after_horizon=max(0.0, round_money(loan.outstanding_amount - principal)),
        flows=flows,
    )


def cash_flows_to_dataframe(flows: Iterable[CashFlow]) -> pd.DataFrame:
    """
    Tabulate cash flows, one row per flow, ordered by date.

    Enum columns are stored as their string keys.
    """
    columns = [
        "id",
        "flow_date",
        "amount",
        "currency",
        "direction",
        "category",
        "subcategory",
        "description",
        "is_confirmed",
        "loan_id",
        "source_ref",
    ]
    df = pd.DataFrame([asdict(flow) for flow in flows], columns=columns)
    for col in ("direction", "category", "subcategory"):
        df[col] = df[col].map(enum_to_string)
    return df.sort_values("flow_date", kind="stable").reset_index(drop=True)
