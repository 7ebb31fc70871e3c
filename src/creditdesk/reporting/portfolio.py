# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio Credit Analytics

Dashboard-level aggregates over a credit book: headline KPIs, rate-type mix,
maturity profile and debt by borrower. All aggregates are single-currency;
callers pick the currency and entities in other currencies are ignored.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..core.primitives import (
    CreditEngineSettings,
    FacilityStatusEnum,
    Model,
    RateTypeEnum,
    RiskStatusEnum,
    WaiverStatusEnum,
    days_between,
    enum_to_string,
    resolve_settings,
    sum_money,
)
from ..debt.collateral import Collateral, compute_ltv_calculation, resolve_exposure
from ..debt.covenants import Covenant
from ..debt.facility import Facility
from ..debt.interest import calculate_interest_cost_ytd
from ..debt.loan import Loan
from ..debt.payment import Payment
from ..debt.rates import BaseRates

MATURITY_BUCKET_EDGES = [float("-inf"), 1, 2, 5, float("inf")]
MATURITY_BUCKET_LABELS = ["<1Y", "1-2Y", "2-5Y", ">5Y"]


class CreditKpis(Model):
    """
    Headline figures for a credit portfolio in one currency.

    Attributes:
        currency: Currency of the amounts
        as_of: Evaluation date
        total_debt_outstanding: Outstanding balance of active loans
        payments_due_amount: Unpaid amounts due within the payments window
        payments_due_count: Number of unpaid payments due within the window
        covenants_at_risk: Covenants whose last status is at_risk
        breaches_open: Covenant breaches without a granted waiver, plus
            collateral items in LTV breach
        ltv_above_target: Collateral items whose LTV exceeds target
        facilities_maturing: Active facilities maturing within the warning window
        interest_cost_ytd: Paid plus accrued interest year to date
    """

    currency: str
    as_of: date
    total_debt_outstanding: float
    payments_due_amount: float
    payments_due_count: int
    covenants_at_risk: int
    breaches_open: int
    ltv_above_target: int
    facilities_maturing: int
    interest_cost_ytd: float


def _active_loans(loans: Iterable[Loan], currency: str) -> List[Loan]:
    return [loan for loan in loans if loan.is_active and loan.currency == currency]


def _collateral_ltv(
    collateral: Collateral,
    loans: List[Loan],
    facilities: List[Facility],
    settings: CreditEngineSettings,
) -> Optional[float]:
    """Fresh LTV when the exposure is known, else the last recorded LTV."""
    exposure = resolve_exposure(collateral, loans, facilities)
    if exposure is None:
        return collateral.current_ltv_pct
    return compute_ltv_calculation(collateral, exposure, settings).ltv_pct


def calculate_credit_kpis(
    facilities: Iterable[Facility],
    loans: Iterable[Loan],
    payments: Iterable[Payment],
    covenants: Iterable[Covenant],
    collaterals: Iterable[Collateral],
    currency: str,
    as_of: date,
    base_rates: Optional[BaseRates] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> CreditKpis:
    """
    Compute the portfolio KPI strip.

    Covenant counts use each covenant's stored status (the outcome of its
    last test); collateral is re-tested against current exposures.

    Args:
        facilities: Facilities in the book
        loans: Loans in the book
        payments: Payment ledger
        covenants: Covenants on the book's facilities and loans
        collaterals: Collateral pledged to the book
        currency: Currency to report in
        as_of: Evaluation date
        base_rates: Live base-rate fixings for floating loans
        settings: Engine settings (KPI windows, buffers, default haircuts)

    Returns:
        CreditKpis
    """
    settings = resolve_settings(settings)
    facilities = list(facilities)
    loans = list(loans)
    payments = list(payments)

    active = _active_loans(loans, currency)

    due_by = as_of + timedelta(days=settings.payments_due_window_days)
    due = [
        p
        for p in payments
        if p.currency == currency and not p.is_paid and as_of <= p.due_date <= due_by
    ]

    covenants = list(covenants)
    covenants_at_risk = sum(1 for c in covenants if c.status == RiskStatusEnum.AT_RISK)
    covenant_breaches = sum(
        1
        for c in covenants
        if c.status == RiskStatusEnum.BREACH and c.waiver_status != WaiverStatusEnum.GRANTED
    )

    ltv_above_target = 0
    for collateral in collaterals:
        if collateral.currency != currency:
            continue
        ltv = _collateral_ltv(collateral, loans, facilities, settings)
        if ltv is not None and ltv > collateral.target_ltv_pct:
            ltv_above_target += 1

    facilities_maturing = sum(
        1
        for f in facilities
        if f.currency == currency
        and f.status == FacilityStatusEnum.ACTIVE
        and f.maturity_date is not None
        and 0 <= f.days_to_maturity(as_of) <= settings.maturity_warning_days
    )

    interest = calculate_interest_cost_ytd(
        loans, payments, currency, as_of, base_rates, settings
    )

    return CreditKpis(
        currency=currency,
        as_of=as_of,
        total_debt_outstanding=sum_money(loan.outstanding_amount for loan in active),
        payments_due_amount=sum_money(p.remaining_amount for p in due),
        payments_due_count=len(due),
        covenants_at_risk=covenants_at_risk,
        breaches_open=covenant_breaches + ltv_above_target,
        ltv_above_target=ltv_above_target,
        facilities_maturing=facilities_maturing,
        interest_cost_ytd=interest.total_interest_ytd,
    )


def _loans_frame(loans: List[Loan]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "rate_type": [enum_to_string(loan.rate_type) for loan in loans],
            "borrower": [loan.borrower_entity_id or "unknown" for loan in loans],
            "maturity_date": [loan.maturity_date for loan in loans],
            "outstanding": [loan.outstanding_amount for loan in loans],
        }
    )


def get_rate_type_distribution(loans: Iterable[Loan], currency: str) -> Dict[str, float]:
    """
    Outstanding balance of active loans by rate type.

    Example:
        >>> get_rate_type_distribution(loans, "USD")
        {'fixed': 1500000.0, 'floating': 750000.0}
    """
    df = _loans_frame(_active_loans(loans, currency))
    keys = [enum_to_string(r) for r in RateTypeEnum]
    totals = df.groupby("rate_type")["outstanding"].sum().reindex(keys, fill_value=0.0)
    return {key: sum_money([value]) for key, value in totals.items()}


def get_maturity_profile(
    loans: Iterable[Loan], currency: str, as_of: date
) -> Dict[str, float]:
    """
    Outstanding balance of active loans by time to maturity.

    Years are measured as days / 365. Buckets are closed on the left: a loan
    exactly two years from maturity falls into ``2-5Y``. Loans already past
    maturity fall into ``<1Y``.
    """
    df = _loans_frame(_active_loans(loans, currency))
    years = df["maturity_date"].map(lambda d: days_between(as_of, d) / 365)
    buckets = pd.cut(
        years.astype("float64"),
        bins=MATURITY_BUCKET_EDGES,
        labels=MATURITY_BUCKET_LABELS,
        right=False,
    )
    totals = (
        df["outstanding"]
        .groupby(buckets, observed=False)
        .sum()
        .reindex(MATURITY_BUCKET_LABELS, fill_value=0.0)
    )
    return {str(label): sum_money([value]) for label, value in totals.items()}


def get_debt_by_borrower(loans: Iterable[Loan], currency: str) -> Dict[str, float]:
    """
    Outstanding balance of active loans per borrower entity, largest first.

    Loans without a borrower are grouped under ``"unknown"``.
    """
    df = _loans_frame(_active_loans(loans, currency))
    if df.empty:
        return {}
    totals = df.groupby("borrower")["outstanding"].sum().sort_values(ascending=False)
    return {borrower: sum_money([value]) for borrower, value in totals.items()}
