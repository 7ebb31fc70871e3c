# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Collateral valuation and loan-to-value monitoring.

Key formulas:
    pledged_value = current_value * (1 - haircut_pct / 100)
    ltv_pct       = loan_outstanding / pledged_value * 100   (100 if pledged <= 0)
    margin_call   = max(0, loan_outstanding / (target_ltv / 100) - pledged_value)

Status uses a contraction-style buffer below the target (LTV is a maximum-type
threshold): ``breach`` above target, ``at_risk`` at or above
target * (1 - buffer / 100), otherwise ``ok``.

The margin call is the additional pledged value that brings LTV back exactly
to target, not merely out of breach.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

import pandas as pd
from pydantic import Field

from ..core.primitives import (
    CollateralTypeEnum,
    CreditEngineSettings,
    LinkedTypeEnum,
    Model,
    NonNegativeFloat,
    Percentage,
    RiskStatusEnum,
    days_between,
    resolve_settings,
    round_money,
    sum_money,
)
from .facility import Facility
from .loan import Loan

logger = logging.getLogger(__name__)

# LTV saturation value when there is nothing pledged
SATURATED_LTV_PCT = 100.0

LTV_BUCKET_EDGES = [0, 25, 50, 75, 100, float("inf")]
LTV_BUCKET_LABELS = ["0-25%", "25-50%", "50-75%", "75-100%", ">100%"]


class Collateral(Model):
    """
    An asset pledged against a facility or a loan.

    ``pledged_value`` is derived from ``current_value`` and ``haircut_pct``
    and is never authoritative on its own; use ``revalue_collateral`` to
    change either input so that it is recomputed. A missing ``haircut_pct``
    resolves to the default haircut for the collateral type.

    Attributes:
        id: Collateral identifier
        linked_type: Whether the pledge secures a facility or a loan
        linked_id: Identifier of the secured facility or loan
        collateral_type: Asset class
        current_value: Market value
        currency: ISO currency code
        haircut_pct: Valuation haircut in percent
        pledged_value: Lendable value after haircut (as last recorded)
        target_ltv_pct: Maximum LTV agreed with the lender
        current_ltv_pct: LTV as last recorded
        status: Status as last recorded
        last_valued_at: Date of the last valuation (None if never valued)
        valuation_source: Where the last valuation came from
    """

    id: str
    linked_type: LinkedTypeEnum = LinkedTypeEnum.LOAN
    linked_id: Optional[str] = None
    collateral_type: CollateralTypeEnum = CollateralTypeEnum.OTHER
    current_value: NonNegativeFloat
    currency: str = "USD"
    haircut_pct: Optional[Percentage] = None
    pledged_value: Optional[NonNegativeFloat] = None
    target_ltv_pct: NonNegativeFloat = Field(
        default=70.0, description="Maximum acceptable LTV in percent"
    )
    current_ltv_pct: Optional[float] = None
    status: Optional[RiskStatusEnum] = None
    last_valued_at: Optional[date] = None
    valuation_source: Optional[str] = None


class LtvCalculation(Model):
    """
    Point-in-time LTV test of one collateral item against its exposure.

    Attributes:
        collateral_id: Collateral tested
        linked_type: Secured entity kind
        linked_id: Secured entity identifier
        currency: Currency of the figures
        current_value: Market value used
        haircut_pct: Haircut applied
        pledged_value: Lendable value after haircut
        loan_outstanding: Exposure secured by the collateral
        ltv_pct: Loan-to-value in percent
        target_ltv_pct: Maximum acceptable LTV
        status: ok, at_risk or breach
        margin_call_amount: Additional pledged value needed to restore the
            target LTV (0 when status is ok)
    """

    collateral_id: str
    linked_type: LinkedTypeEnum
    linked_id: Optional[str]
    currency: str
    current_value: float
    haircut_pct: float
    pledged_value: float
    loan_outstanding: float
    ltv_pct: float
    target_ltv_pct: float
    status: RiskStatusEnum
    margin_call_amount: float

    @property
    def headroom_pct(self) -> float:
        """Percentage points between the target and the current LTV."""
        return self.target_ltv_pct - self.ltv_pct


class LtvBreachEvent(Model):
    """A collateral item detected in breach (or at risk) during a portfolio sweep."""

    collateral_id: str
    linked_type: LinkedTypeEnum
    linked_id: Optional[str]
    currency: str
    status: RiskStatusEnum
    ltv_pct: float
    target_ltv_pct: float
    loan_outstanding: float
    pledged_value: float
    margin_call_amount: float
    detected_at: date


class LtvSummary(Model):
    """Portfolio-level aggregate of LTV calculations in one currency."""

    currency: Optional[str]
    count: int
    ok_count: int
    at_risk_count: int
    breach_count: int
    total_current_value: float
    total_pledged_value: float
    total_loan_outstanding: float
    portfolio_ltv_pct: float
    total_margin_call: float


def calculate_pledged_value(current_value: float, haircut_pct: float, places: int = 2) -> float:
    """
    Lendable value of a collateral item after its haircut.

    Example:
        >>> calculate_pledged_value(1_000_000, 30)
        700000.0
    """
    return round_money(current_value * (1 - haircut_pct / 100), places)


def calculate_ltv(loan_outstanding: float, pledged_value: float) -> float:
    """
    Loan-to-value in percent.

    Nothing pledged saturates at 100 so that the item still reads as maximal
    risk without a division error.
    """
    if pledged_value <= 0:
        logger.debug(
            f"Pledged value {pledged_value} is not positive; LTV saturated at {SATURATED_LTV_PCT}"
        )
        return SATURATED_LTV_PCT
    return loan_outstanding / pledged_value * 100


def determine_ltv_status(
    ltv_pct: float, target_ltv_pct: float, warning_buffer_pct: float = 10.0
) -> RiskStatusEnum:
    """
    Classify an LTV against its target.

    Example (target 70, buffer 10%):
        >>> determine_ltv_status(75, 70)
        <RiskStatusEnum.BREACH: 'breach'>
        >>> determine_ltv_status(65, 70)
        <RiskStatusEnum.AT_RISK: 'at_risk'>
        >>> determine_ltv_status(50, 70)
        <RiskStatusEnum.OK: 'ok'>
    """
    if ltv_pct > target_ltv_pct:
        return RiskStatusEnum.BREACH
    if ltv_pct >= target_ltv_pct * (1 - warning_buffer_pct / 100):
        return RiskStatusEnum.AT_RISK
    return RiskStatusEnum.OK


def calculate_margin_call_amount(
    loan_outstanding: float,
    target_ltv_pct: float,
    current_pledged_value: float,
    places: int = 2,
) -> float:
    """
    Additional pledged value needed to bring LTV back to target.

    A non-positive target cannot be restored by pledging more and yields 0.

    Example:
        >>> calculate_margin_call_amount(800, 75, 900)  # 800 / (900 + 166.67) = 0.75
        166.67
    """
    if target_ltv_pct <= 0:
        return 0.0
    required_pledged_value = loan_outstanding / (target_ltv_pct / 100)
    return round_money(max(0.0, required_pledged_value - current_pledged_value), places)


def resolve_haircut_pct(
    collateral: Collateral, settings: Optional[CreditEngineSettings] = None
) -> float:
    """Explicit haircut on the item, else the default for its collateral type."""
    if collateral.haircut_pct is not None:
        return collateral.haircut_pct
    return resolve_settings(settings).haircut_for(collateral.collateral_type)


def compute_ltv_calculation(
    collateral: Collateral,
    loan_outstanding: float,
    settings: Optional[CreditEngineSettings] = None,
) -> LtvCalculation:
    """
    Test one collateral item against the exposure it secures.

    The pledged value is always recomputed from the current value and the
    resolved haircut; a stored ``pledged_value`` is ignored.

    Args:
        collateral: Collateral item
        loan_outstanding: Exposure secured by the item
        settings: Engine settings (default haircuts, LTV warning buffer)

    Returns:
        LtvCalculation
    """
    settings = resolve_settings(settings)
    places = settings.money_decimal_places

    haircut_pct = resolve_haircut_pct(collateral, settings)
    pledged_value = calculate_pledged_value(collateral.current_value, haircut_pct, places)
    ltv_pct = calculate_ltv(loan_outstanding, pledged_value)
    status = determine_ltv_status(
        ltv_pct, collateral.target_ltv_pct, settings.ltv_warning_buffer_pct
    )

    margin_call = 0.0
    if status != RiskStatusEnum.OK:
        margin_call = calculate_margin_call_amount(
            loan_outstanding, collateral.target_ltv_pct, pledged_value, places
        )

    return LtvCalculation(
        collateral_id=collateral.id,
        linked_type=collateral.linked_type,
        linked_id=collateral.linked_id,
        currency=collateral.currency,
        current_value=collateral.current_value,
        haircut_pct=haircut_pct,
        pledged_value=pledged_value,
        loan_outstanding=loan_outstanding,
        ltv_pct=ltv_pct,
        target_ltv_pct=collateral.target_ltv_pct,
        status=status,
        margin_call_amount=margin_call,
    )


def resolve_exposure(
    collateral: Collateral,
    loans: Iterable[Loan] = (),
    facilities: Iterable[Facility] = (),
) -> Optional[float]:
    """
    Exposure secured by a collateral item.

    A loan link resolves to the loan's outstanding amount, a facility link to
    the facility's drawn amount. Returns None when the linked entity is not in
    the supplied collections.
    """
    if collateral.linked_type == LinkedTypeEnum.LOAN:
        for loan in loans:
            if loan.id == collateral.linked_id:
                return loan.outstanding_amount
    elif collateral.linked_type == LinkedTypeEnum.FACILITY:
        for facility in facilities:
            if facility.id == collateral.linked_id:
                return facility.drawn_amount
    return None


def check_all_ltv_breaches(
    collaterals: Iterable[Collateral],
    loans: Iterable[Loan],
    as_of: date,
    facilities: Iterable[Facility] = (),
    include_at_risk: bool = False,
    settings: Optional[CreditEngineSettings] = None,
) -> List[LtvBreachEvent]:
    """
    Sweep a collateral book and report items in breach.

    Items whose linked loan or facility is not supplied are skipped with a
    warning.

    Args:
        collaterals: Collateral items to test
        loans: Loans that collateral may be linked to
        as_of: Detection date stamped on the events
        facilities: Facilities that collateral may be linked to
        include_at_risk: Also report items in the at-risk zone
        settings: Engine settings

    Returns:
        Breach events in collateral order
    """
    loans = list(loans)
    facilities = list(facilities)
    reportable = {RiskStatusEnum.BREACH}
    if include_at_risk:
        reportable.add(RiskStatusEnum.AT_RISK)

    events: List[LtvBreachEvent] = []
    for collateral in collaterals:
        exposure = resolve_exposure(collateral, loans, facilities)
        if exposure is None:
            logger.warning(
                f"Collateral {collateral.id}: linked {collateral.linked_type.value} "
                f"{collateral.linked_id} not found; skipped"
            )
            continue

        calc = compute_ltv_calculation(collateral, exposure, settings)
        if calc.status not in reportable:
            continue

        events.append(
            LtvBreachEvent(
                collateral_id=calc.collateral_id,
                linked_type=calc.linked_type,
                linked_id=calc.linked_id,
                currency=calc.currency,
                status=calc.status,
                ltv_pct=calc.ltv_pct,
                target_ltv_pct=calc.target_ltv_pct,
                loan_outstanding=calc.loan_outstanding,
                pledged_value=calc.pledged_value,
                margin_call_amount=calc.margin_call_amount,
                detected_at=as_of,
            )
        )
    return events


def get_ltv_distribution(ltv_values: Iterable[float]) -> Dict[str, int]:
    """
    Histogram of LTV values over fixed buckets.

    Buckets are closed on the right (an LTV of exactly 25 falls into
    ``0-25%``); negative values are ignored.

    Example:
        >>> get_ltv_distribution([10, 30, 60, 80, 120])
        {'0-25%': 1, '25-50%': 1, '50-75%': 1, '75-100%': 1, '>100%': 1}
    """
    values = pd.Series(list(ltv_values), dtype="float64")
    buckets = pd.cut(
        values,
        bins=LTV_BUCKET_EDGES,
        labels=LTV_BUCKET_LABELS,
        right=True,
        include_lowest=True,
    )
    counts = buckets.value_counts().reindex(LTV_BUCKET_LABELS, fill_value=0)
    return {label: int(count) for label, count in counts.items()}


def needs_revaluation(
    collateral: Collateral,
    as_of: date,
    max_age_days: Optional[int] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> bool:
    """True if never valued, or valued more than ``max_age_days`` before ``as_of``."""
    if collateral.last_valued_at is None:
        return True
    if max_age_days is None:
        max_age_days = resolve_settings(settings).revaluation_max_age_days
    return days_between(collateral.last_valued_at, as_of) > max_age_days


def revalue_collateral(
    collateral: Collateral,
    new_value: float,
    valued_at: date,
    source: Optional[str] = None,
    haircut_pct: Optional[float] = None,
    loan_outstanding: Optional[float] = None,
    settings: Optional[CreditEngineSettings] = None,
) -> Collateral:
    """
    Return the collateral item with a new valuation applied.

    The pledged value is recomputed from the new value and the (possibly
    changed) haircut. When ``loan_outstanding`` is given the recorded LTV and
    status are refreshed too.
    """
    settings = resolve_settings(settings)
    update = {
        "current_value": new_value,
        "last_valued_at": valued_at,
        "valuation_source": source if source is not None else collateral.valuation_source,
    }
    if haircut_pct is not None:
        update["haircut_pct"] = haircut_pct

    # Validated rebuild so that the new value and haircut are range-checked
    revalued = Collateral.model_validate({**collateral.model_dump(), **update})

    effective_haircut = resolve_haircut_pct(revalued, settings)
    pledged_value = calculate_pledged_value(
        revalued.current_value, effective_haircut, settings.money_decimal_places
    )
    refreshed = {"pledged_value": pledged_value}

    if loan_outstanding is not None:
        calc = compute_ltv_calculation(revalued, loan_outstanding, settings)
        refreshed["current_ltv_pct"] = calc.ltv_pct
        refreshed["status"] = calc.status

    return revalued.model_copy(update=refreshed)


def summarize_ltv(
    calculations: Iterable[LtvCalculation], currency: Optional[str] = None
) -> LtvSummary:
    """
    Aggregate LTV calculations into portfolio totals.

    ``portfolio_ltv_pct`` is total exposure over total pledged value, with the
    same saturation rule as a single item. Pass ``currency`` to restrict the
    aggregation to one currency.
    """
    calcs = [c for c in calculations if currency is None or c.currency == currency]
    total_pledged = sum_money(c.pledged_value for c in calcs)
    total_outstanding = sum_money(c.loan_outstanding for c in calcs)

    return LtvSummary(
        currency=currency,
        count=len(calcs),
        ok_count=sum(1 for c in calcs if c.status == RiskStatusEnum.OK),
        at_risk_count=sum(1 for c in calcs if c.status == RiskStatusEnum.AT_RISK),
        breach_count=sum(1 for c in calcs if c.status == RiskStatusEnum.BREACH),
        total_current_value=sum_money(c.current_value for c in calcs),
        total_pledged_value=total_pledged,
        total_loan_outstanding=total_outstanding,
        portfolio_ltv_pct=calculate_ltv(total_outstanding, total_pledged) if calcs else 0.0,
        total_margin_call=sum_money(c.margin_call_amount for c in calcs),
    )
