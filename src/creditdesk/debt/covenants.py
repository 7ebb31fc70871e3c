# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Covenant compliance testing.

A covenant is a financial test (minimum liquidity, maximum LTV, maximum
leverage, ...) on a facility or loan. Testing a covenant resolves its current
value from host-supplied financial data, compares it against the threshold and
classifies it as ok, at_risk or breach.

Status classification:
- Non-compliant values are always ``breach``.
- Compliant values inside the buffer zone are ``at_risk``. The buffer expands
  minimum thresholds (``>=``/``>``: at risk below threshold * (1 + buffer))
  and contracts maximum thresholds (``<=``/``<``: at risk above
  threshold * (1 - buffer)), so the warning zone always sits on the compliant
  side of the threshold.

A covenant whose value cannot be resolved keeps its previous status: an
unknown value is never reported as compliant.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Iterable, List, Optional

from pydantic import Field, field_validator
from typing_extensions import assert_never

from ..core.primitives import (
    CovenantTypeEnum,
    CreditEngineSettings,
    LinkedTypeEnum,
    Model,
    PaymentFrequencyEnum,
    RiskStatusEnum,
    ThresholdOperator,
    WaiverStatusEnum,
    add_months,
    coerce_enum,
    resolve_settings,
    to_date,
)

logger = logging.getLogger(__name__)


class CovenantThreshold(Model):
    """Threshold a covenant's value is compared against."""

    operator: ThresholdOperator
    value: float
    unit: Optional[str] = None


class CovenantValue(Model):
    """Last recorded value of a covenant."""

    value: float
    as_of: Optional[date] = None


class Covenant(Model):
    """
    A compliance test on a facility or loan.

    ``status`` is a derived classification recomputed on each test; it is
    stored only so that the next test can detect transitions. Unrecognised
    ``covenant_type`` keys are coerced to ``other`` (resolved from the stored
    ``current_value``).

    Attributes:
        id: Covenant identifier
        name: Display name
        linked_type: Whether the covenant sits on a facility or a loan
        linked_id: Identifier of the facility or loan
        covenant_type: Kind of financial test
        threshold: Operator, value and optional unit
        current_value: Last recorded value and its date
        buffer_pct: At-risk buffer in percent (None uses the engine default)
        status: Status from the last test (None if never tested)
        test_frequency: How often the covenant is tested
        next_test_at: Next scheduled test date
        last_test_at: Date of the last test
        waiver_status: Lender waiver state
    """

    id: str
    name: str = ""
    linked_type: Optional[LinkedTypeEnum] = None
    linked_id: Optional[str] = None
    covenant_type: CovenantTypeEnum = CovenantTypeEnum.OTHER
    threshold: CovenantThreshold
    current_value: Optional[CovenantValue] = None
    buffer_pct: Optional[float] = Field(default=None, ge=0, le=100)
    status: Optional[RiskStatusEnum] = None
    test_frequency: PaymentFrequencyEnum = PaymentFrequencyEnum.QUARTERLY
    next_test_at: Optional[date] = None
    last_test_at: Optional[date] = None
    waiver_status: WaiverStatusEnum = WaiverStatusEnum.NONE

    @field_validator("covenant_type", mode="before")
    @classmethod
    def _coerce_covenant_type(cls, v):
        return coerce_enum(CovenantTypeEnum, v, CovenantTypeEnum.OTHER, "covenant_type")


class CovenantDataSources(Model):
    """
    Financial data the host assembles for covenant testing.

    Any field may be missing; covenants that depend on a missing figure
    resolve to None.
    """

    cash_balance: Optional[float] = None
    net_worth: Optional[float] = None
    total_debt: Optional[float] = None
    ebitda: Optional[float] = None
    collateral_value: Optional[float] = None
    loan_outstanding: Optional[float] = None


class CovenantTestResult(Model):
    """
    Outcome of testing one covenant.

    Attributes:
        covenant_id: Covenant tested
        tested_at: Test timestamp (supplied by the caller)
        previous_status: Status before the test
        new_status: Status after the test (previous status if unresolved)
        current_value: Resolved value, or None if it could not be derived
        threshold: Threshold value compared against
        is_compliant: Threshold comparison result, None if unresolved
        requires_action: Whether the result needs escalation
        value_resolved: Whether a current value could be derived
        next_test_at: Next test date implied by the covenant's frequency
    """

    covenant_id: str
    tested_at: datetime
    previous_status: Optional[RiskStatusEnum]
    new_status: Optional[RiskStatusEnum]
    current_value: Optional[float]
    threshold: float
    is_compliant: Optional[bool]
    requires_action: bool
    value_resolved: bool
    next_test_at: date


def get_covenant_current_value(
    covenant: Covenant, data_sources: CovenantDataSources
) -> Optional[float]:
    """
    Resolve the current value of a covenant from financial data.

    Resolution by covenant type:
        - min_liquidity: cash balance
        - min_net_worth: net worth
        - max_leverage: total debt / net worth (None if net worth <= 0)
        - max_ltv: loan outstanding / collateral value * 100 (None if value <= 0)
        - min_ebitda: EBITDA
        - debt_service_coverage: None; the data sources carry no debt service
        - other: last recorded value on the covenant

    Returns:
        The current value, or None when it cannot be derived
    """
    covenant_type = covenant.covenant_type
    ds = data_sources

    if covenant_type == CovenantTypeEnum.MIN_LIQUIDITY:
        return ds.cash_balance

    if covenant_type == CovenantTypeEnum.MIN_NET_WORTH:
        return ds.net_worth

    if covenant_type == CovenantTypeEnum.MAX_LEVERAGE:
        if ds.total_debt is not None and ds.net_worth is not None and ds.net_worth > 0:
            return ds.total_debt / ds.net_worth
        return None

    if covenant_type == CovenantTypeEnum.MAX_LTV:
        if (
            ds.loan_outstanding is not None
            and ds.collateral_value is not None
            and ds.collateral_value > 0
        ):
            return ds.loan_outstanding / ds.collateral_value * 100
        return None

    if covenant_type == CovenantTypeEnum.MIN_EBITDA:
        return ds.ebitda

    if covenant_type == CovenantTypeEnum.DEBT_SERVICE_COVERAGE:
        # Needs scheduled debt service and an income statement, neither of
        # which is part of CovenantDataSources
        logger.debug(f"Covenant {covenant.id}: debt service coverage is not computable")
        return None

    if covenant_type == CovenantTypeEnum.OTHER:
        return covenant.current_value.value if covenant.current_value else None

    assert_never(covenant_type)


def is_covenant_compliant(current_value: float, threshold: CovenantThreshold) -> bool:
    """Compare a value against a threshold using the threshold's operator."""
    operator = threshold.operator
    if operator == ThresholdOperator.GTE:
        return current_value >= threshold.value
    if operator == ThresholdOperator.LTE:
        return current_value <= threshold.value
    if operator == ThresholdOperator.GT:
        return current_value > threshold.value
    if operator == ThresholdOperator.LT:
        return current_value < threshold.value
    if operator == ThresholdOperator.EQ:
        return math.isclose(current_value, threshold.value, rel_tol=1e-9, abs_tol=1e-9)
    assert_never(operator)


def determine_covenant_status(
    current_value: float,
    threshold: CovenantThreshold,
    buffer_pct: float = 10.0,
) -> RiskStatusEnum:
    """
    Classify a covenant value as ok, at_risk or breach.

    Example (threshold >= 100, buffer 10%):
        >>> t = CovenantThreshold(operator=">=", value=100)
        >>> determine_covenant_status(105, t)
        <RiskStatusEnum.AT_RISK: 'at_risk'>
        >>> determine_covenant_status(115, t)
        <RiskStatusEnum.OK: 'ok'>
        >>> determine_covenant_status(95, t)
        <RiskStatusEnum.BREACH: 'breach'>
    """
    if not is_covenant_compliant(current_value, threshold):
        return RiskStatusEnum.BREACH

    operator = threshold.operator
    if operator.is_minimum:
        if current_value < threshold.value * (1 + buffer_pct / 100):
            return RiskStatusEnum.AT_RISK
    elif operator.is_maximum:
        if current_value > threshold.value * (1 - buffer_pct / 100):
            return RiskStatusEnum.AT_RISK

    return RiskStatusEnum.OK


def get_next_test_date(last_test_date: date, frequency: PaymentFrequencyEnum) -> date:
    """Next covenant test date after ``last_test_date`` for a test frequency."""
    frequency = PaymentFrequencyEnum(frequency)
    return add_months(last_test_date, frequency.months_per_period)


def _requires_action(
    new_status: RiskStatusEnum, previous_status: Optional[RiskStatusEnum]
) -> bool:
    # Edge-triggered: a covenant that stays at_risk is not re-escalated
    if new_status == RiskStatusEnum.BREACH:
        return True
    return new_status == RiskStatusEnum.AT_RISK and previous_status in (
        RiskStatusEnum.OK,
        None,
    )


def test_covenant(
    covenant: Covenant,
    data_sources: CovenantDataSources,
    tested_at: datetime,
    settings: Optional[CreditEngineSettings] = None,
) -> CovenantTestResult:
    """
    Test one covenant against current financial data.

    ``requires_action`` is raised for any breach, and for a move into
    ``at_risk`` from ``ok`` (or from an untested state). When the current
    value cannot be resolved the previous status is preserved, compliance is
    reported as unknown (None) and no action is raised.

    Args:
        covenant: Covenant to test
        data_sources: Financial data for value resolution
        tested_at: Test timestamp; the engine never reads the clock itself
        settings: Engine settings (default buffer for covenants without one)

    Returns:
        CovenantTestResult
    """
    settings = resolve_settings(settings)
    previous_status = covenant.status
    next_test_at = get_next_test_date(to_date(tested_at), covenant.test_frequency)
    current_value = get_covenant_current_value(covenant, data_sources)

    if current_value is None:
        logger.debug(
            f"Covenant {covenant.id}: value unresolved, keeping status {previous_status}"
        )
        return CovenantTestResult(
            covenant_id=covenant.id,
            tested_at=tested_at,
            previous_status=previous_status,
            new_status=previous_status,
            current_value=None,
            threshold=covenant.threshold.value,
            is_compliant=None,
            requires_action=False,
            value_resolved=False,
            next_test_at=next_test_at,
        )

    buffer_pct = (
        covenant.buffer_pct
        if covenant.buffer_pct is not None
        else settings.covenant_buffer_pct
    )
    new_status = determine_covenant_status(current_value, covenant.threshold, buffer_pct)

    return CovenantTestResult(
        covenant_id=covenant.id,
        tested_at=tested_at,
        previous_status=previous_status,
        new_status=new_status,
        current_value=current_value,
        threshold=covenant.threshold.value,
        is_compliant=is_covenant_compliant(current_value, covenant.threshold),
        requires_action=_requires_action(new_status, previous_status),
        value_resolved=True,
        next_test_at=next_test_at,
    )


def test_all_covenants(
    covenants: Iterable[Covenant],
    data_sources: CovenantDataSources,
    tested_at: datetime,
    settings: Optional[CreditEngineSettings] = None,
) -> List[CovenantTestResult]:
    """Test every covenant against the same data snapshot."""
    return [
        test_covenant(covenant, data_sources, tested_at, settings)
        for covenant in covenants
    ]


def get_covenants_due_for_testing(
    covenants: Iterable[Covenant], as_of: date
) -> List[Covenant]:
    """Covenants whose next test date is on or before ``as_of`` (or unscheduled)."""
    return [
        covenant
        for covenant in covenants
        if covenant.next_test_at is None or covenant.next_test_at <= as_of
    ]


def apply_covenant_test_result(
    covenant: Covenant, result: CovenantTestResult
) -> Covenant:
    """
    Return the covenant updated with a test outcome.

    Status, test dates and (when resolved) the recorded value are replaced;
    the input covenant is left untouched. Persisting is up to the caller.
    """
    if result.covenant_id != covenant.id:
        raise ValueError(
            f"Test result for covenant {result.covenant_id} cannot be applied to {covenant.id}"
        )

    tested_on = to_date(result.tested_at)
    update = {
        "status": result.new_status,
        "last_test_at": tested_on,
        "next_test_at": result.next_test_at,
    }
    if result.current_value is not None:
        update["current_value"] = CovenantValue(value=result.current_value, as_of=tested_on)
    return covenant.model_copy(update=update)
