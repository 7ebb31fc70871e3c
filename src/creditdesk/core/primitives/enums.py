# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class FacilityTypeEnum(str, Enum):
    """Kind of credit line extended by a bank."""

    REVOLVER = "revolver"
    TERM = "term"
    MARGIN = "margin"
    LOMBARD = "lombard"
    BRIDGE = "bridge"
    CONSTRUCTION = "construction"


class FacilityStatusEnum(str, Enum):
    """Lifecycle status of a facility."""

    ACTIVE = "active"
    CLOSED = "closed"
    PENDING = "pending"


class LoanStatusEnum(str, Enum):
    """Lifecycle status of a loan drawn under a facility."""

    ACTIVE = "active"
    PAID_OFF = "paid_off"
    DEFAULT = "default"


class RateTypeEnum(str, Enum):
    """Whether a loan carries a fixed coupon or floats over a base rate."""

    FIXED = "fixed"
    FLOATING = "floating"


class BaseRateKey(str, Enum):
    """Benchmark indices a floating-rate loan can reference."""

    SOFR = "sofr"
    EURIBOR = "euribor"
    SONIA = "sonia"
    PRIME = "prime"
    # Legacy index, still present on older loans
    LIBOR = "libor"


class AmortizationTypeEnum(str, Enum):
    """
    How principal is repaid over the life of a loan.

    Attributes:
        INTEREST_ONLY: Interest each period, principal repaid in the final period
        AMORTIZING: Level installment (annuity), principal declines each period
        BULLET: Interest each period, 100% of principal due at maturity;
            partial amortization is never permitted
    """

    INTEREST_ONLY = "interest_only"
    AMORTIZING = "amortizing"
    BULLET = "bullet"


class PaymentFrequencyEnum(str, Enum):
    """Installment frequency; also used as the covenant test frequency."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"

    @property
    def months_per_period(self) -> int:
        """Calendar months between two consecutive installments."""
        return _MONTHS_PER_PERIOD[self]

    @property
    def periods_per_year(self) -> int:
        """Number of installments in a year."""
        return 12 // _MONTHS_PER_PERIOD[self]


_MONTHS_PER_PERIOD: Dict[PaymentFrequencyEnum, int] = {
    PaymentFrequencyEnum.MONTHLY: 1,
    PaymentFrequencyEnum.QUARTERLY: 3,
    PaymentFrequencyEnum.SEMI_ANNUAL: 6,
    PaymentFrequencyEnum.ANNUAL: 12,
}


class PaymentStatusEnum(str, Enum):
    """
    Stored status of a ledger payment.

    ``LATE`` is normally derived (scheduled and past due) rather than stored;
    it is accepted here so that payloads carrying it still validate.
    """

    SCHEDULED = "scheduled"
    PAID = "paid"
    LATE = "late"
    PARTIAL = "partial"


class CollateralTypeEnum(str, Enum):
    """Asset classes that can be pledged against a facility or loan."""

    CASH = "cash"
    SECURITIES = "securities"
    REAL_ESTATE = "real_estate"
    EQUIPMENT = "equipment"
    INVENTORY = "inventory"
    RECEIVABLES = "receivables"
    OTHER = "other"


class LinkedTypeEnum(str, Enum):
    """Entity a collateral item or covenant is attached to."""

    FACILITY = "facility"
    LOAN = "loan"


class RiskStatusEnum(str, Enum):
    """Three-level compliance classification shared by covenants and collateral."""

    OK = "ok"
    AT_RISK = "at_risk"
    BREACH = "breach"


class CovenantTypeEnum(str, Enum):
    """Financial tests a covenant can express."""

    MIN_LIQUIDITY = "min_liquidity"
    MAX_LTV = "max_ltv"
    MIN_NET_WORTH = "min_net_worth"
    MAX_LEVERAGE = "max_leverage"
    MIN_EBITDA = "min_ebitda"
    DEBT_SERVICE_COVERAGE = "debt_service_coverage"
    OTHER = "other"


class ThresholdOperator(str, Enum):
    """Comparison applied between a covenant's current value and its threshold."""

    GTE = ">="
    LTE = "<="
    GT = ">"
    LT = "<"
    EQ = "=="

    @property
    def is_minimum(self) -> bool:
        """True for floor-style thresholds (value must stay above)."""
        return self in (ThresholdOperator.GTE, ThresholdOperator.GT)

    @property
    def is_maximum(self) -> bool:
        """True for ceiling-style thresholds (value must stay below)."""
        return self in (ThresholdOperator.LTE, ThresholdOperator.LT)


class WaiverStatusEnum(str, Enum):
    """Status of a lender waiver request on a covenant."""

    NONE = "none"
    REQUESTED = "requested"
    GRANTED = "granted"
    DENIED = "denied"


class DayCountConvention(str, Enum):
    """
    Simplified day-count methods for interest accrual.

    These are planning approximations: 30/360 scales actual days by
    30/30.44 rather than applying the ISDA day adjustment rules.
    """

    ACTUAL_360 = "actual_360"
    ACTUAL_365 = "actual_365"
    THIRTY_360 = "30_360"


class CashFlowDirection(str, Enum):
    """Sign convention for exported cash-flow events."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class CashFlowCategoryEnum(str, Enum):
    """Primary category used by the liquidity forecasting consumer."""

    DEBT = "debt"


class FinancingSubcategoryEnum(str, Enum):
    """
    Secondary classification of debt obligations.

    Attributes:
        PRINCIPAL_PAYMENT: Repayment of loan principal
        INTEREST_PAYMENT: Interest (and fees) on the outstanding balance
        DEBT_SERVICE: Undivided installment (no principal/interest breakdown)
    """

    PRINCIPAL_PAYMENT = "principal"
    INTEREST_PAYMENT = "interest"
    DEBT_SERVICE = "debt_service"


class CalendarEventTypeEnum(str, Enum):
    """Kinds of dated events on the credit calendar."""

    PAYMENT = "payment"
    COVENANT_TEST = "covenant_test"
    MATURITY = "maturity"


# =============================================================================
# ENUM UTILITIES
# =============================================================================


def enum_to_string(value) -> str:
    """
    Convert enum values to their string representation for pandas storage.

    Examples:
        >>> enum_to_string(RiskStatusEnum.AT_RISK)
        'at_risk'
        >>> enum_to_string("already_string")
        'already_string'
    """
    if isinstance(value, Enum):
        return value.value
    return str(value)


def coerce_enum(enum_cls: Type[E], value: Any, fallback: E, field_name: str) -> E:
    """
    Coerce a raw key into ``enum_cls``, falling back for unrecognised keys.

    Used at the model boundary for keys where partially-migrated data is
    expected. The fallback is logged so that data-quality issues stay visible.

    Args:
        enum_cls: Target enum class
        value: Raw value (enum member, key string, or None)
        fallback: Member returned when ``value`` is not a valid key
        field_name: Field name for the warning message

    Returns:
        The matching enum member, or ``fallback``
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(
            f"Unrecognised {field_name} key {value!r}; falling back to '{fallback.value}'"
        )
        return fallback

