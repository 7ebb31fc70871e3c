# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creditdesk Core Primitives

Building blocks shared by every engine component: the immutable model base,
key enums, constrained types, engine settings, money rounding and calendar
helpers.
"""

from .dates import add_months, days_between, months_between, start_of_year, to_date
from .enums import (
    AmortizationTypeEnum,
    BaseRateKey,
    CalendarEventTypeEnum,
    CashFlowCategoryEnum,
    CashFlowDirection,
    CollateralTypeEnum,
    CovenantTypeEnum,
    DayCountConvention,
    FacilityStatusEnum,
    FacilityTypeEnum,
    FinancingSubcategoryEnum,
    LinkedTypeEnum,
    LoanStatusEnum,
    PaymentFrequencyEnum,
    PaymentStatusEnum,
    RateTypeEnum,
    RiskStatusEnum,
    ThresholdOperator,
    WaiverStatusEnum,
    coerce_enum,
    enum_to_string,
)
from .model import Model
from .money import MONEY_TOLERANCE, round_money, sum_money
from .settings import CreditEngineSettings, resolve_settings
from .types import NonNegativeFloat, Percentage, PositiveInt
from .validation import ValidationMixin

__all__ = [
    # Core models
    "Model",
    "ValidationMixin",
    # Settings
    "CreditEngineSettings",
    "resolve_settings",
    # Enums
    "AmortizationTypeEnum",
    "BaseRateKey",
    "CalendarEventTypeEnum",
    "CashFlowCategoryEnum",
    "CashFlowDirection",
    "CollateralTypeEnum",
    "CovenantTypeEnum",
    "DayCountConvention",
    "FacilityStatusEnum",
    "FacilityTypeEnum",
    "FinancingSubcategoryEnum",
    "LinkedTypeEnum",
    "LoanStatusEnum",
    "PaymentFrequencyEnum",
    "PaymentStatusEnum",
    "RateTypeEnum",
    "RiskStatusEnum",
    "ThresholdOperator",
    "WaiverStatusEnum",
    "coerce_enum",
    "enum_to_string",
    # Types
    "NonNegativeFloat",
    "Percentage",
    "PositiveInt",
    # Money
    "MONEY_TOLERANCE",
    "round_money",
    "sum_money",
    # Dates
    "add_months",
    "days_between",
    "months_between",
    "start_of_year",
    "to_date",
]
