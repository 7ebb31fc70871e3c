# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Loan (drawdown under a facility) model."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..core.primitives import (
    AmortizationTypeEnum,
    BaseRateKey,
    LoanStatusEnum,
    Model,
    NonNegativeFloat,
    PaymentFrequencyEnum,
    RateTypeEnum,
    ValidationMixin,
    coerce_enum,
)


class Loan(Model, ValidationMixin):
    """
    A drawdown under exactly one facility.

    Rates are expressed in percent. A fixed loan uses ``fixed_rate_pct``; a
    floating loan resolves ``base_rate_key`` against live or default base
    rates and adds ``spread_pct`` (see ``debt.rates.get_current_rate``).
    ``current_rate_pct`` is the last rate the host recorded for the loan and
    is what schedules use when no rate is assumed.

    Unrecognised ``amortization_type`` and ``payment_frequency`` keys are
    coerced to ``interest_only`` and ``monthly`` with a warning instead of
    failing validation, so partially migrated loans still load.

    Example:
        >>> loan = Loan(
        ...     id="L-1",
        ...     facility_id="F-1",
        ...     principal_amount=1_000_000,
        ...     outstanding_amount=1_000_000,
        ...     rate_type="fixed",
        ...     fixed_rate_pct=5.0,
        ...     amortization_type="amortizing",
        ...     payment_frequency="monthly",
        ...     start_date=date(2024, 1, 1),
        ...     maturity_date=date(2025, 1, 1),
        ... )
    """

    id: str
    name: str = ""
    facility_id: Optional[str] = None
    borrower_entity_id: Optional[str] = None

    principal_amount: NonNegativeFloat
    outstanding_amount: NonNegativeFloat
    currency: str = "USD"

    # Rate terms
    rate_type: RateTypeEnum = RateTypeEnum.FIXED
    fixed_rate_pct: Optional[float] = None
    base_rate_key: Optional[BaseRateKey] = None
    spread_pct: float = 0.0
    current_rate_pct: Optional[float] = None
    rate_floor_pct: Optional[float] = Field(
        default=None, description="Minimum all-in floating rate (applied before the cap)"
    )
    rate_cap_pct: Optional[float] = Field(
        default=None, description="Maximum all-in floating rate"
    )

    # Repayment terms
    amortization_type: AmortizationTypeEnum = AmortizationTypeEnum.INTEREST_ONLY
    payment_frequency: PaymentFrequencyEnum = PaymentFrequencyEnum.MONTHLY
    start_date: date
    maturity_date: date
    status: LoanStatusEnum = LoanStatusEnum.ACTIVE

    @field_validator("amortization_type", mode="before")
    @classmethod
    def _coerce_amortization_type(cls, v):
        return coerce_enum(
            AmortizationTypeEnum, v, AmortizationTypeEnum.INTEREST_ONLY, "amortization_type"
        )

    @field_validator("payment_frequency", mode="before")
    @classmethod
    def _coerce_payment_frequency(cls, v):
        return coerce_enum(
            PaymentFrequencyEnum, v, PaymentFrequencyEnum.MONTHLY, "payment_frequency"
        )

    @model_validator(mode="after")
    def _check_outstanding(self) -> "Loan":
        """Outstanding balance can never exceed the original principal."""
        return self.validate_not_exceeding(self, "outstanding_amount", "principal_amount")

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatusEnum.ACTIVE

    @property
    def recorded_rate_pct(self) -> float:
        """Last recorded all-in rate: current rate, else fixed rate, else 0."""
        if self.current_rate_pct:
            return self.current_rate_pct
        return self.fixed_rate_pct or 0.0
