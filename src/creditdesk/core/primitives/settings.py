# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Dict, Mapping, Optional

from pydantic import Field

from .enums import BaseRateKey, CollateralTypeEnum, DayCountConvention
from .model import Model
from .types import Percentage, PositiveInt


def _default_base_rates() -> Dict[BaseRateKey, float]:
    return {
        BaseRateKey.SOFR: 5.30,
        BaseRateKey.EURIBOR: 3.90,
        BaseRateKey.SONIA: 5.20,
        BaseRateKey.PRIME: 8.50,
        BaseRateKey.LIBOR: 5.60,
    }


def _default_haircuts() -> Dict[CollateralTypeEnum, float]:
    return {
        CollateralTypeEnum.CASH: 0.0,
        CollateralTypeEnum.SECURITIES: 20.0,
        CollateralTypeEnum.REAL_ESTATE: 30.0,
        CollateralTypeEnum.EQUIPMENT: 40.0,
        CollateralTypeEnum.INVENTORY: 50.0,
        CollateralTypeEnum.RECEIVABLES: 25.0,
        CollateralTypeEnum.OTHER: 50.0,
    }


class CreditEngineSettings(Model):
    """
    Tunable defaults for the credit engine.

    Every table the engine would otherwise hard-code lives here so a host can
    override it per tenant or per test run. Operations accept an optional
    ``settings`` argument and fall back to ``CreditEngineSettings()``.

    Usage Examples:
        # Library defaults
        settings = CreditEngineSettings()

        # Tighter monitoring with a live SOFR fixing
        settings = CreditEngineSettings(
            covenant_buffer_pct=15,
            ltv_warning_buffer_pct=5,
            default_base_rates={BaseRateKey.SOFR: 4.31},
        )
    """

    default_base_rates: Dict[BaseRateKey, float] = Field(
        default_factory=_default_base_rates,
        description=(
            "Base rate (percent) per index, used when the caller supplies no live rate "
            "for a floating loan's base-rate key."
        ),
    )
    default_haircuts: Dict[CollateralTypeEnum, Percentage] = Field(
        default_factory=_default_haircuts,
        description="Haircut (percent) per collateral type for items without an explicit haircut.",
    )
    covenant_buffer_pct: Percentage = Field(
        default=10.0,
        description="At-risk buffer for covenants that do not carry their own buffer.",
    )
    ltv_warning_buffer_pct: Percentage = Field(
        default=10.0,
        description="At-risk buffer below target LTV for collateral monitoring.",
    )
    revaluation_max_age_days: PositiveInt = Field(
        default=90,
        description="Collateral valuations older than this many days need revaluation.",
    )
    accrual_day_count: DayCountConvention = Field(
        default=DayCountConvention.ACTUAL_360,
        description="Day-count method for accrued (unpaid) interest in YTD summaries.",
    )
    money_decimal_places: PositiveInt = Field(
        default=2, description="Number of decimal places for currency values."
    )
    payments_due_window_days: PositiveInt = Field(
        default=30, description="Window for the 'payments due' portfolio KPI."
    )
    maturity_warning_days: PositiveInt = Field(
        default=180, description="Window for the 'facilities maturing' portfolio KPI."
    )

    def base_rate_for(
        self,
        key: BaseRateKey,
        live_rates: Optional[Mapping[BaseRateKey, float]] = None,
    ) -> float:
        """
        Resolve a base rate, preferring a caller-supplied live fixing.

        Accepts live rates keyed by enum member or raw key string.
        """
        if live_rates:
            if key in live_rates:
                return float(live_rates[key])
            if key.value in live_rates:
                return float(live_rates[key.value])
        return float(self.default_base_rates.get(key, 0.0))

    def haircut_for(self, collateral_type: CollateralTypeEnum) -> float:
        """Default haircut for a collateral type (0 if the table omits it)."""
        return float(self.default_haircuts.get(collateral_type, 0.0))


def resolve_settings(settings: Optional[CreditEngineSettings]) -> CreditEngineSettings:
    """Return ``settings`` or a default-constructed instance."""
    return settings if settings is not None else CreditEngineSettings()
