# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Credit facility (bank credit line) model."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.primitives import (
    FacilityStatusEnum,
    FacilityTypeEnum,
    Model,
    NonNegativeFloat,
    round_money,
)


class Facility(Model):
    """
    A credit line extended by a bank.

    ``available_amount`` is expected to equal ``limit_amount - drawn_amount``
    but is not enforced: drawdowns are recorded externally and the caller
    keeps the three figures consistent. ``expected_available_amount`` and
    ``is_balanced`` expose the check without correcting the data.

    Attributes:
        id: Facility identifier
        name: Display name
        bank_id: Lending bank reference
        facility_type: Revolver, term, margin, lombard, bridge or construction
        currency: ISO currency code
        limit_amount: Committed limit
        drawn_amount: Amount currently drawn
        available_amount: Undrawn commitment as recorded
        maturity_date: Final maturity of the facility
        status: Active, closed or pending
    """

    id: str
    name: str = ""
    bank_id: Optional[str] = None
    facility_type: FacilityTypeEnum = FacilityTypeEnum.TERM
    currency: str = "USD"
    limit_amount: NonNegativeFloat = 0.0
    drawn_amount: NonNegativeFloat = 0.0
    available_amount: float = 0.0
    maturity_date: Optional[date] = None
    status: FacilityStatusEnum = FacilityStatusEnum.ACTIVE

    @property
    def expected_available_amount(self) -> float:
        """Undrawn commitment implied by limit and drawn amounts."""
        return round_money(self.limit_amount - self.drawn_amount)

    @property
    def is_balanced(self) -> bool:
        """Whether the recorded available amount matches limit minus drawn."""
        return abs(self.available_amount - self.expected_available_amount) < 0.01

    @property
    def utilization_pct(self) -> float:
        """Drawn amount as a percentage of the limit (0 for a zero limit)."""
        if self.limit_amount <= 0:
            return 0.0
        return self.drawn_amount / self.limit_amount * 100

    def days_to_maturity(self, as_of: date) -> Optional[int]:
        """Days from ``as_of`` to maturity, or None when no maturity is set."""
        if self.maturity_date is None:
            return None
        return (self.maturity_date - as_of).days
