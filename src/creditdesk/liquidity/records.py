# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cash-flow records exported to liquidity forecasting.

Records are plain frozen dataclasses so they can be produced in bulk and
serialized without pydantic overhead.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

from ..core.primitives import (
    CashFlowCategoryEnum,
    CashFlowDirection,
    FinancingSubcategoryEnum,
)


@dataclass(frozen=True, slots=True)
class CashFlow:
    """
    Immutable record of one expected debt cash flow.

    Amounts are positive magnitudes; ``direction`` carries the sign.

    Attributes:
        id: Deterministic identifier derived from the source entry
        flow_date: Date the cash is expected to move
        amount: Flow amount (always >= 0)
        currency: ISO currency code
        direction: Inflow or outflow (debt service is an outflow)
        category: Primary category for the forecasting consumer
        subcategory: Principal, interest or undivided debt service
        description: Human-readable label
        is_confirmed: True for ledgered payments, False for projected rows
        loan_id: Loan the flow belongs to
        source_ref: Payment id or schedule period the flow was derived from
    """

    # Core flow data
    id: str
    flow_date: datetime.date
    amount: float
    currency: str
    direction: CashFlowDirection
    category: CashFlowCategoryEnum
    subcategory: FinancingSubcategoryEnum
    description: str
    is_confirmed: bool

    # Traceability
    loan_id: Optional[str] = None
    source_ref: Optional[str] = None
