# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Ledger payment model."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.primitives import (
    Model,
    NonNegativeFloat,
    PaymentStatusEnum,
    round_money,
)


class Payment(Model):
    """
    An actual or scheduled installment on one loan.

    A ``Payment`` is the ledger of what is due and what was paid, as opposed
    to a ``ScheduleRow`` which is a projection. ``late`` is a derived state:
    a ``scheduled`` payment whose due date has passed (see
    ``effective_status``).

    Attributes:
        id: Payment identifier
        loan_id: Loan the installment belongs to
        currency: ISO currency code
        due_date: Contractual due date
        amount: Total installment amount
        principal_part: Principal component, if broken down
        interest_part: Interest component, if broken down
        fees_part: Fees component, if any
        status: Stored status (scheduled, paid, partial)
        paid_at: Settlement date
        paid_amount: Amount settled so far
    """

    id: str
    loan_id: str
    currency: str = "USD"
    due_date: date
    amount: NonNegativeFloat
    principal_part: Optional[NonNegativeFloat] = None
    interest_part: Optional[NonNegativeFloat] = None
    fees_part: Optional[NonNegativeFloat] = None
    status: PaymentStatusEnum = PaymentStatusEnum.SCHEDULED
    paid_at: Optional[date] = None
    paid_amount: Optional[NonNegativeFloat] = None

    def effective_status(self, as_of: date) -> PaymentStatusEnum:
        """Stored status, with scheduled payments past their due date reported as late."""
        if self.status == PaymentStatusEnum.SCHEDULED and self.due_date < as_of:
            return PaymentStatusEnum.LATE
        return self.status

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatusEnum.PAID

    @property
    def settlement_date(self) -> date:
        """Date the payment counts as settled: paid date, else due date."""
        return self.paid_at or self.due_date

    @property
    def has_breakdown(self) -> bool:
        """Whether principal or interest components were recorded."""
        return self.principal_part is not None or self.interest_part is not None

    @property
    def remaining_amount(self) -> float:
        """Amount still owed on the installment (0 once paid)."""
        if self.is_paid:
            return 0.0
        return max(0.0, round_money(self.amount - (self.paid_amount or 0.0)))
