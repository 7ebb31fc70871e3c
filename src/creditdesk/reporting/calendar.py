# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Dated credit events (payments, covenant tests, maturities) over a horizon."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional

import pandas as pd

from ..core.primitives import (
    CalendarEventTypeEnum,
    LinkedTypeEnum,
    Model,
    enum_to_string,
)
from ..debt.covenants import Covenant
from ..debt.facility import Facility
from ..debt.loan import Loan
from ..debt.payment import Payment

DEFAULT_HORIZON_DAYS = 90

# Same-day ordering: cash first, then tests, then maturities
_TYPE_ORDER = {
    CalendarEventTypeEnum.PAYMENT: 0,
    CalendarEventTypeEnum.COVENANT_TEST: 1,
    CalendarEventTypeEnum.MATURITY: 2,
}


class CalendarEvent(Model):
    """One dated entry on the credit calendar."""

    id: str
    title: str
    event_date: date
    event_type: CalendarEventTypeEnum
    linked_type: Optional[str] = None
    linked_id: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None


def build_credit_calendar(
    facilities: Iterable[Facility],
    loans: Iterable[Loan],
    payments: Iterable[Payment],
    covenants: Iterable[Covenant],
    as_of: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> List[CalendarEvent]:
    """
    Collect credit events from ``as_of`` through ``as_of + horizon_days``.

    Included:
        - unpaid payments due in the window (amount still owed)
        - covenant tests scheduled in the window
        - facility and active loan maturities in the window

    Args:
        facilities: Facilities in the book
        loans: Loans in the book
        payments: Payment ledger
        covenants: Covenants with scheduled tests
        as_of: First day of the window
        horizon_days: Window length in days

    Returns:
        Events sorted by date, then payment / covenant test / maturity
    """
    end = as_of + timedelta(days=horizon_days)
    loans = list(loans)
    loan_names = {loan.id: loan.name or loan.id for loan in loans}

    def in_window(d: Optional[date]) -> bool:
        return d is not None and as_of <= d <= end

    events: List[CalendarEvent] = []

    for payment in payments:
        if payment.is_paid or not in_window(payment.due_date):
            continue
        events.append(
            CalendarEvent(
                id=f"payment-{payment.id}",
                title=f"Payment due: {loan_names.get(payment.loan_id, payment.loan_id)}",
                event_date=payment.due_date,
                event_type=CalendarEventTypeEnum.PAYMENT,
                linked_type=LinkedTypeEnum.LOAN.value,
                linked_id=payment.loan_id,
                amount=payment.remaining_amount,
                currency=payment.currency,
            )
        )

    for covenant in covenants:
        if not in_window(covenant.next_test_at):
            continue
        events.append(
            CalendarEvent(
                id=f"covenant-{covenant.id}",
                title=f"Covenant test: {covenant.name or covenant.id}",
                event_date=covenant.next_test_at,
                event_type=CalendarEventTypeEnum.COVENANT_TEST,
                linked_type=enum_to_string(covenant.linked_type) if covenant.linked_type else None,
                linked_id=covenant.linked_id,
            )
        )

    for facility in facilities:
        if not in_window(facility.maturity_date):
            continue
        events.append(
            CalendarEvent(
                id=f"maturity-facility-{facility.id}",
                title=f"Facility maturity: {facility.name or facility.id}",
                event_date=facility.maturity_date,
                event_type=CalendarEventTypeEnum.MATURITY,
                linked_type=LinkedTypeEnum.FACILITY.value,
                linked_id=facility.id,
                amount=facility.drawn_amount,
                currency=facility.currency,
            )
        )

    for loan in loans:
        if not loan.is_active or not in_window(loan.maturity_date):
            continue
        events.append(
            CalendarEvent(
                id=f"maturity-loan-{loan.id}",
                title=f"Loan maturity: {loan_names[loan.id]}",
                event_date=loan.maturity_date,
                event_type=CalendarEventTypeEnum.MATURITY,
                linked_type=LinkedTypeEnum.LOAN.value,
                linked_id=loan.id,
                amount=loan.outstanding_amount,
                currency=loan.currency,
            )
        )

    events.sort(key=lambda e: (e.event_date, _TYPE_ORDER[e.event_type], e.id))
    return events


def calendar_to_dataframe(events: Iterable[CalendarEvent]) -> pd.DataFrame:
    """Calendar events as a DataFrame indexed by event date."""
    rows = [event.model_dump() for event in events]
    df = pd.DataFrame(
        rows,
        columns=list(CalendarEvent.model_fields),
    )
    df["event_type"] = df["event_type"].map(enum_to_string)
    return df.set_index("event_date")
