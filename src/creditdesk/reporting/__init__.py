# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creditdesk Reporting Module

Portfolio-level views over a credit book:
    kpis = calculate_credit_kpis(facilities, loans, payments, covenants,
                                 collaterals, currency="USD", as_of=today)
    calendar = build_credit_calendar(facilities, loans, payments, covenants,
                                     as_of=today, horizon_days=90)
"""

from .calendar import CalendarEvent, build_credit_calendar, calendar_to_dataframe
from .portfolio import (
    CreditKpis,
    calculate_credit_kpis,
    get_debt_by_borrower,
    get_maturity_profile,
    get_rate_type_distribution,
)

__all__ = [
    # KPI strip
    "CreditKpis",
    "calculate_credit_kpis",
    # Distributions
    "get_rate_type_distribution",
    "get_maturity_profile",
    "get_debt_by_borrower",
    # Calendar
    "CalendarEvent",
    "build_credit_calendar",
    "calendar_to_dataframe",
]
