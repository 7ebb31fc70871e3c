# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Liquidity export of debt obligations.

Converts ledger payments and projected schedules into ``CashFlow`` records
for a liquidity-forecasting consumer.
"""

from .obligations import (
    DebtPaymentTotals,
    LoanLiquidityImpact,
    cash_flows_to_dataframe,
    get_loan_liquidity_impact,
    get_total_debt_payments,
    payments_to_liquidity_flows,
    schedule_to_liquidity_flows,
)
from .records import CashFlow

__all__ = [
    "CashFlow",
    "DebtPaymentTotals",
    "LoanLiquidityImpact",
    "payments_to_liquidity_flows",
    "schedule_to_liquidity_flows",
    "get_total_debt_payments",
    "get_loan_liquidity_impact",
    "cash_flows_to_dataframe",
]
