# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creditdesk - Credit Facility Risk & Amortization Engine

Pure, deterministic calculators over a borrower's credit book: facilities,
loans, payments, collateral and covenants.

Key Entry Points:
- creditdesk.debt.generate_schedule() - Loan amortization schedules
- creditdesk.debt.calculate_interest_cost_ytd() - Paid plus accrued interest
- creditdesk.debt.test_covenant() - Covenant compliance with at-risk buffers
- creditdesk.debt.compute_ltv_calculation() - Collateral LTV and margin calls
- creditdesk.liquidity.* - Debt obligations as liquidity cash flows
- creditdesk.reporting.* - Portfolio KPIs, distributions and calendar

Example Usage:
    ```python
    from datetime import date
    from creditdesk.debt import Loan, generate_schedule

    loan = Loan(
        id="L-1",
        principal_amount=1_000_000,
        outstanding_amount=1_000_000,
        fixed_rate_pct=5.0,
        amortization_type="amortizing",
        payment_frequency="monthly",
        start_date=date(2024, 1, 1),
        maturity_date=date(2025, 1, 1),
    )
    schedule = generate_schedule(loan)
    print(f"Installment: {schedule.payment_amount:,.2f}")
    ```

The engine never reads the wall clock: every operation that needs "now"
takes it as an argument.
"""

import importlib
import logging

# Library is silent unless the host application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "core",
    "debt",
    "liquidity",
    "reporting",
]


_LAZY_MODULES = {
    "core": "creditdesk.core",
    "debt": "creditdesk.debt",
    "liquidity": "creditdesk.liquidity",
    "reporting": "creditdesk.reporting",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'creditdesk' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
