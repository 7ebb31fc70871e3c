# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

# Import all debt components
from .amortization import (
    GeneratedSchedule,
    ScheduleRow,
    generate_schedule,
    schedule_to_payments,
)
from .collateral import (
    Collateral,
    LtvBreachEvent,
    LtvCalculation,
    LtvSummary,
    calculate_ltv,
    calculate_margin_call_amount,
    calculate_pledged_value,
    check_all_ltv_breaches,
    compute_ltv_calculation,
    determine_ltv_status,
    get_ltv_distribution,
    needs_revaluation,
    resolve_exposure,
    resolve_haircut_pct,
    revalue_collateral,
    summarize_ltv,
)
from .covenants import (
    Covenant,
    CovenantDataSources,
    CovenantTestResult,
    CovenantThreshold,
    CovenantValue,
    apply_covenant_test_result,
    determine_covenant_status,
    get_covenant_current_value,
    get_covenants_due_for_testing,
    get_next_test_date,
    is_covenant_compliant,
    test_all_covenants,
    test_covenant,
)
from .facility import Facility
from .interest import (
    InterestCostSummary,
    LoanInterestCost,
    calculate_interest_cost_ytd,
    calculate_weighted_average_rate,
)
from .loan import Loan
from .payment import Payment
from .rates import (
    BaseRates,
    InterestCalculation,
    calculate_period_interest,
    get_current_rate,
)

__all__ = [
    # Entities
    "Facility",
    "Loan",
    "Payment",
    "Collateral",
    "Covenant",
    "CovenantThreshold",
    "CovenantValue",
    "CovenantDataSources",
    # Schedule generation
    "ScheduleRow",
    "GeneratedSchedule",
    "generate_schedule",
    "schedule_to_payments",
    # Rates and interest
    "BaseRates",
    "InterestCalculation",
    "get_current_rate",
    "calculate_period_interest",
    "LoanInterestCost",
    "InterestCostSummary",
    "calculate_interest_cost_ytd",
    "calculate_weighted_average_rate",
    # Covenant compliance
    "CovenantTestResult",
    "get_covenant_current_value",
    "is_covenant_compliant",
    "determine_covenant_status",
    "test_covenant",
    "test_all_covenants",
    "get_next_test_date",
    "get_covenants_due_for_testing",
    "apply_covenant_test_result",
    # Collateral / LTV
    "LtvCalculation",
    "LtvBreachEvent",
    "LtvSummary",
    "calculate_pledged_value",
    "calculate_ltv",
    "determine_ltv_status",
    "calculate_margin_call_amount",
    "resolve_haircut_pct",
    "resolve_exposure",
    "compute_ltv_calculation",
    "check_all_ltv_breaches",
    "get_ltv_distribution",
    "needs_revaluation",
    "revalue_collateral",
    "summarize_ltv",
]
