# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for portfolio KPIs and distributions.
"""

from datetime import date

import pytest

from creditdesk.core.primitives import PaymentStatusEnum
from creditdesk.debt import Facility, calculate_interest_cost_ytd
from creditdesk.reporting import (
    calculate_credit_kpis,
    get_debt_by_borrower,
    get_maturity_profile,
    get_rate_type_distribution,
)

from tests.factories import (
    create_floating_loan,
    create_test_collateral,
    create_test_covenant,
    create_test_loan,
    create_test_payment,
)

AS_OF = date(2024, 6, 15)


@pytest.fixture
def facilities():
    return [
        Facility(id="F-1", maturity_date=date(2024, 10, 1)),  # 108 days out
        Facility(id="F-2", maturity_date=date(2026, 1, 1)),
        Facility(id="F-3", maturity_date=date(2024, 6, 1)),  # already matured
        Facility(id="F-4", maturity_date=date(2024, 7, 1), status="closed"),
        Facility(id="F-EUR", maturity_date=date(2024, 7, 1), currency="EUR"),
    ]


@pytest.fixture
def loans():
    return [
        create_test_loan(
            outstanding=900_000,
            start=date(2023, 1, 1),
            maturity=date(2026, 1, 1),
            borrower_entity_id="ENT-A",
        ),
        create_floating_loan(borrower_entity_id="ENT-B"),
        create_test_loan(loan_id="L-OFF", status="paid_off", borrower_entity_id="ENT-A"),
        create_test_loan(loan_id="L-EUR", currency="EUR"),
    ]


@pytest.fixture
def payments():
    return [
        create_test_payment("P-1", date(2024, 6, 20), 20_000),
        create_test_payment(
            "P-2",
            date(2024, 7, 15),  # last day of the 30-day window
            20_000,
            status=PaymentStatusEnum.PARTIAL,
            paid_amount=5_000,
        ),
        create_test_payment("P-3", date(2024, 7, 16), 20_000),
        create_test_payment("P-4", date(2024, 6, 1), 20_000),  # late, before as_of
        create_test_payment(
            "P-5", date(2024, 6, 25), 20_000, interest=3_750, status=PaymentStatusEnum.PAID
        ),
    ]


@pytest.fixture
def covenants():
    return [
        create_test_covenant(id="C-1", status="at_risk"),
        create_test_covenant(id="C-2", status="breach"),
        create_test_covenant(id="C-3", status="breach", waiver_status="granted"),
        create_test_covenant(id="C-4", status="ok"),
    ]


@pytest.fixture
def collaterals():
    return [
        create_test_collateral("COL-1", linked_id="L-1"),  # 900k / 800k
        create_test_collateral("COL-2", linked_id="L-FLT"),  # 500k / 800k
        create_test_collateral("COL-3", linked_id="L-404", current_ltv_pct=80.0),
        create_test_collateral("COL-4", linked_id="L-404"),
        create_test_collateral("COL-EUR", linked_id="L-EUR", currency="EUR"),
    ]


class TestCreditKpis:
    """Test the portfolio KPI strip."""

    def test_kpis(self, facilities, loans, payments, covenants, collaterals):
        """Test each KPI against a hand-built book."""
        kpis = calculate_credit_kpis(
            facilities, loans, payments, covenants, collaterals, "USD", AS_OF
        )

        assert kpis.total_debt_outstanding == 1_400_000.0
        assert kpis.payments_due_count == 2
        assert kpis.payments_due_amount == 35_000.0
        assert kpis.covenants_at_risk == 1
        assert kpis.ltv_above_target == 2
        assert kpis.breaches_open == 3  # one unwaived covenant + two LTV breaches
        assert kpis.facilities_maturing == 1

    def test_interest_cost_matches_ytd_summary(self, facilities, loans, payments, covenants, collaterals):
        """Test that the KPI reuses the YTD interest aggregation."""
        kpis = calculate_credit_kpis(
            facilities, loans, payments, covenants, collaterals, "USD", AS_OF
        )
        expected = calculate_interest_cost_ytd(loans, payments, "USD", AS_OF)
        assert kpis.interest_cost_ytd == expected.total_interest_ytd
        assert kpis.interest_cost_ytd > 3_750.0

    def test_empty_book(self):
        """Test that an empty book reports zeros."""
        kpis = calculate_credit_kpis([], [], [], [], [], "USD", AS_OF)
        assert kpis.total_debt_outstanding == 0.0
        assert kpis.payments_due_count == 0
        assert kpis.breaches_open == 0
        assert kpis.interest_cost_ytd == 0.0


class TestDistributions:
    """Test rate mix, maturity profile and borrower concentration."""

    def test_rate_type_distribution(self, loans):
        """Test outstanding by rate type for active loans in the currency."""
        assert get_rate_type_distribution(loans, "USD") == {
            "fixed": 900_000.0,
            "floating": 500_000.0,
        }

    def test_rate_type_distribution_empty(self):
        """Test that both rate types are always reported."""
        assert get_rate_type_distribution([], "USD") == {"fixed": 0.0, "floating": 0.0}

    def test_maturity_profile(self, loans):
        """Test bucketing by years to maturity."""
        extra = [
            create_test_loan(loan_id="L-SHORT", principal=100_000, maturity=date(2024, 12, 1)),
            create_test_loan(loan_id="L-PAST", principal=50_000, maturity=date(2024, 1, 1)),
            create_test_loan(loan_id="L-LONG", principal=200_000, maturity=date(2031, 1, 1)),
        ]
        profile = get_maturity_profile(loans + extra, "USD", AS_OF)
        assert profile == {
            "<1Y": 150_000.0,
            "1-2Y": 900_000.0,
            "2-5Y": 500_000.0,
            ">5Y": 200_000.0,
        }

    def test_maturity_bucket_lower_bound(self):
        """Test that exactly two years out falls into the 2-5Y bucket."""
        loan = create_test_loan(maturity=date(2026, 6, 15))  # 730 days
        profile = get_maturity_profile([loan], "USD", AS_OF)
        assert profile["2-5Y"] == 1_000_000.0
        assert profile["1-2Y"] == 0.0

    def test_maturity_profile_empty(self):
        """Test that an empty book reports every bucket."""
        assert get_maturity_profile([], "USD", AS_OF) == {
            "<1Y": 0.0,
            "1-2Y": 0.0,
            "2-5Y": 0.0,
            ">5Y": 0.0,
        }

    def test_debt_by_borrower(self, loans):
        """Test grouping by borrower, largest first."""
        anonymous = create_test_loan(loan_id="L-ANON", principal=950_000)
        by_borrower = get_debt_by_borrower(loans + [anonymous], "USD")
        assert list(by_borrower.items()) == [
            ("unknown", 950_000.0),
            ("ENT-A", 900_000.0),
            ("ENT-B", 500_000.0),
        ]

    def test_debt_by_borrower_empty(self):
        """Test an empty book."""
        assert get_debt_by_borrower([], "USD") == {}
