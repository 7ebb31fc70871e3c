# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Integration Tests for a Credit Portfolio Lifecycle

This test suite runs one term loan through the whole engine:
- Schedule generation and materialization into ledger payments
- Settlement of the first installments
- Liquidity export of the remaining obligations
- Covenant testing and collateral LTV monitoring
- Portfolio KPIs and the credit calendar
"""

from datetime import date, datetime

import pytest

from creditdesk.core.primitives import (
    CalendarEventTypeEnum,
    FinancingSubcategoryEnum,
    PaymentStatusEnum,
    RiskStatusEnum,
    round_money,
)
from creditdesk.debt import (
    CovenantDataSources,
    Facility,
    apply_covenant_test_result,
    calculate_interest_cost_ytd,
    check_all_ltv_breaches,
    generate_schedule,
    revalue_collateral,
    schedule_to_payments,
)
from creditdesk.debt import covenants as covenant_engine
from creditdesk.liquidity import (
    cash_flows_to_dataframe,
    payments_to_liquidity_flows,
    schedule_to_liquidity_flows,
)
from creditdesk.reporting import build_credit_calendar, calculate_credit_kpis

from tests.factories import create_test_collateral, create_test_covenant, create_test_loan

AS_OF = date(2024, 3, 15)
TESTED_AT = datetime(2024, 3, 15, 9, 30)


@pytest.fixture
def origination():
    """$1M, 5%, monthly amortizing loan on a $2M facility and its 12-row schedule."""
    facility = Facility(
        id="F-1",
        name="Term facility",
        limit_amount=2_000_000,
        drawn_amount=1_000_000,
        available_amount=1_000_000,
        maturity_date=date(2025, 1, 1),
    )
    loan = create_test_loan(name="Term loan A")
    schedule = generate_schedule(loan)
    return facility, loan, schedule


@pytest.fixture
def seasoned_book(origination):
    """The book on 2024-03-15 with the February and March installments settled."""
    facility, loan, schedule = origination
    payments = schedule_to_payments(schedule, loan)
    for i in (0, 1):
        payments[i] = payments[i].model_copy(
            update={
                "status": PaymentStatusEnum.PAID,
                "paid_at": payments[i].due_date,
                "paid_amount": payments[i].amount,
            }
        )
    loan = loan.model_copy(update={"outstanding_amount": schedule.rows[1].closing_balance})
    return facility, loan, schedule, payments


class TestScheduleToLedger:
    """Test schedule generation feeding the payment ledger."""

    def test_schedule_and_payments(self, origination):
        """Test the 12-row schedule and its materialized payments."""
        _, loan, schedule = origination
        payments = schedule_to_payments(schedule, loan)

        assert schedule.periods == 12
        assert schedule.payment_amount == pytest.approx(85_607.44, abs=0.5)
        assert schedule.final_balance == 0.0
        assert len(payments) == 12
        assert sum(p.principal_part for p in payments) == pytest.approx(1_000_000, abs=0.01)
        assert all(p.status == PaymentStatusEnum.SCHEDULED for p in payments)

    def test_settled_installments_become_history(self, seasoned_book):
        """Test that settled and past installments drop out of the export."""
        _, loan, _, payments = seasoned_book
        flows = payments_to_liquidity_flows(payments, [loan], AS_OF)

        assert len(flows) == 20
        assert flows[0].flow_date == date(2024, 4, 1)
        assert {f.source_ref for f in flows} == {p.id for p in payments[2:]}


class TestLiquidityExport:
    """Test that ledger and schedule exports agree on the remaining obligations."""

    def test_remaining_principal_equals_outstanding(self, seasoned_book):
        """Test principal flows sum to the outstanding balance."""
        _, loan, _, payments = seasoned_book
        flows = payments_to_liquidity_flows(payments, [loan], AS_OF)
        principal = sum(
            f.amount for f in flows if f.subcategory == FinancingSubcategoryEnum.PRINCIPAL_PAYMENT
        )
        assert principal == pytest.approx(loan.outstanding_amount, abs=0.01)

    def test_ledger_and_projection_agree(self, seasoned_book):
        """Test confirmed and projected exports carry the same amounts."""
        _, loan, schedule, payments = seasoned_book
        ledger_df = cash_flows_to_dataframe(payments_to_liquidity_flows(payments, [loan], AS_OF))
        projected_df = cash_flows_to_dataframe(
            schedule_to_liquidity_flows(schedule, loan, AS_OF)
        )

        assert len(ledger_df) == len(projected_df)
        assert ledger_df["is_confirmed"].all()
        assert not projected_df["is_confirmed"].any()
        ledger_totals = ledger_df.groupby("subcategory")["amount"].sum()
        projected_totals = projected_df.groupby("subcategory")["amount"].sum()
        for subcategory in ("principal", "interest"):
            assert ledger_totals[subcategory] == pytest.approx(projected_totals[subcategory], abs=0.01)


class TestMonitoring:
    """Test covenants, collateral and the portfolio views together."""

    @pytest.fixture
    def monitored(self, seasoned_book):
        facility, loan, schedule, payments = seasoned_book
        covenants = [
            create_test_covenant(
                id="C-LIQ", name="Minimum liquidity", threshold=100_000, next_test_at=AS_OF
            ),
            create_test_covenant(
                "max_ltv", "<=", 100.0, id="C-LTV", name="Maximum LTV", next_test_at=AS_OF
            ),
        ]
        collateral = create_test_collateral(
            "COL-1", current_value=1_200_000, linked_id=loan.id, last_valued_at=date(2023, 12, 1)
        )
        return facility, loan, payments, covenants, [collateral]

    def test_covenant_cycle(self, monitored):
        """Test a covenant test round and its application."""
        _, loan, _, covenants, _ = monitored
        data = CovenantDataSources(
            cash_balance=105_000,
            loan_outstanding=loan.outstanding_amount,
            collateral_value=960_000,
        )
        due = covenant_engine.get_covenants_due_for_testing(covenants, AS_OF)
        results = covenant_engine.test_all_covenants(due, data, TESTED_AT)

        liquidity, ltv = results
        assert liquidity.new_status == RiskStatusEnum.AT_RISK
        assert liquidity.requires_action
        assert ltv.new_status == RiskStatusEnum.OK
        assert ltv.current_value == pytest.approx(loan.outstanding_amount / 960_000 * 100)

        updated = [apply_covenant_test_result(c, r) for c, r in zip(covenants, results)]
        assert all(c.next_test_at == date(2024, 6, 15) for c in updated)
        assert covenant_engine.get_covenants_due_for_testing(updated, AS_OF) == []

    def test_collateral_breach_and_cure(self, monitored):
        """Test LTV breach detection, margin call and revaluation."""
        facility, loan, _, _, collaterals = monitored
        events = check_all_ltv_breaches(collaterals, [loan], AS_OF, [facility])

        assert len(events) == 1
        event = events[0]
        assert event.pledged_value == 960_000.0
        assert event.ltv_pct == pytest.approx(loan.outstanding_amount / 960_000 * 100)
        restored = loan.outstanding_amount / (event.pledged_value + event.margin_call_amount)
        assert restored == pytest.approx(0.75, abs=1e-4)

        # Top up the market value by the margin call grossed up for the haircut
        top_up = event.margin_call_amount / 0.8
        cured = revalue_collateral(
            collaterals[0],
            1_200_000 + top_up + 1,
            AS_OF,
            source="custodian",
            loan_outstanding=loan.outstanding_amount,
        )
        assert cured.status == RiskStatusEnum.AT_RISK
        assert check_all_ltv_breaches([cured], [loan], AS_OF) == []

    def test_kpis(self, monitored):
        """Test the KPI strip after a covenant round."""
        facility, loan, payments, covenants, collaterals = monitored
        data = CovenantDataSources(cash_balance=105_000)
        results = covenant_engine.test_all_covenants(covenants, data, TESTED_AT)
        covenants = [apply_covenant_test_result(c, r) for c, r in zip(covenants, results)]

        kpis = calculate_credit_kpis(
            [facility], [loan], payments, covenants, collaterals, "USD", AS_OF
        )

        assert kpis.total_debt_outstanding == loan.outstanding_amount
        assert kpis.payments_due_count == 1
        assert kpis.payments_due_amount == payments[2].amount
        assert kpis.covenants_at_risk == 1
        assert kpis.ltv_above_target == 1
        assert kpis.breaches_open == 1
        assert kpis.facilities_maturing == 0

        interest = calculate_interest_cost_ytd([loan], payments, "USD", AS_OF)
        accrued = round_money(loan.outstanding_amount * 0.05 * 14 / 360)
        assert interest.interest_paid == round_money(
            payments[0].interest_part + payments[1].interest_part
        )
        assert interest.interest_accrued == pytest.approx(accrued, abs=0.01)
        assert kpis.interest_cost_ytd == interest.total_interest_ytd

    def test_calendar(self, monitored):
        """Test upcoming events over the default and an extended horizon."""
        facility, loan, payments, covenants, _ = monitored
        scheduled = [c.model_copy(update={"next_test_at": date(2024, 6, 15)}) for c in covenants]

        events = build_credit_calendar([facility], [loan], payments, scheduled, AS_OF)
        assert [e.event_date for e in events] == [
            date(2024, 4, 1),
            date(2024, 5, 1),
            date(2024, 6, 1),
        ]

        extended = build_credit_calendar(
            [facility], [loan], payments, scheduled, AS_OF, horizon_days=92
        )
        assert [e.event_type for e in extended[3:]] == [
            CalendarEventTypeEnum.COVENANT_TEST,
            CalendarEventTypeEnum.COVENANT_TEST,
        ]
