# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for rate resolution and day-count interest.

Tests fixed and floating rate resolution (live fixings, configured defaults,
floor and cap) and simple interest under each day-count method.
"""

import logging
from datetime import date

import pytest

from creditdesk.core.primitives import BaseRateKey, CreditEngineSettings, DayCountConvention
from creditdesk.debt import calculate_period_interest, get_current_rate

from tests.factories import create_floating_loan, create_test_loan


class TestGetCurrentRate:
    """Test effective rate resolution."""

    def test_fixed_rate(self):
        """Test that a fixed loan returns its fixed rate regardless of base rates."""
        loan = create_test_loan(rate_pct=5.0)
        assert get_current_rate(loan, {BaseRateKey.SOFR: 9.0}) == 5.0

    def test_fixed_without_fixed_rate_uses_recorded_rate(self):
        """Test fallback to the recorded current rate."""
        loan = create_test_loan(rate_pct=None, current_rate_pct=6.25)
        assert get_current_rate(loan) == 6.25

    def test_floating_uses_default_base_rate(self, floating_loan):
        """Test base + spread with the configured default SOFR (5.30)."""
        assert get_current_rate(floating_loan) == pytest.approx(7.80)

    def test_floating_prefers_live_rate(self, floating_loan):
        """Test that a caller-supplied fixing overrides the default."""
        assert get_current_rate(floating_loan, {BaseRateKey.SOFR: 4.0}) == pytest.approx(6.5)

    def test_floating_uses_injected_defaults(self, floating_loan):
        """Test that default base rates come from settings."""
        settings = CreditEngineSettings(default_base_rates={BaseRateKey.SOFR: 3.0})
        assert get_current_rate(floating_loan, settings=settings) == pytest.approx(5.5)

    def test_floor_applied(self):
        """Test that the floor lifts a low all-in rate."""
        loan = create_floating_loan(spread_pct=1.0, rate_floor_pct=3.0)
        assert get_current_rate(loan, {BaseRateKey.SOFR: 0.5}) == 3.0

    def test_cap_applied(self):
        """Test that the cap limits a high all-in rate."""
        loan = create_floating_loan(spread_pct=2.5, rate_cap_pct=7.0)
        assert get_current_rate(loan, {BaseRateKey.SOFR: 6.0}) == 7.0

    def test_cap_wins_over_floor(self):
        """Test floor-then-cap ordering when the bounds cross."""
        loan = create_floating_loan(spread_pct=1.0, rate_floor_pct=9.0, rate_cap_pct=8.0)
        assert get_current_rate(loan, {BaseRateKey.SOFR: 2.0}) == 8.0

    def test_missing_base_key_prices_at_spread(self, caplog):
        """Test a floating loan without an index key."""
        loan = create_floating_loan(base_rate_key=None, spread_pct=2.0)
        with caplog.at_level(logging.WARNING):
            assert get_current_rate(loan) == 2.0
        assert "no base_rate_key" in caplog.text


class TestCalculatePeriodInterest:
    """Test simple interest by day-count method."""

    PRINCIPAL = 1_000_000
    RATE = 5.0
    START = date(2024, 1, 1)
    END = date(2024, 1, 31)  # 30 days

    def test_actual_360(self):
        """Test actual/360: 1M * 5% * 30/360."""
        calc = calculate_period_interest(
            self.PRINCIPAL, self.RATE, self.START, self.END, DayCountConvention.ACTUAL_360
        )
        assert calc.days == 30
        assert calc.year_basis == 360
        assert calc.interest == 4166.67

    def test_actual_365(self):
        """Test actual/365: 1M * 5% * 30/365."""
        calc = calculate_period_interest(
            self.PRINCIPAL, self.RATE, self.START, self.END, DayCountConvention.ACTUAL_365
        )
        assert calc.year_basis == 365
        assert calc.interest == 4109.59

    def test_thirty_360_approximation(self):
        """Test 30/360 with days scaled by 30/30.44."""
        calc = calculate_period_interest(
            self.PRINCIPAL, self.RATE, self.START, self.END, DayCountConvention.THIRTY_360
        )
        expected_days = 30 * 30 / 30.44
        expected = self.PRINCIPAL * 0.05 * expected_days / 360
        assert calc.accrual_days == pytest.approx(expected_days)
        assert calc.interest == pytest.approx(expected, abs=0.01)

    def test_method_accepts_string_key(self):
        """Test that the method may be passed as its key."""
        calc = calculate_period_interest(self.PRINCIPAL, self.RATE, self.START, self.END, "actual_365")
        assert calc.day_count == DayCountConvention.ACTUAL_365

    def test_reversed_window_accrues_nothing(self):
        """Test that an end before start yields zero interest, not negative."""
        calc = calculate_period_interest(self.PRINCIPAL, self.RATE, self.END, self.START)
        assert calc.days == 0
        assert calc.interest == 0.0
