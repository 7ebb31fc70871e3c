# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

import pytest

from creditdesk.core.primitives import (
    AmortizationTypeEnum,
    DayCountConvention,
    PaymentFrequencyEnum,
    RiskStatusEnum,
    ThresholdOperator,
    coerce_enum,
    enum_to_string,
)


def test_enum_member_values():
    """Test that enum values equal their wire keys."""
    assert AmortizationTypeEnum.INTEREST_ONLY == "interest_only"
    assert PaymentFrequencyEnum.SEMI_ANNUAL == "semi_annual"
    assert DayCountConvention.THIRTY_360 == "30_360"
    assert ThresholdOperator.GTE == ">="


@pytest.mark.parametrize(
    "frequency, months, periods",
    [
        (PaymentFrequencyEnum.MONTHLY, 1, 12),
        (PaymentFrequencyEnum.QUARTERLY, 3, 4),
        (PaymentFrequencyEnum.SEMI_ANNUAL, 6, 2),
        (PaymentFrequencyEnum.ANNUAL, 12, 1),
    ],
)
def test_payment_frequency_periods(frequency, months, periods):
    """Test months-per-period and periods-per-year for each frequency."""
    assert frequency.months_per_period == months
    assert frequency.periods_per_year == periods


def test_threshold_operator_direction():
    """Test minimum/maximum classification of threshold operators."""
    assert ThresholdOperator.GTE.is_minimum
    assert ThresholdOperator.GT.is_minimum
    assert ThresholdOperator.LTE.is_maximum
    assert ThresholdOperator.LT.is_maximum
    assert not ThresholdOperator.EQ.is_minimum
    assert not ThresholdOperator.EQ.is_maximum


def test_enum_to_string():
    """Test conversion of enums and plain values to strings."""
    assert enum_to_string(RiskStatusEnum.AT_RISK) == "at_risk"
    assert enum_to_string("already_string") == "already_string"


def test_coerce_enum_known_key():
    """Test that valid keys and members pass through unchanged."""
    assert (
        coerce_enum(AmortizationTypeEnum, "bullet", AmortizationTypeEnum.INTEREST_ONLY, "x")
        == AmortizationTypeEnum.BULLET
    )
    assert (
        coerce_enum(
            AmortizationTypeEnum,
            AmortizationTypeEnum.AMORTIZING,
            AmortizationTypeEnum.INTEREST_ONLY,
            "x",
        )
        == AmortizationTypeEnum.AMORTIZING
    )


def test_coerce_enum_unknown_key_falls_back_with_warning(caplog):
    """Test that an unknown key returns the fallback and logs a warning."""
    with caplog.at_level(logging.WARNING):
        result = coerce_enum(
            PaymentFrequencyEnum, "fortnightly", PaymentFrequencyEnum.MONTHLY, "payment_frequency"
        )
    assert result == PaymentFrequencyEnum.MONTHLY
    assert "fortnightly" in caplog.text
