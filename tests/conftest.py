# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Shared pytest fixtures for Creditdesk tests."""

from __future__ import annotations

from datetime import date

import pytest

from creditdesk.core.primitives import CreditEngineSettings
from creditdesk.debt import Facility, Loan

from tests.factories import create_floating_loan, create_test_loan


# Fixtures
@pytest.fixture
def settings() -> CreditEngineSettings:
    """Default engine settings."""
    return CreditEngineSettings()


@pytest.fixture
def amortizing_loan() -> Loan:
    """$1M, 5% fixed, monthly, 12-month amortizing loan starting 2024-01-01."""
    return create_test_loan()


@pytest.fixture
def floating_loan() -> Loan:
    """$500k SOFR + 2.5% quarterly interest-only loan."""
    return create_floating_loan()


@pytest.fixture
def facility() -> Facility:
    """$2M term facility with $1.5M drawn."""
    return Facility(
        id="F-1",
        name="Term facility",
        bank_id="B-1",
        facility_type="term",
        limit_amount=2_000_000,
        drawn_amount=1_500_000,
        available_amount=500_000,
        maturity_date=date(2024, 10, 1),
    )
