# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from creditdesk.core.primitives import round_money, sum_money


def test_round_money_half_up():
    """Test half-up rounding on values binary floats would round down."""
    assert round_money(2.675) == 2.68
    assert round_money(1.005) == 1.01
    assert round_money(0.125, places=2) == 0.13


def test_round_money_places():
    """Test rounding to other precisions."""
    assert round_money(1234.5678, places=0) == 1235.0
    assert round_money(1234.5678, places=3) == 1234.568


def test_sum_money_rounds_once():
    """Test that sum_money adds exactly before rounding."""
    assert sum_money([0.1, 0.2]) == 0.3
    assert sum_money([]) == 0.0
    assert sum_money([33.333, 33.333, 33.333]) == 100.0
