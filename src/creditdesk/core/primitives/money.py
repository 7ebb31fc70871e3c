# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Monetary rounding.

Schedules, ledger payments and LTV figures are all rounded to the currency
minor unit at every step so that projected rows reconcile one-for-one with
ledgered payments. Rounding goes through ``Decimal`` with ROUND_HALF_UP so
that values such as 2.675 round the way a payment ledger would, not the way
binary floats happen to.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

Number = Union[int, float, Decimal]

# Two amounts closer than half a minor unit are the same ledger amount
MONEY_TOLERANCE = 0.005


def round_money(value: Number, places: int = 2) -> float:
    """
    Round a monetary value half-up to ``places`` decimals.

    Args:
        value: Amount to round
        places: Decimal places (2 for cents)

    Returns:
        The rounded amount as a float

    Example:
        >>> round_money(2.675)
        2.68
        >>> round_money(-0.004)
        -0.0
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def sum_money(values: Iterable[Number], places: int = 2) -> float:
    """Sum amounts exactly and round the total once."""
    total = sum((Decimal(str(v)) for v in values), Decimal(0))
    return round_money(total, places)
