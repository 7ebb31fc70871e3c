# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the debt module.

Covers facility, loan and payment models, rate resolution, amortization,
interest aggregation, covenant testing and collateral monitoring.
"""
