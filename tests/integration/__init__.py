# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Integration tests for Creditdesk.

Scenarios run a small credit book through schedule generation, ledger
export, covenant and collateral monitoring and portfolio reporting.
"""
