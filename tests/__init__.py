# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creditdesk test suite.

Unit tests live under unit/ (one package per source package) and
end-to-end portfolio scenarios under integration/.
"""
