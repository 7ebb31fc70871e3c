# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reusable Pydantic validation utilities for entity models.

Validation here is limited to shape invariants the host must guarantee at
ingestion. Financially degenerate but well-typed input (maturity before
start, zero collateral value) is deliberately accepted and handled by the
calculators.
"""

from __future__ import annotations

from typing import Any, Optional


class ValidationMixin:
    """
    Mixin class providing reusable validation methods for Pydantic models.

    Inherit alongside ``Model`` and call from a ``model_validator``.
    """

    @classmethod
    def validate_not_exceeding(
        cls,
        data: Any,
        field: str,
        ceiling_field: str,
        error_message: Optional[str] = None,
    ) -> Any:
        """
        Validate that ``field`` does not exceed ``ceiling_field``.

        Works on both raw dictionaries (mode="before") and model instances
        (mode="after"). Missing values are not checked.

        Raises:
            ValueError: If the value exceeds its ceiling
        """
        if isinstance(data, dict):
            value = data.get(field)
            ceiling = data.get(ceiling_field)
        else:
            value = getattr(data, field, None)
            ceiling = getattr(data, ceiling_field, None)

        if value is not None and ceiling is not None and value > ceiling:
            msg = error_message or f"{field} ({value}) cannot exceed {ceiling_field} ({ceiling})"
            raise ValueError(msg)

        return data
