# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable models: engine operations return new instances (via
    ``model_copy(update=...)``) instead of mutating the caller's entities.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Immutable snapshots; callers decide what to persist
        extra="forbid",  # Catches typos and missing field definitions immediately
        use_enum_values=False,
    )
