# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Outcome of one mark-and-sweep pass."""

from pydantic import BaseModel, Field


class SweepReport(BaseModel):
    """Keys flagged for deletion and keys dropped from tracking in one run."""

    swept: list[str] = Field(
        default_factory=list, description="Keys flagged for deletion, in mark order"
    )
    forgotten: list[str] = Field(
        default_factory=list, description="Previously tracked keys not seen this run"
    )
    tracked: int = Field(0, ge=0, description="Keys still tracked after the pass")

    @property
    def swept_count(self) -> int:
        return len(self.swept)
