"""
Flood-mitigation project record — one validated row of the source CSV.

``ProjectRecord`` is frozen: records are never edited after loading, and the
record store has no update or delete operation.  Every instance that exists
has passed validation, so the aggregation engine never re-checks fields.

Derived quantities used by both reports:
  - ``savings``    → approved budget minus actual contract cost (may be negative).
  - ``delay_days`` → calendar days from start to actual completion, clamped at 0.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

MIN_FUNDING_YEAR = 2021
MAX_FUNDING_YEAR = 2023


class ProjectRecord(BaseModel):
    """A single flood-mitigation project within the 2021–2023 funding window.

    Attributes:
        region: Administrative region, e.g. ``"Region IV-A"``.
        main_island: Island group, e.g. ``"Luzon"``.
        contractor: Awarded contractor, or ``None`` when the source file
            carries no ``Contractor`` column.
        approved_budget: Approved budget for the contract (currency units).
        contract_cost: Actual contract cost (currency units).
        start_date: Project start date.
        actual_completion_date: Date the project was actually completed.
        funding_year: Fiscal year the funding was approved (2021–2023).
    """

    model_config = ConfigDict(frozen=True)

    region: str
    main_island: str
    contractor: Optional[str] = None
    approved_budget: float
    contract_cost: float
    start_date: date
    actual_completion_date: date
    funding_year: int

    @field_validator("region", "main_island")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string.")
        return v

    @field_validator("contractor")
    @classmethod
    def validate_contractor(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("contractor must be non-empty when provided.")
        return v

    @field_validator("approved_budget", "contract_cost")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError(f"amount must be a finite non-negative number, got {v}.")
        return v

    @field_validator("funding_year")
    @classmethod
    def validate_funding_year(cls, v: int) -> int:
        if not MIN_FUNDING_YEAR <= v <= MAX_FUNDING_YEAR:
            raise ValueError(
                f"funding_year must be in [{MIN_FUNDING_YEAR}, {MAX_FUNDING_YEAR}], got {v}."
            )
        return v

    @property
    def savings(self) -> float:
        """Approved budget minus contract cost."""
        return self.approved_budget - self.contract_cost

    @property
    def delay_days(self) -> int:
        """Days from start to actual completion; never negative."""
        return max(0, (self.actual_completion_date - self.start_date).days)
