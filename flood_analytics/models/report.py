"""
Derived report rows.

Both row types are recreated on every report generation and carry no
identity beyond their key.  ``RegionalSummaryRow`` is the only one mutated
after creation: the global normalization pass overwrites ``efficiency_score``
once every group's raw score is known.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class RegionalSummaryRow:
    """One (region, main_island) group of Report 1.

    Attributes:
        region:            Group key, part 1.
        main_island:       Group key, part 2.
        total_budget:      Sum of approved budgets.
        median_savings:    Median per-project savings.
        avg_delay_days:    Mean clamped completion delay.
        delay_over_30_pct: Share (0–100) of projects delayed more than 30 days.
        efficiency_score:  Raw ``median_savings / avg_delay_days * 100`` until
                           normalization, then rescaled into [0, 100].
    """

    region:            str
    main_island:       str
    total_budget:      float
    median_savings:    float
    avg_delay_days:    float
    delay_over_30_pct: float
    efficiency_score:  float

    @property
    def key(self) -> tuple[str, str]:
        return (self.region, self.main_island)


@dataclass(frozen=True)
class ContractorRankingRow:
    """One contractor of Report 2.  Rank is the output position, not a field."""

    contractor:        str
    total_cost:        float
    num_projects:      int
    avg_delay_days:    float
    total_savings:     float
    reliability_index: float
    risk_flag:         str


@dataclass
class ReportBundle:
    """Both report tables from a single generation pass over one snapshot."""

    regional:     list[RegionalSummaryRow]
    contractors:  list[ContractorRankingRow]
    record_count: int
    top_n:        int
    generated_at: datetime = field(default_factory=datetime.now)
