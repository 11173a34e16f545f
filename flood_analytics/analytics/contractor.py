"""
Report 2 — Contractor Performance Ranking.

Only contractors with at least ``MIN_PROJECTS`` qualifying records are
ranked.  Records without a contractor (sources that lack the column) never
qualify.

Reliability index
-----------------
    reliability = (1 − avg_delay_days / 90) × (total_savings / total_cost) × 100

clamped into [0, 100].  The first factor rewards finishing well inside a
90-day horizon; the second is the savings ratio.  A contractor whose total
cost is zero has no meaningful ratio and scores 0.

Risk flag: ``"High Risk"`` below 50, ``"Low Risk"`` otherwise.

Ordering: total cost descending, ties by contractor name ascending, then the
first ``top_n`` rows are kept.  Rank is the 1-based position in that list.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from flood_analytics.analytics.stats import clamp, mean
from flood_analytics.models.project import ProjectRecord
from flood_analytics.models.report import ContractorRankingRow

logger = logging.getLogger(__name__)

MIN_PROJECTS = 5
RELIABILITY_HORIZON_DAYS = 90.0
HIGH_RISK_THRESHOLD = 50.0
DEFAULT_TOP_N = 15

HIGH_RISK = "High Risk"
LOW_RISK = "Low Risk"


def build_contractor_ranking(
    records: Iterable[ProjectRecord],
    top_n: int = DEFAULT_TOP_N,
) -> list[ContractorRankingRow]:
    """Group by contractor, score, sort by total cost and keep the top ``top_n``.

    Args:
        records: Validated project records (a store snapshot).
        top_n:   Maximum rows returned; must be >= 1.

    Returns:
        Ranked rows, largest total cost first.

    Raises:
        ValueError: If ``top_n`` < 1.
    """
    if top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}.")

    groups: dict[str, list[ProjectRecord]] = defaultdict(list)
    for rec in records:
        if rec.contractor is not None:
            groups[rec.contractor].append(rec)

    rows = [
        summarize_contractor(name, items)
        for name, items in groups.items()
        if len(items) >= MIN_PROJECTS
    ]
    rows.sort(key=lambda r: (-r.total_cost, r.contractor))

    logger.debug(
        "Contractor ranking: %d of %d contractors qualify (>= %d projects), keeping %d",
        len(rows), len(groups), MIN_PROJECTS, min(len(rows), top_n),
    )
    return rows[:top_n]


def summarize_contractor(name: str, items: list[ProjectRecord]) -> ContractorRankingRow:
    """Compute totals, reliability and risk flag for one contractor."""
    total_cost = sum(rec.contract_cost for rec in items)
    total_savings = sum(rec.savings for rec in items)
    avg_delay = mean([rec.delay_days for rec in items])
    reliability = reliability_index(avg_delay, total_savings, total_cost)

    return ContractorRankingRow(
        contractor=name,
        total_cost=total_cost,
        num_projects=len(items),
        avg_delay_days=avg_delay,
        total_savings=total_savings,
        reliability_index=reliability,
        risk_flag=risk_flag(reliability),
    )


def reliability_index(avg_delay_days: float, total_savings: float, total_cost: float) -> float:
    """Delay-weighted savings ratio, clamped to [0, 100]; 0 when cost is 0."""
    if total_cost == 0:
        return 0.0
    raw = (1.0 - avg_delay_days / RELIABILITY_HORIZON_DAYS) * (total_savings / total_cost) * 100.0
    return clamp(raw, 0.0, 100.0)


def risk_flag(reliability: float) -> str:
    return HIGH_RISK if reliability < HIGH_RISK_THRESHOLD else LOW_RISK
