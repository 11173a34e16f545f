"""
Report 1 — Regional Flood Mitigation Efficiency Summary.

Records are grouped by ``(region, main_island)`` and each group gets:

    total_budget       = Σ approved_budget
    median_savings     = median(approved_budget − contract_cost)
    avg_delay_days     = mean(max(0, completion − start))
    delay_over_30_pct  = 100 × count(delay > 30) / count
    efficiency (raw)   = median_savings / avg_delay_days × 100   (0 when no delay)

Global normalization
--------------------
Raw efficiency is not comparable on its own (it carries currency units), so
after every group is scored the whole row set is rescaled with min–max:

    score = (raw − min) / (max − min) × 100

When every group has the same raw value there is no spread to rescale and
every row scores 100.  Normalization must only run once all raw scores are
final, since each row's result depends on every other row.

Ordering: efficiency descending, ties by ``(region, main_island)`` ascending.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from flood_analytics.analytics.stats import mean, median, pct_over
from flood_analytics.models.project import ProjectRecord
from flood_analytics.models.report import RegionalSummaryRow

logger = logging.getLogger(__name__)

DELAY_THRESHOLD_DAYS = 30


def build_regional_summary(records: Iterable[ProjectRecord]) -> list[RegionalSummaryRow]:
    """Aggregate, score, normalize and sort regional rows.

    Args:
        records: Validated project records (a store snapshot).

    Returns:
        Rows ordered by normalized efficiency score, best first.
    """
    groups: dict[tuple[str, str], list[ProjectRecord]] = defaultdict(list)
    for rec in records:
        groups[(rec.region, rec.main_island)].append(rec)

    rows = [
        summarize_group(region, island, items)
        for (region, island), items in groups.items()
    ]
    normalize_efficiency_scores(rows)
    rows.sort(key=lambda r: (-r.efficiency_score, r.region, r.main_island))

    logger.debug("Regional summary: %d groups from %d records",
                 len(rows), sum(len(g) for g in groups.values()))
    return rows


def summarize_group(
    region: str,
    main_island: str,
    items: list[ProjectRecord],
) -> RegionalSummaryRow:
    """Compute the statistics and raw efficiency score for one group."""
    delays = [rec.delay_days for rec in items]
    median_savings = median(rec.savings for rec in items)
    avg_delay = mean(delays)

    return RegionalSummaryRow(
        region=region,
        main_island=main_island,
        total_budget=sum(rec.approved_budget for rec in items),
        median_savings=median_savings,
        avg_delay_days=avg_delay,
        delay_over_30_pct=pct_over(delays, DELAY_THRESHOLD_DAYS),
        efficiency_score=raw_efficiency(median_savings, avg_delay),
    )


def raw_efficiency(median_savings: float, avg_delay_days: float) -> float:
    """Unnormalized efficiency; 0 when the group has no average delay."""
    if avg_delay_days > 0:
        return median_savings / avg_delay_days * 100.0
    return 0.0


def normalize_efficiency_scores(rows: list[RegionalSummaryRow]) -> None:
    """Min–max rescale every row's ``efficiency_score`` into [0, 100] in place."""
    if not rows:
        return
    scores = [r.efficiency_score for r in rows]
    lo, hi = min(scores), max(scores)
    for r in rows:
        if hi > lo:
            r.efficiency_score = (r.efficiency_score - lo) / (hi - lo) * 100.0
        else:
            r.efficiency_score = 100.0
