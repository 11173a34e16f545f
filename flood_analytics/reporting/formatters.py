"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept report rows / load results and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``tabulate``).

Number formats
--------------
  currency    → thousands separators, two decimals   (``1,234,567.89``)
  percentages → one decimal                          (``33.3``)
  days/scores → two decimals                         (``18.33``)
"""

from __future__ import annotations

from flood_analytics.ingestion.project_csv import LoadResult
from flood_analytics.models.project import MAX_FUNDING_YEAR, MIN_FUNDING_YEAR
from flood_analytics.models.report import ContractorRankingRow, RegionalSummaryRow


def format_currency(value: float) -> str:
    """``1234567.891`` → ``"1,234,567.89"``."""
    return f"{value:,.2f}"


# ── Load summary ──────────────────────────────────────────────────────────────


def format_load_summary(result: LoadResult, show_errors: int = 0) -> str:
    """One-line load outcome, plus an error count and optional error detail.

    Args:
        result:      Outcome of ``parse_project_csv``.
        show_errors: How many rejected rows to list (0 = none).
    """
    lines = [
        f"Processing dataset... ({result.total_rows} rows loaded, "
        f"{result.filtered_rows} filtered for {MIN_FUNDING_YEAR}-{MAX_FUNDING_YEAR})"
    ]
    if result.error_count > 0:
        lines.append(f"{result.error_count} parse/validation errors encountered.")
        for line_no, msg in result.errors[:show_errors]:
            lines.append(f"  Row {line_no}: {msg}")
        if 0 < show_errors < len(result.errors):
            lines.append(f"  ... and {len(result.errors) - show_errors} more.")
    return "\n".join(lines)


# ── Report 1 ──────────────────────────────────────────────────────────────────


def format_regional_summary_table(rows: list[RegionalSummaryRow]) -> str:
    """Report 1 as a fixed-width table, in the order given."""
    lines: list[str] = []
    lines.append("")
    lines.append("Report 1: Regional Flood Mitigation Efficiency Summary")
    lines.append(
        f"(Aggregated by Region & MainIsland; {MIN_FUNDING_YEAR}-{MAX_FUNDING_YEAR} Projects)"
    )
    lines.append("")

    header = (
        f"| {'Region':<38} | {'MainIsland':<13} | {'TotalBudget':>18} | "
        f"{'MedianSavings':>16} | {'AvgDelayDays':>12} | {'Delay>30Pct':>11} | "
        f"{'EfficiencyScore':>15} |"
    )
    lines.append(header)
    lines.append("-" * len(header))

    if not rows:
        lines.append("  (no regional groups)")
        return "\n".join(lines)

    for r in rows:
        lines.append(
            f"| {r.region[:38]:<38} | {r.main_island[:13]:<13} | "
            f"{format_currency(r.total_budget):>18} | "
            f"{format_currency(r.median_savings):>16} | "
            f"{r.avg_delay_days:>12.2f} | {r.delay_over_30_pct:>11.1f} | "
            f"{r.efficiency_score:>15.2f} |"
        )
    return "\n".join(lines)


# ── Report 2 ──────────────────────────────────────────────────────────────────


def format_contractor_ranking_table(
    rows: list[ContractorRankingRow],
    top_n: int,
    min_projects: int,
) -> str:
    """Report 2 as a fixed-width table with 1-based rank positions."""
    lines: list[str] = []
    lines.append("")
    lines.append("Report 2: Top Contractors Performance Ranking")
    lines.append(f"(Top {top_n} by TotalCost, >= {min_projects} Projects)")
    lines.append("")

    header = (
        f"| {'Rank':>4} | {'Contractor':<40} | {'TotalCost':>18} | {'NumProjects':>11} | "
        f"{'AvgDelay':>8} | {'TotalSavings':>16} | {'ReliabilityIndex':>16} | "
        f"{'RiskFlag':<9} |"
    )
    lines.append(header)
    lines.append("-" * len(header))

    if not rows:
        lines.append(
            f"  (no contractors with >= {min_projects} projects"
            "; does the source include a Contractor column?)"
        )
        return "\n".join(lines)

    for rank, r in enumerate(rows, start=1):
        lines.append(
            f"| {rank:>4} | {r.contractor[:40]:<40} | {format_currency(r.total_cost):>18} | "
            f"{r.num_projects:>11} | {r.avg_delay_days:>8.2f} | "
            f"{format_currency(r.total_savings):>16} | {r.reliability_index:>16.2f} | "
            f"{r.risk_flag:<9} |"
        )
    return "\n".join(lines)
