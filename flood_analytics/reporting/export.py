"""
Flat-file export helpers for the two reports.

``export_to_csv`` / ``export_to_json`` write one file and return its ``Path``.
They accept generic ``list[dict]`` data to stay decoupled from report shapes;
the ``*_for_export`` adapters turn report rows into those dicts with numbers
rendered as plain decimal text (no thousands separators).

``write_report_files`` writes both report CSVs (and optionally the JSON
summary) via temporary siblings: every file is written first and is
moved into place only after all writes succeeded. A failed move removes
the leftover temporaries.
"""

from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from flood_analytics.models.report import (
    ContractorRankingRow,
    RegionalSummaryRow,
    ReportBundle,
)

logger = logging.getLogger(__name__)

REGIONAL_FIELDNAMES = [
    "Region", "MainIsland", "TotalBudget", "MedianSavings",
    "AvgDelayDays", "DelayOver30Pct", "EfficiencyScore",
]
CONTRACTOR_FIELDNAMES = [
    "Rank", "Contractor", "TotalCost", "NumProjects",
    "AvgDelay", "TotalSavings", "ReliabilityIndex", "RiskFlag",
]


@dataclass(frozen=True)
class ReportPaths:
    """Files written by one ``write_report_files`` call."""

    regional:   Path
    contractor: Path
    summary:    Optional[Path] = None


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.  With no records and no fieldnames the file is
        empty; with fieldnames it holds just the header row.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def regional_rows_for_export(rows: list[RegionalSummaryRow]) -> list[dict]:
    """Report 1 rows as CSV dicts."""
    return [
        {
            "Region":          r.region,
            "MainIsland":      r.main_island,
            "TotalBudget":     f"{r.total_budget:.2f}",
            "MedianSavings":   f"{r.median_savings:.2f}",
            "AvgDelayDays":    f"{r.avg_delay_days:.2f}",
            "DelayOver30Pct":  f"{r.delay_over_30_pct:.1f}",
            "EfficiencyScore": f"{r.efficiency_score:.2f}",
        }
        for r in rows
    ]


def contractor_rows_for_export(rows: list[ContractorRankingRow]) -> list[dict]:
    """Report 2 rows as CSV dicts; ``Rank`` is the 1-based position."""
    return [
        {
            "Rank":             rank,
            "Contractor":       r.contractor,
            "TotalCost":        f"{r.total_cost:.2f}",
            "NumProjects":      r.num_projects,
            "AvgDelay":         f"{r.avg_delay_days:.2f}",
            "TotalSavings":     f"{r.total_savings:.2f}",
            "ReliabilityIndex": f"{r.reliability_index:.2f}",
            "RiskFlag":         r.risk_flag,
        }
        for rank, r in enumerate(rows, start=1)
    ]


def bundle_to_summary(bundle: ReportBundle) -> dict:
    """Both tables plus generation metadata, as a JSON-ready dict."""
    return {
        "generated_at": bundle.generated_at.isoformat(timespec="seconds"),
        "record_count": bundle.record_count,
        "top_n":        bundle.top_n,
        "regional_summary":   regional_rows_for_export(bundle.regional),
        "contractor_ranking": contractor_rows_for_export(bundle.contractors),
    }


def write_report_files(
    bundle: ReportBundle,
    output_dir: Path,
    regional_filename: str,
    contractor_filename: str,
    summary_filename: Optional[str] = None,
) -> ReportPaths:
    """Write both report CSVs (and the JSON summary when named).

    Every file is first written to a temporary sibling and only moved into
    place once all of them exist.  Targets that are existing directories are
    rejected before anything is moved.

    Raises:
        OSError: If any file cannot be written or moved.  A write failure
            leaves every target untouched; a failure while moving removes the
            remaining temporaries, but targets already moved stay replaced.
    """
    output_dir = Path(output_dir)
    targets: list[tuple[Path, Path]] = []

    def _tmp(target: Path) -> Path:
        tmp = target.with_name(f".{target.name}.tmp")
        targets.append((tmp, target))
        return tmp

    regional_path = output_dir / regional_filename
    contractor_path = output_dir / contractor_filename
    summary_path = output_dir / summary_filename if summary_filename else None

    try:
        export_to_csv(
            regional_rows_for_export(bundle.regional),
            _tmp(regional_path),
            fieldnames=REGIONAL_FIELDNAMES,
        )
        export_to_csv(
            contractor_rows_for_export(bundle.contractors),
            _tmp(contractor_path),
            fieldnames=CONTRACTOR_FIELDNAMES,
        )
        if summary_path is not None:
            export_to_json(bundle_to_summary(bundle), _tmp(summary_path))
        for _, target in targets:
            if target.is_dir():
                raise IsADirectoryError(f"Report target is a directory: {target}")
    except OSError:
        _discard(tmp for tmp, _ in targets)
        raise

    for i, (tmp, target) in enumerate(targets):
        try:
            os.replace(tmp, target)
        except OSError:
            _discard(tmp for tmp, _ in targets[i:])
            raise
        logger.info("Wrote %s", target)

    return ReportPaths(regional=regional_path, contractor=contractor_path, summary=summary_path)


def _discard(paths: Iterable[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)
