"""
Analytics session — one record store plus the config it runs under.

The session is the single owner of mutable state.  The CLI creates one per
process (or per interactive shell) and routes every command through it:

  1. ``load(path)``           — parse a CSV and replace (or append to) the store.
  2. ``build_reports()``      — snapshot the store and compute both tables.
  3. ``write_reports(bundle)``— write both CSVs (all-or-nothing).

Errors are never swallowed here: file-level problems propagate as
``FileNotFoundError`` / ``ValueError`` / ``OSError`` so the caller decides
whether to exit or return to the prompt.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from flood_analytics.analytics.contractor import build_contractor_ranking
from flood_analytics.analytics.regional import build_regional_summary
from flood_analytics.config import AppConfig
from flood_analytics.ingestion.project_csv import LoadResult, parse_project_csv
from flood_analytics.models.report import ReportBundle
from flood_analytics.reporting.export import ReportPaths, write_report_files
from flood_analytics.store import RecordStore

logger = logging.getLogger(__name__)


class AnalyticsSession:
    """Owns the record store for one CLI session.

    Attributes:
        config: Application configuration.
        store:  Validated records loaded so far.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()
        self.store = RecordStore()

    def load(self, path: Path, append: Optional[bool] = None) -> LoadResult:
        """Parse ``path`` and put its accepted records into the store.

        Args:
            path:   CSV file to load.
            append: Accumulate onto existing records instead of replacing them.
                    ``None`` falls back to ``config.data.accumulate_loads``.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            ValueError: If the header lacks required columns.
            OSError: If ``path`` exists but cannot be read (e.g. a directory).
        """
        if append is None:
            append = self.config.data.accumulate_loads

        result = parse_project_csv(Path(path))
        size = self.store.load(result.records, append=append)
        logger.info(
            "Loaded %d records from %s (%s); store holds %d",
            result.filtered_rows, result.source,
            "appended" if append else "replaced", size,
        )
        return result

    def build_reports(self, top_n: Optional[int] = None) -> Optional[ReportBundle]:
        """Compute both report tables from a fresh snapshot of the store.

        Returns:
            ``None`` when the store is empty, else a :class:`ReportBundle`.
        """
        records = self.store.snapshot()
        if not records:
            logger.info("Report requested with an empty record store")
            return None

        cap = top_n if top_n is not None else self.config.reports.top_n
        bundle = ReportBundle(
            regional=build_regional_summary(records),
            contractors=build_contractor_ranking(records, top_n=cap),
            record_count=len(records),
            top_n=cap,
        )
        logger.info(
            "Built reports from %d records: %d regional groups, %d ranked contractors",
            bundle.record_count, len(bundle.regional), len(bundle.contractors),
        )
        return bundle

    def write_reports(
        self,
        bundle: ReportBundle,
        output_dir: Optional[Path] = None,
    ) -> ReportPaths:
        """Write the bundle's CSV files (and JSON summary when enabled)."""
        cfg = self.config.reports
        return write_report_files(
            bundle,
            output_dir=Path(output_dir) if output_dir is not None else Path(cfg.output_dir),
            regional_filename=cfg.regional_filename,
            contractor_filename=cfg.contractor_filename,
            summary_filename=cfg.summary_filename if cfg.write_json_summary else None,
        )
