"""
CSV parser for flood-mitigation project exports.

Format — comma delimited, UTF-8 (a leading BOM is tolerated), header row required.
Required columns:
  FundingYear, Region, MainIsland, ApprovedBudgetForContract, ContractCost,
  StartDate, ActualCompletionDate

Optional column:
  Contractor — when declared, every row must carry a non-empty value.

Row handling (first failing check wins):
  1. FundingYear not an integer        → rejected, counted as an error.
     FundingYear outside 2021–2023     → skipped silently (not an error).
  2. Region / MainIsland / Contractor empty → rejected.
  3. Budget / cost not a finite, non-negative decimal → rejected.
     Digit-group underscores ("1_000") are not numbers here.
  4. StartDate / ActualCompletionDate not YYYY-MM-DD  → rejected.
  A line the csv module cannot read (e.g. an oversized field) → rejected.

Unlike a strict all-or-nothing import, bad rows never abort a load: they are
counted, logged with their file line number, and the remaining rows are kept.
A header missing any required column is a file-level error.
"""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError

from flood_analytics.models.project import (
    MAX_FUNDING_YEAR,
    MIN_FUNDING_YEAR,
    ProjectRecord,
)

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({
    "FundingYear", "Region", "MainIsland", "ApprovedBudgetForContract",
    "ContractCost", "StartDate", "ActualCompletionDate",
})
CONTRACTOR_COLUMN = "Contractor"

DATE_FORMAT = "%Y-%m-%d"


class RowSkipped(Exception):
    """Row is well-formed but outside the funding-year window."""


@dataclass
class LoadResult:
    """Outcome of validating one CSV source.

    Attributes:
        source:               File name (or label) the rows came from.
        total_rows:           Data rows seen (header excluded).
        filtered_rows:        Rows accepted into ``records``.
        error_count:          Rows rejected by validation.
        skipped_out_of_range: Rows with a valid FundingYear outside 2021–2023.
        errors:               ``(line_no, message)`` per rejected row.
        records:              Validated records, in file order.
    """

    source:               str
    total_rows:           int = 0
    filtered_rows:        int = 0
    error_count:          int = 0
    skipped_out_of_range: int = 0
    errors:               list[tuple[int, str]] = field(default_factory=list)
    records:              list[ProjectRecord] = field(default_factory=list)


def parse_project_csv(path: Path) -> LoadResult:
    """Parse a project CSV file into validated :class:`ProjectRecord` objects.

    Args:
        path: Path to the CSV file.

    Returns:
        :class:`LoadResult` with accepted records and row counts.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file has no header or lacks required columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project CSV file not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")
        result = parse_project_rows(reader, reader.fieldnames, source=path.name)

    logger.info(
        "Parsed %s: %d rows, %d accepted, %d errors, %d outside %d-%d",
        path.name, result.total_rows, result.filtered_rows, result.error_count,
        result.skipped_out_of_range, MIN_FUNDING_YEAR, MAX_FUNDING_YEAR,
    )
    return result


def parse_project_rows(
    rows: Iterable[Mapping[str, Optional[str]]],
    fieldnames: Iterable[str],
    source: str = "<rows>",
) -> LoadResult:
    """Validate already-split rows against the declared header.

    Args:
        rows:       Row mappings (column name → raw text).
        fieldnames: Declared header columns.
        source:     Label used in log messages and the result.

    Returns:
        :class:`LoadResult`.

    Raises:
        ValueError: If required columns are missing from ``fieldnames``.
    """
    actual_cols = {c.strip() for c in fieldnames if c is not None}
    missing = REQUIRED_CSV_COLUMNS - actual_cols
    if missing:
        raise ValueError(
            f"CSV missing required columns: {sorted(missing)}\n"
            f"Found columns: {sorted(actual_cols)}"
        )
    has_contractor = CONTRACTOR_COLUMN in actual_cols

    result = LoadResult(source=source)
    row_iter = iter(rows)
    line_no = 1  # header
    while True:
        line_no += 1
        try:
            raw = next(row_iter)
        except StopIteration:
            break
        except csv.Error as exc:
            # The reader drops the rest of the malformed line and resumes.
            result.total_rows += 1
            result.error_count += 1
            result.errors.append((line_no, f"CSV parse error: {exc}"))
            logger.warning("%s row %d unreadable: %s", source, line_no, exc)
            continue

        result.total_rows += 1
        row = {(k.strip() if k else k): v for k, v in raw.items()}
        try:
            record = _row_to_project(row, has_contractor)
        except RowSkipped as exc:
            result.skipped_out_of_range += 1
            logger.debug("%s row %d skipped: %s", source, line_no, exc)
            continue
        except (ValueError, ValidationError) as exc:
            result.error_count += 1
            result.errors.append((line_no, str(exc)))
            logger.warning("%s row %d rejected: %s", source, line_no, exc)
            continue
        result.records.append(record)
        result.filtered_rows += 1

    return result


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_project(row: Mapping[str, Optional[str]], has_contractor: bool) -> ProjectRecord:
    """Convert one CSV row to a :class:`ProjectRecord`.

    Raises:
        RowSkipped: FundingYear parsed but outside the accepted window.
        ValueError: Any field fails parsing.
    """
    funding_year = _parse_year(row, "FundingYear")
    if not MIN_FUNDING_YEAR <= funding_year <= MAX_FUNDING_YEAR:
        raise RowSkipped(f"FundingYear {funding_year} outside {MIN_FUNDING_YEAR}-{MAX_FUNDING_YEAR}")

    region = _req(row, "Region")
    main_island = _req(row, "MainIsland")
    contractor = _req(row, CONTRACTOR_COLUMN) if has_contractor else None

    return ProjectRecord(
        region=region,
        main_island=main_island,
        contractor=contractor,
        approved_budget=_parse_amount(row, "ApprovedBudgetForContract"),
        contract_cost=_parse_amount(row, "ContractCost"),
        start_date=_parse_date(row, "StartDate"),
        actual_completion_date=_parse_date(row, "ActualCompletionDate"),
        funding_year=funding_year,
    )


def _req(row: Mapping[str, Optional[str]], key: str) -> str:
    """Return a required string field, stripped; raise if empty."""
    v = (row.get(key) or "").strip()
    if not v:
        raise ValueError(f"Required field '{key}' is empty.")
    return v


def _parse_year(row: Mapping[str, Optional[str]], key: str) -> int:
    v = (row.get(key) or "").strip()
    try:
        if "_" in v:
            raise ValueError(v)
        return int(v)
    except ValueError:
        raise ValueError(f"Invalid {key}: '{v}'. Expected an integer year.")


def _parse_amount(row: Mapping[str, Optional[str]], key: str) -> float:
    """Parse a decimal currency amount; must be finite and non-negative."""
    v = _req(row, key)
    try:
        if "_" in v:
            raise ValueError(v)
        amount = float(v)
    except ValueError:
        raise ValueError(f"Invalid amount for '{key}': '{v}'.")
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"Invalid amount for '{key}': '{v}'. Must be finite and >= 0.")
    return amount


def _parse_date(row: Mapping[str, Optional[str]], key: str) -> date:
    """Parse a YYYY-MM-DD date string from a CSV row field."""
    v = _req(row, key)
    try:
        return datetime.strptime(v, DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date for '{key}': '{v}'. Expected YYYY-MM-DD format.")
