"""
Shared pytest fixtures for the Flood Analytics test suite.

Provides:
  - ``make_record``: factory for valid ``ProjectRecord`` objects with
    overridable fields and a ``delay`` shortcut (days from start).
  - ``write_csv``: writes CSV text into ``tmp_path`` and returns the path.
  - ``scenario_records``: the three-record R1/Luzon worked example.
  - ``test_config``: an ``AppConfig`` that writes into ``tmp_path`` and logs
    nowhere but stdout.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Callable

import pytest

from flood_analytics.config import AppConfig, LoggingConfig, ReportsConfig
from flood_analytics.models.project import ProjectRecord


@pytest.fixture
def make_record() -> Callable[..., ProjectRecord]:
    """Return a factory producing valid records; ``delay`` sets completion date."""

    def _make(
        region: str = "R1",
        main_island: str = "Luzon",
        contractor: str | None = "Acme Builders",
        approved_budget: float = 100.0,
        contract_cost: float = 90.0,
        delay: int = 10,
        funding_year: int = 2022,
        start: date = date(2022, 1, 1),
    ) -> ProjectRecord:
        return ProjectRecord(
            region=region,
            main_island=main_island,
            contractor=contractor,
            approved_budget=approved_budget,
            contract_cost=contract_cost,
            start_date=start,
            actual_completion_date=start + timedelta(days=delay),
            funding_year=funding_year,
        )

    return _make


@pytest.fixture
def scenario_records(make_record) -> list[ProjectRecord]:
    """Three R1/Luzon projects: savings 20, 10, 30 and delays 10, 40, 5."""
    return [
        make_record(approved_budget=100, contract_cost=80, delay=10, funding_year=2021),
        make_record(approved_budget=100, contract_cost=90, delay=40, funding_year=2022),
        make_record(approved_budget=100, contract_cost=70, delay=5, funding_year=2023),
    ]


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write CSV content to a temp file and return the path."""

    def _write(content: str, name: str = "projects.csv") -> Path:
        p = tmp_path / name
        p.write_text(content, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    """Config writing reports under ``tmp_path/out`` with no log file."""
    return AppConfig(
        reports=ReportsConfig(output_dir=str(tmp_path / "out")),
        logging=LoggingConfig(level="WARNING", log_file=""),
    )
