"""
Tests for flood_analytics/cli.py.

What we test
------------
run_shell() with scripted input:
  - Generate before load prints the no-data message and writes nothing.
  - Load then generate prints both tables and writes both CSVs.
  - Invalid choice, missing file, and end-of-input are handled without exiting early.

Typer commands via CliRunner:
  - validate-config, load, generate-reports (single and repeated --file).
  - Exit code 1 on missing config / missing CSV / nothing valid to report.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from flood_analytics.cli import app, run_shell
from flood_analytics.session import AnalyticsSession

runner = CliRunner()

HEADER = (
    "FundingYear,Region,MainIsland,Contractor,ApprovedBudgetForContract,"
    "ContractCost,StartDate,ActualCompletionDate"
)

SCENARIO = "\n".join([
    HEADER,
    "2021,R1,Luzon,Acme,100,80,2021-01-01,2021-01-11",
    "2022,R1,Luzon,Acme,100,90,2022-01-01,2022-02-10",
    "2023,R1,Luzon,Acme,100,70,2023-01-01,2023-01-06",
    "2020,R1,Luzon,Acme,9999,1,2020-01-01,2020-01-02",
]) + "\n"


@pytest.fixture(autouse=True)
def _reset_root_logging():
    """Drop handlers bound to CliRunner's captured streams after each test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    out_dir = (tmp_path / "out").as_posix()
    path = tmp_path / "test.toml"
    path.write_text(
        "[reports]\n"
        f'output_dir = "{out_dir}"\n'
        "top_n = 15\n"
        "\n"
        "[logging]\n"
        'level = "WARNING"\n'
        'log_file = ""\n',
        encoding="utf-8",
    )
    return path


class _Script:
    """Feeds canned answers to ``run_shell`` and records everything echoed."""

    def __init__(self, answers: list[str]) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []
        self.lines: list[str] = []

    def prompt(self, text: str) -> str:
        self.prompts.append(text)
        if not self.answers:
            raise typer.Abort()
        return self.answers.pop(0)

    def echo(self, text: str) -> None:
        self.lines.append(text)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


# ── run_shell ─────────────────────────────────────────────────────────────────

class TestShell:
    def test_generate_before_load(self, test_config, tmp_path):
        script = _Script(["2", "3"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)

        assert "No data loaded. Please load a file first." in script.output
        assert "Goodbye." in script.output
        assert not (tmp_path / "out").exists()

    def test_load_then_generate(self, test_config, write_csv, tmp_path):
        path = write_csv(SCENARIO)
        script = _Script(["1", str(path), "2", "3"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)

        out = script.output
        assert "Processing dataset... (4 rows loaded, 3 filtered for 2021-2023)" in out
        assert "Generating reports..." in out
        assert "Report 1: Regional Flood Mitigation Efficiency Summary" in out
        assert "Report 2: Top Contractors Performance Ranking" in out
        assert "300.00" in out

        regional = tmp_path / "out" / "report_1_regional_summary.csv"
        contractor = tmp_path / "out" / "report_2_contractor_ranking.csv"
        assert f"Full table exported to {regional}" in out
        with regional.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert rows[0]["TotalBudget"] == "300.00"
        assert contractor.exists()

    def test_prompts_use_menu_labels(self, test_config):
        script = _Script(["1", "missing.csv", "exit"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert script.prompts == ["Enter Choice", "Enter CSV filename", "Enter Choice"]

    def test_invalid_choice_then_continue(self, test_config):
        script = _Script(["9", "quit"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert "Invalid choice. Please try again." in script.output
        assert "Goodbye." in script.output

    def test_missing_file_returns_to_menu(self, test_config, tmp_path):
        missing = tmp_path / "nope.csv"
        script = _Script(["1", str(missing), "2", "3"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)

        assert "[ERROR] Could not load" in script.output
        assert "No data loaded. Please load a file first." in script.output

    def test_unreadable_row_returns_to_menu(self, test_config, write_csv):
        huge = "x" * 200_000
        path = write_csv(SCENARIO + f"2022,\"{huge}\",Luzon,Acme,100,80,2022-01-01,2022-01-11\n")
        session = AnalyticsSession(test_config)
        script = _Script(["1", str(path), "3"])
        run_shell(session, prompt=script.prompt, echo=script.echo)

        assert "1 parse/validation errors encountered." in script.output
        assert "Goodbye." in script.output
        assert len(session.store) == 3

    def test_directory_path_reported(self, test_config, tmp_path):
        script = _Script(["1", str(tmp_path), "3"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert "[ERROR] Could not load" in script.output
        assert "Goodbye." in script.output

    def test_bad_header_reported(self, test_config, write_csv):
        path = write_csv("Region,MainIsland\nR1,Luzon\n")
        script = _Script(["1", str(path), "3"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert "[ERROR] Could not load" in script.output

    def test_end_of_input_exits(self, test_config):
        script = _Script([])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert script.prompts == ["Enter Choice"]
        assert "Goodbye." not in script.output

    def test_text_choices_accepted(self, test_config, write_csv):
        path = write_csv(SCENARIO)
        script = _Script(["Load", str(path), "Generate Reports", "Exit"])
        run_shell(AnalyticsSession(test_config), prompt=script.prompt, echo=script.echo)
        assert "Generating reports..." in script.output

    def test_second_load_replaces(self, test_config, write_csv):
        path = write_csv(SCENARIO)
        session = AnalyticsSession(test_config)
        script = _Script(["1", str(path), "1", str(path), "3"])
        run_shell(session, prompt=script.prompt, echo=script.echo)
        assert len(session.store) == 3


# ── validate-config ───────────────────────────────────────────────────────────

def test_validate_config_ok(config_file):
    result = runner.invoke(app, ["validate-config", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "[OK] Config valid." in result.output
    assert "Contractor top-N: 15" in result.output


def test_validate_config_full_dump(config_file):
    result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--full"])
    assert result.exit_code == 0
    assert '"top_n": 15' in result.output


def test_validate_config_missing_file(tmp_path):
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "none.toml")])
    assert result.exit_code == 1


def test_validate_config_invalid_value(tmp_path):
    bad = tmp_path / "bad.toml"
    bad.write_text("[reports]\ntop_n = 0\n", encoding="utf-8")
    result = runner.invoke(app, ["validate-config", "--config", str(bad)])
    assert result.exit_code == 1


# ── load ──────────────────────────────────────────────────────────────────────

def test_load_command_prints_counts(config_file, write_csv):
    path = write_csv(SCENARIO + "2022,R1,Luzon,Acme,abc,1,2022-01-01,2022-01-02\n")
    result = runner.invoke(app, ["load", "--file", str(path), "--config", str(config_file)])

    assert result.exit_code == 0
    assert "5 rows loaded, 3 filtered for 2021-2023" in result.output
    assert "1 parse/validation errors encountered." in result.output
    assert "Row 6:" in result.output
    assert "Skipped (outside funding years): 1" in result.output
    assert "[OK] Load complete." in result.output


def test_load_command_missing_file(config_file, tmp_path):
    result = runner.invoke(
        app, ["load", "--file", str(tmp_path / "gone.csv"), "--config", str(config_file)]
    )
    assert result.exit_code == 1


def test_load_command_directory_path(config_file, tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    result = runner.invoke(app, ["load", "--file", str(data_dir), "--config", str(config_file)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
    assert "[ERROR]" in result.output


# ── generate-reports ──────────────────────────────────────────────────────────

def test_generate_reports_end_to_end(config_file, write_csv, tmp_path):
    path = write_csv(SCENARIO)
    result = runner.invoke(
        app, ["generate-reports", "--file", str(path), "--config", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    assert "[OK] Reports generated." in result.output
    assert (tmp_path / "out" / "report_1_regional_summary.csv").exists()
    assert (tmp_path / "out" / "report_2_contractor_ranking.csv").exists()


def test_generate_reports_output_dir_and_top_n(config_file, write_csv, tmp_path):
    rows = [HEADER] + [
        f"2022,R1,Luzon,C{c},100,{50 + c},2022-01-01,2022-01-11"
        for c in range(4) for _ in range(5)
    ]
    path = write_csv("\n".join(rows) + "\n")
    target = tmp_path / "elsewhere"
    result = runner.invoke(
        app,
        [
            "generate-reports", "-f", str(path), "-o", str(target),
            "--top-n", "2", "--config", str(config_file),
        ],
    )

    assert result.exit_code == 0, result.output
    with (target / "report_2_contractor_ranking.csv").open(encoding="utf-8", newline="") as f:
        ranked = list(csv.DictReader(f))
    assert [r["Contractor"] for r in ranked] == ["C3", "C2"]
    assert not (tmp_path / "out").exists()


def test_generate_reports_multiple_files_accumulate(config_file, write_csv, tmp_path):
    a = write_csv(SCENARIO, "a.csv")
    b = write_csv(SCENARIO, "b.csv")
    result = runner.invoke(
        app,
        ["generate-reports", "-f", str(a), "-f", str(b), "--config", str(config_file)],
    )

    assert result.exit_code == 0, result.output
    with (tmp_path / "out" / "report_1_regional_summary.csv").open(
        encoding="utf-8", newline=""
    ) as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["TotalBudget"] == "600.00"


def test_generate_reports_nothing_valid(config_file, write_csv, tmp_path):
    path = write_csv(HEADER + "\n2019,R1,Luzon,Acme,100,80,2019-01-01,2019-01-11\n")
    result = runner.invoke(
        app, ["generate-reports", "--file", str(path), "--config", str(config_file)]
    )

    assert result.exit_code == 1
    assert "No data loaded. Please load a file first." in result.output
    assert not (tmp_path / "out").exists()


def test_generate_reports_rejects_zero_top_n(config_file, write_csv):
    path = write_csv(SCENARIO)
    result = runner.invoke(
        app,
        ["generate-reports", "-f", str(path), "--top-n", "0", "--config", str(config_file)],
    )
    assert result.exit_code != 0


def test_generate_reports_directory_path(config_file, tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    result = runner.invoke(
        app, ["generate-reports", "--file", str(data_dir), "--config", str(config_file)]
    )

    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
    assert "[ERROR]" in result.output
    assert not (tmp_path / "out").exists()
