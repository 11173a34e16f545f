"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``FLOOD_ANALYTICS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and ``AnalyticsSession`` receive an ``AppConfig`` instance,
never raw dicts or individual env var lookups scattered through the codebase.

Scoring thresholds (30-day delay, 5-project minimum, 90-day reliability
horizon, 50-point risk cut-off) are deliberately NOT configurable; they live
as constants next to the engine code.  Only the contractor report cap
(``reports.top_n``) is a setting.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Input data settings."""

    model_config = ConfigDict(frozen=True)

    default_input_file: str = "data/dpwh_flood_control_projects.csv"
    accumulate_loads: bool = False


class ReportsConfig(BaseModel):
    """Report output locations and the contractor ranking cap."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "."
    regional_filename: str = "report_1_regional_summary.csv"
    contractor_filename: str = "report_2_contractor_ranking.csv"
    summary_filename: str = "report_summary.json"
    top_n: int = 15
    write_json_summary: bool = False

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_n must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/flood_analytics.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    reports: ReportsConfig = ReportsConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``; when that default file is
            absent the built-in model defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If an explicitly given ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = root / "config" / "default.toml"
        if default_path.exists():
            raw = _read_toml_layers(default_path)
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                "Pass an existing TOML file or omit --config to use defaults."
            )
        raw = _read_toml_layers(config_path)

    # 3. Apply FLOOD_ANALYTICS_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _read_toml_layers(config_path: Path) -> dict[str, Any]:
    """Read ``config_path`` and deep-merge a sibling ``local.toml`` if present."""
    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists() and local_config_path != config_path:
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)
    return raw


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply FLOOD_ANALYTICS_* env vars to the raw config dict.

    Supported overrides:
      FLOOD_ANALYTICS_OUTPUT_DIR  → raw["reports"]["output_dir"]
      FLOOD_ANALYTICS_TOP_N       → raw["reports"]["top_n"]
      FLOOD_ANALYTICS_LOG_LEVEL   → raw["logging"]["level"]
      FLOOD_ANALYTICS_DEBUG       → raw["debug"]
    """
    if output_dir := os.environ.get("FLOOD_ANALYTICS_OUTPUT_DIR"):
        raw.setdefault("reports", {})["output_dir"] = output_dir

    if top_n := os.environ.get("FLOOD_ANALYTICS_TOP_N"):
        raw.setdefault("reports", {})["top_n"] = top_n

    if log_level := os.environ.get("FLOOD_ANALYTICS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("FLOOD_ANALYTICS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        reports=ReportsConfig(**raw.get("reports", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
