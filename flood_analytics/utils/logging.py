"""
Logging setup for Flood Analytics.

``configure_logging(config, debug=...)`` runs once at CLI entry, before any
CSV is read.  Library modules only ever call ``logging.getLogger(__name__)``.

Where log lines go:
  - stdout, always.
  - ``[logging] log_file`` as well, when non-empty (parent dirs are created).

Row rejections are logged at WARNING with their file line number, so the
default INFO level keeps a per-load audit trail in the log file.  Setting the
top-level ``debug = true`` (or ``FLOOD_ANALYTICS_DEBUG=1``) drops the level to
DEBUG, which also lists the rows skipped for falling outside 2021-2023.

With ``json_format = true`` each line is one JSON object::

    {"ts": "2026-10-19T08:00:00Z", "level": "WARNING", "logger": "...", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flood_analytics.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields are merged in at top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def resolve_level(config: "LoggingConfig", debug: bool = False) -> int:
    """Numeric level for ``config``; ``debug`` forces ``logging.DEBUG``."""
    if debug:
        return logging.DEBUG
    return getattr(logging, config.level.upper(), logging.INFO)


def build_handlers(config: "LoggingConfig", level: int) -> list[logging.Handler]:
    """Stdout handler plus an optional file handler, sharing one formatter."""
    formatter: logging.Formatter = (
        _JsonFormatter() if config.json_format
        else logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Replace the root logger's handlers according to ``config``.

    Args:
        config: ``[logging]`` section of ``AppConfig``.
        debug:  ``AppConfig.debug``; overrides ``config.level`` with DEBUG.
    """
    level = resolve_level(config, debug)
    logging.basicConfig(level=level, handlers=build_handlers(config, level), force=True)
