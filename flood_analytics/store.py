"""
In-memory record store for validated project records.

The store is an owned aggregate: each ``AnalyticsSession`` holds exactly one,
created empty.  Loads either replace the contents or append to them; reads
return an immutable snapshot so the engine never sees a half-applied load.
All access is serialized by a single lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from flood_analytics.models.project import ProjectRecord

logger = logging.getLogger(__name__)


class RecordStore:
    """Append-only collection of :class:`ProjectRecord` with wholesale replace."""

    def __init__(self) -> None:
        self._records: list[ProjectRecord] = []
        self._lock = threading.Lock()

    def load(self, records: Iterable[ProjectRecord], append: bool = False) -> int:
        """Store ``records``, replacing the current contents unless ``append``.

        Returns:
            Number of records held after the load.
        """
        incoming = list(records)
        with self._lock:
            if append:
                self._records.extend(incoming)
            else:
                self._records = incoming
            size = len(self._records)
        logger.debug(
            "Record store %s %d records (now %d)",
            "appended" if append else "replaced with", len(incoming), size,
        )
        return size

    def snapshot(self) -> tuple[ProjectRecord, ...]:
        """Return the current contents as an immutable tuple."""
        with self._lock:
            return tuple(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def is_empty(self) -> bool:
        return len(self) == 0
