"""
In-memory reading storage used when no database is configured.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from app.domain.air_quality import InsertOutcome, InsertSuccess, NormalizedRecord
from app.storage.base import ReadingStorage

if TYPE_CHECKING:
    from app.services.date_range_filter import DateRange


class InMemoryReadingStorage(ReadingStorage):
    """
    Process-local list of readings.
    """

    name = "memory"

    def __init__(self, records: Sequence[NormalizedRecord] | None = None) -> None:
        self._records: list[NormalizedRecord] = list(records or [])
        self._lock = threading.Lock()

    def insert_batch(self, records: Sequence[NormalizedRecord]) -> InsertOutcome:
        with self._lock:
            self._records.extend(records)
        return InsertSuccess(inserted_count=len(records))

    def count(self, date_range: DateRange | None = None) -> int:
        return len(self._select(date_range))

    def query(
        self,
        date_range: DateRange | None = None,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[NormalizedRecord]:
        selected = sorted(self._select(date_range), key=lambda record: record.timestamp)
        return selected[offset : offset + limit]

    def datetime_bounds(self) -> tuple[datetime, datetime] | None:
        with self._lock:
            if not self._records:
                return None
            timestamps = [record.timestamp for record in self._records]
        return min(timestamps), max(timestamps)

    def _select(self, date_range: DateRange | None) -> list[NormalizedRecord]:
        with self._lock:
            snapshot = list(self._records)
        if date_range is None or not date_range.is_active:
            return snapshot
        return [record for record in snapshot if date_range.contains(record.timestamp)]
