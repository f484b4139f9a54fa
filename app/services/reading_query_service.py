"""
app/services/reading_query_service.py

Read-side queries over stored readings: summary stats and date-windowed
pages.
"""

from __future__ import annotations

from functools import lru_cache

from app.domain.air_quality import ReadingPage, ReadingStats
from app.services.date_range_filter import DateRange
from app.storage import ReadingStorage, get_reading_storage

MAX_PAGE_SIZE = 1000


class ReadingQueryService:
    """
    Stats and filtered listing over a ``ReadingStorage``.
    """

    def __init__(self, *, storage: ReadingStorage) -> None:
        self._storage = storage

    def get_stats(self) -> ReadingStats:
        bounds = self._storage.datetime_bounds()
        start, end = bounds if bounds is not None else (None, None)
        return ReadingStats(
            total_records=self._storage.count(),
            start=start,
            end=end,
            source=self._storage.name,
        )

    def filter_readings(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = MAX_PAGE_SIZE,
        offset: int = 0,
    ) -> ReadingPage:
        """
        Page through readings inside an optional date window.

        Raises ``InvalidDateRangeError`` for unparseable or inverted bounds.
        """

        date_range = DateRange.from_strings(start_date, end_date)
        page_limit = max(1, min(MAX_PAGE_SIZE, limit))
        page_offset = max(0, offset)
        return ReadingPage(
            records=self._storage.query(date_range, limit=page_limit, offset=page_offset),
            count=self._storage.count(date_range),
            limit=page_limit,
            offset=page_offset,
            source=self._storage.name,
        )


@lru_cache(maxsize=1)
def get_reading_query_service() -> ReadingQueryService:
    return ReadingQueryService(storage=get_reading_storage())
