"""
app/services/date_range_filter.py

Inclusive [start, end] date window used by ingestion and by reads.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from app.domain.air_quality import NormalizedRecord
from app.domain.errors import InvalidDateRangeError
from app.mappers.field_normalizer import parse_timestamp

DATE_ONLY_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
)

END_OF_DAY = time(23, 59, 59, 999000)


def _parse_date_only(raw: str) -> date | None:
    for fmt in DATE_ONLY_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def _parse_bound(value: str | None, *, is_end: bool) -> datetime | None:
    if value is None or not value.strip():
        return None

    raw = value.strip()
    day = _parse_date_only(raw)
    if day is not None:
        return datetime.combine(day, END_OF_DAY if is_end else time.min, tzinfo=timezone.utc)

    parsed = parse_timestamp(raw)
    if parsed is None:
        label = "endDate" if is_end else "startDate"
        raise InvalidDateRangeError(f"{label} '{raw}' is not a valid date or timestamp.")
    return parsed


@dataclass(frozen=True)
class DateRange:
    """
    Optional inclusive window. A missing bound is open.
    """

    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def from_strings(cls, start_date: str | None, end_date: str | None) -> DateRange:
        """
        Build a window from request strings.

        A date-only end bound covers the whole day (23:59:59.999 UTC).
        """

        start = _parse_bound(start_date, is_end=False)
        end = _parse_bound(end_date, is_end=True)
        if start is not None and end is not None and start > end:
            raise InvalidDateRangeError("startDate must not be after endDate.")
        return cls(start=start, end=end)

    @property
    def is_active(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


def filter_records(
    records: Iterable[NormalizedRecord],
    date_range: DateRange,
) -> list[NormalizedRecord]:
    """
    Keep records inside the window.

    Records whose datetime was a fallback are always kept.
    """

    if not date_range.is_active:
        return list(records)
    return [
        record
        for record in records
        if record.datetime_is_fallback or date_range.contains(record.timestamp)
    ]
