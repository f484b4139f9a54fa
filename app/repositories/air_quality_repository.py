"""
app/repositories/air_quality_repository.py

Persistence layer for air-quality readings.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from app.domain.air_quality import NormalizedRecord
from db.models.air_quality_reading import AirQualityReading

if TYPE_CHECKING:
    from app.services.date_range_filter import DateRange


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on round-trip; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AirQualityReadingRepository:
    """
    Repository for batch writes and windowed reads of readings.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def bulk_insert(self, rows: Sequence[NormalizedRecord]) -> int:
        """
        Insert readings with one multi-row INSERT. Caller owns the transaction.
        """

        if not rows:
            return 0

        payloads: list[dict[str, Any]] = [self.to_payload(row) for row in rows]
        self._session.execute(insert(AirQualityReading), payloads)
        return len(payloads)

    def count(self, date_range: DateRange | None = None) -> int:
        stmt = self._apply_window(select(func.count(AirQualityReading.id)), date_range)
        return int(self._session.scalar(stmt) or 0)

    def list_readings(
        self,
        date_range: DateRange | None = None,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[NormalizedRecord]:
        stmt = (
            self._apply_window(select(AirQualityReading), date_range)
            .order_by(AirQualityReading.recorded_at.asc(), AirQualityReading.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return [self.to_record(row) for row in self._session.scalars(stmt).all()]

    def datetime_bounds(self) -> tuple[datetime, datetime] | None:
        stmt = select(
            func.min(AirQualityReading.recorded_at),
            func.max(AirQualityReading.recorded_at),
        )
        earliest, latest = self._session.execute(stmt).one()
        if earliest is None or latest is None:
            return None
        return _as_utc(earliest), _as_utc(latest)

    @staticmethod
    def to_payload(row: NormalizedRecord) -> dict[str, Any]:
        return {
            "recorded_at": row.timestamp,
            "from_node": row.source_id,
            "pm25": row.pm25,
            "pm10": row.pm10,
            "temperature": row.temperature,
            "humidity": row.humidity,
            "latitude": row.latitude,
            "longitude": row.longitude,
            "elevation": row.elevation,
            "datetime_is_fallback": row.datetime_is_fallback,
        }

    @staticmethod
    def to_record(row: AirQualityReading) -> NormalizedRecord:
        return NormalizedRecord(
            timestamp=_as_utc(row.recorded_at),
            source_id=row.from_node or "unknown",
            pm25=row.pm25,
            pm10=row.pm10,
            temperature=row.temperature,
            humidity=row.humidity,
            latitude=row.latitude,
            longitude=row.longitude,
            elevation=row.elevation,
            datetime_is_fallback=row.datetime_is_fallback,
        )

    @staticmethod
    def _apply_window(stmt: Select, date_range: DateRange | None) -> Select:
        if date_range is None:
            return stmt
        if date_range.start is not None:
            stmt = stmt.where(AirQualityReading.recorded_at >= date_range.start)
        if date_range.end is not None:
            stmt = stmt.where(AirQualityReading.recorded_at <= date_range.end)
        return stmt
