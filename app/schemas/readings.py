"""
app/schemas/readings.py

Request/response schemas for the reading stats and filter endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.air_quality import NormalizedRecord, ReadingPage, ReadingStats


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadingResponse(_CamelModel):
    recorded_at: datetime = Field(..., alias="datetime")
    source_id: str
    pm25: float | None = None
    pm10: float | None = None
    temperature: float | None = None
    humidity: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    elevation: str | None = None
    datetime_is_fallback: bool = False

    @classmethod
    def from_domain(cls, record: NormalizedRecord) -> ReadingResponse:
        return cls(
            recorded_at=record.timestamp,
            source_id=record.source_id,
            pm25=record.pm25,
            pm10=record.pm10,
            temperature=record.temperature,
            humidity=record.humidity,
            latitude=record.latitude,
            longitude=record.longitude,
            elevation=record.elevation,
            datetime_is_fallback=record.datetime_is_fallback,
        )


class MetricResponse(_CamelModel):
    name: str
    field: str


class DateRangeResponse(_CamelModel):
    start: datetime | None = None
    end: datetime | None = None


class ReadingStatsResponse(_CamelModel):
    """
    API response model for stored-data statistics.
    """

    total_records: int = Field(..., ge=0)
    date_range: DateRangeResponse
    metrics: list[MetricResponse]
    source: str

    @classmethod
    def from_domain(cls, stats: ReadingStats) -> ReadingStatsResponse:
        return cls(
            total_records=stats.total_records,
            date_range=DateRangeResponse(start=stats.start, end=stats.end),
            metrics=[MetricResponse(name=metric.name, field=metric.field) for metric in stats.metrics],
            source=stats.source,
        )


class ReadingFilterRequest(_CamelModel):
    """
    Body of ``POST /data/filter``.
    """

    start_date: str | None = None
    end_date: str | None = None
    limit: int = Field(1000, ge=1, le=1000)
    offset: int = Field(0, ge=0)


class ReadingFilterDates(_CamelModel):
    start_date: str | None = None
    end_date: str | None = None


class ReadingPageResponse(_CamelModel):
    """
    API response model for one page of readings.
    """

    data: list[ReadingResponse]
    count: int = Field(..., ge=0)
    limit: int
    offset: int
    source: str
    date_range: ReadingFilterDates

    @classmethod
    def from_domain(
        cls,
        page: ReadingPage,
        *,
        start_date: str | None,
        end_date: str | None,
    ) -> ReadingPageResponse:
        return cls(
            data=[ReadingResponse.from_domain(record) for record in page.records],
            count=page.count,
            limit=page.limit,
            offset=page.offset,
            source=page.source,
            date_range=ReadingFilterDates(start_date=start_date, end_date=end_date),
        )

