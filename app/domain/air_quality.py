"""
app/domain/air_quality.py

Domain models used by the air-quality CSV ingestion flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping

from app.domain.errors import BatchError

# Header string (as found in the CSV) -> raw cell text.
RawRecord = Mapping[str, str]


class IngestionState(str, Enum):
    """
    Stages one ingestion call moves through, in order.
    """

    PARSING = "parsing"
    VALIDATING = "validating"
    NORMALIZING = "normalizing"
    FILTERING = "filtering"
    SUBMITTING = "submitting"
    REPORTED = "reported"


@dataclass(frozen=True)
class NormalizedRecord:
    """
    One sensor reading reconciled onto the fixed canonical field set.

    ``timestamp`` is always set and timezone-aware (UTC). When the source
    value was missing or unparseable it holds the ingestion time and
    ``datetime_is_fallback`` is True.
    """

    timestamp: datetime
    source_id: str
    pm25: float | None = None
    pm10: float | None = None
    temperature: float | None = None
    humidity: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    elevation: str | None = None
    row_number: int | None = None
    datetime_is_fallback: bool = False


@dataclass(frozen=True)
class InsertSuccess:
    """
    Storage accepted a batch.
    """

    inserted_count: int


@dataclass(frozen=True)
class InsertFailure:
    """
    Storage rejected a batch.
    """

    error_message: str
    error_code: str | None = None


InsertOutcome = InsertSuccess | InsertFailure


@dataclass(frozen=True)
class BatchResult:
    """
    Outcome of submitting one batch. ``batch_index`` is 1-based.
    """

    batch_index: int
    succeeded: bool
    record_count: int
    inserted_count: int = 0
    error: BatchError | None = None


@dataclass(frozen=True)
class IngestionReport:
    """
    End-of-run ingestion report, returned once every batch was attempted.
    """

    total_parsed: int
    total_retained_after_filter: int
    total_succeeded: int
    total_failed: int
    batch_results: list[BatchResult] = field(default_factory=list)
    datetime_fallback_count: int = 0
    datetime_fallback_rows: list[int] = field(default_factory=list)
    schema_check_skipped: bool = False
    state: IngestionState = IngestionState.REPORTED

    @property
    def has_failures(self) -> bool:
        return self.total_failed > 0

    @property
    def warnings(self) -> list[str]:
        messages: list[str] = []
        for result in self.batch_results:
            if result.succeeded or result.error is None:
                continue
            messages.append(
                f"Batch {result.batch_index} ({result.record_count} records) failed: "
                f"{result.error.message}"
            )
        if self.datetime_fallback_count:
            messages.append(
                f"{self.datetime_fallback_count} records had a missing or unparseable datetime "
                "and were stamped with the ingestion time."
            )
        return messages


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    field: str


METRIC_CATALOGUE: tuple[MetricDescriptor, ...] = (
    MetricDescriptor(name="PM2.5", field="pm25"),
    MetricDescriptor(name="PM10", field="pm10"),
    MetricDescriptor(name="Temperature", field="temperature"),
    MetricDescriptor(name="Humidity", field="humidity"),
)


@dataclass(frozen=True)
class ReadingStats:
    """
    Summary of what the storage currently holds.
    """

    total_records: int
    start: datetime | None
    end: datetime | None
    source: str
    metrics: tuple[MetricDescriptor, ...] = METRIC_CATALOGUE


@dataclass(frozen=True)
class ReadingPage:
    """
    One page of stored readings for a date window.
    """

    records: list[NormalizedRecord]
    count: int
    limit: int
    offset: int
    source: str
