"""
app/mappers/field_normalizer.py

Reconciles vendor-specific CSV headers onto the canonical reading fields
and coerces raw cell text into typed values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from app.domain.air_quality import NormalizedRecord, RawRecord

CANONICAL_FIELDS: tuple[str, ...] = (
    "datetime",
    "source_id",
    "pm25",
    "pm10",
    "temperature",
    "humidity",
    "latitude",
    "longitude",
    "elevation",
)

NUMERIC_FIELDS: tuple[str, ...] = (
    "pm25",
    "pm10",
    "temperature",
    "humidity",
    "latitude",
    "longitude",
)

# Order matters: the first alias present among the headers wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "datetime": ("datetime", "timestamp", "date_time", "recorded_at", "measured_at", "date", "time"),
    "source_id": (
        "from_node",
        "fromNode",
        "sourceId",
        "source_id",
        "node_id",
        "sensor_id",
        "device_id",
        "node",
        "sensor",
    ),
    "pm25": ("pm25Standard", "pm25standard", "pm2.5", "pm25", "pm2.5-standard", "pm2_5"),
    "pm10": ("pm10Standard", "pm10standard", "pm10", "pm10-standard"),
    "temperature": ("temperature", "temp", "temperature_c"),
    "humidity": ("relativeHumidity", "relativehumidity", "humidity", "relative-humidity", "rh"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon", "lng", "long"),
    "elevation": ("elevation", "elev", "altitude"),
}

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)

UNKNOWN_SOURCE_ID = "unknown"

# A bare date column is joined with one of these when both are present.
DATE_ONLY_HEADERS = frozenset({"date"})
TIME_OF_DAY_ALIASES: tuple[str, ...] = ("time", "time_of_day")


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


def parse_float(value: Any) -> float | None:
    """
    Return a finite float, or None when the value is blank or not numeric.
    """

    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        number = float(raw)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 or common date/time string into an aware UTC datetime.
    """

    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw[-1] in "Zz" else raw
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
@dataclass(frozen=True)
class FieldResolution:
    """
    Canonical field -> source header, resolved once per file.

    ``time_source`` is set when the datetime comes from a bare date column
    and a separate time-of-day column exists.
    """

    canonical_to_source: dict[str, str]
    source_headers: tuple[str, ...]
    time_source: str | None = None

    @property
    def unmapped_fields(self) -> tuple[str, ...]:
        return tuple(name for name in CANONICAL_FIELDS if name not in self.canonical_to_source)


class FieldNormalizer:
    """
    Maps raw CSV records onto ``NormalizedRecord``.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in (aliases or FIELD_ALIASES).items()
        }

    def resolve_fields(self, headers: Sequence[str]) -> FieldResolution:
        """
        Resolve which source header feeds each canonical field.
        """

        normalized_header_lookup: dict[str, str] = {}
        for header in headers:
            normalized = normalize_header(header)
            if normalized and normalized not in normalized_header_lookup:
                normalized_header_lookup[normalized] = header

        resolved: dict[str, str] = {}
        used_headers: set[str] = set()
        for canonical_field in CANONICAL_FIELDS:
            for alias in self._aliases.get(canonical_field, ()):
                match = normalized_header_lookup.get(normalize_header(alias))
                if match is not None and match not in used_headers:
                    resolved[canonical_field] = match
                    used_headers.add(match)
                    break

        time_source: str | None = None
        datetime_source = resolved.get("datetime")
        if datetime_source is not None and normalize_header(datetime_source) in DATE_ONLY_HEADERS:
            for alias in TIME_OF_DAY_ALIASES:
                match = normalized_header_lookup.get(normalize_header(alias))
                if match is not None and match not in used_headers:
                    time_source = match
                    break

        return FieldResolution(
            canonical_to_source=resolved,
            source_headers=tuple(headers),
            time_source=time_source,
        )

    def normalize(
        self,
        raw_record: RawRecord,
        *,
        resolution: FieldResolution,
        ingested_at: datetime,
        row_number: int | None = None,
    ) -> NormalizedRecord:
        """
        Build one normalized record.

        Unparseable numbers become None. A missing or unparseable datetime is
        replaced by ``ingested_at`` and flagged on the record.
        """

        def raw(canonical_field: str) -> str | None:
            source_column = resolution.canonical_to_source.get(canonical_field)
            if source_column is None:
                return None
            return raw_record.get(source_column)

        raw_datetime = raw("datetime")
        if resolution.time_source is not None and raw_datetime and raw_datetime.strip():
            time_of_day = (raw_record.get(resolution.time_source) or "").strip()
            if time_of_day:
                raw_datetime = f"{raw_datetime.strip()} {time_of_day}"

        timestamp = parse_timestamp(raw_datetime)
        is_fallback = timestamp is None
        if timestamp is None:
            timestamp = ingested_at

        source_id = (raw("source_id") or "").strip() or UNKNOWN_SOURCE_ID
        elevation = (raw("elevation") or "").strip() or None
        numbers = {name: parse_float(raw(name)) for name in NUMERIC_FIELDS}

        return NormalizedRecord(
            timestamp=timestamp,
            source_id=source_id,
            elevation=elevation,
            row_number=row_number,
            datetime_is_fallback=is_fallback,
            **numbers,
        )
