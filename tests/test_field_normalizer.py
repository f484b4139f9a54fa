from __future__ import annotations

import unittest
from dataclasses import replace
from datetime import datetime, timezone

from app.domain.air_quality import NormalizedRecord
from app.mappers.field_normalizer import (
    CANONICAL_FIELDS,
    UNKNOWN_SOURCE_ID,
    FieldNormalizer,
    normalize_header,
    parse_float,
    parse_timestamp,
)
from app.parsing.csv_tokenizer import build_raw_records, tokenize_csv

INGESTED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestFieldNormalizer(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = FieldNormalizer()

    def _normalize(self, headers: list[str], values: list[str]):
        resolution = self.normalizer.resolve_fields(headers)
        return self.normalizer.normalize(
            dict(zip(headers, values)),
            resolution=resolution,
            ingested_at=INGESTED_AT,
            row_number=2,
        )

    def test_minimal_export_produces_one_reading(self) -> None:
        record = self._normalize(["datetime", "pm25Standard"], ["2024-01-01T00:00:00Z", "12.3"])

        self.assertEqual(record.pm25, 12.3)
        self.assertEqual(record.timestamp, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertFalse(record.datetime_is_fallback)
        self.assertEqual(record.source_id, UNKNOWN_SOURCE_ID)
        self.assertIsNone(record.pm10)

    def test_non_numeric_value_becomes_absent(self) -> None:
        record = self._normalize(
            ["datetime", "pm10Standard", "pm25Standard"],
            ["2024-01-01T00:00:00Z", "N/A", "0"],
        )

        self.assertIsNone(record.pm10)
        self.assertEqual(record.pm25, 0.0)

    def test_first_alias_in_precedence_order_wins(self) -> None:
        resolution = self.normalizer.resolve_fields(["pm2.5", "pm25Standard", "datetime"])

        self.assertEqual(resolution.canonical_to_source["pm25"], "pm25Standard")

    def test_header_matching_ignores_case_and_punctuation(self) -> None:
        resolution = self.normalizer.resolve_fields(
            ["Date Time", "From_Node", "PM10STANDARD", "Relative-Humidity", "Lat", "Lng"]
        )

        self.assertEqual(
            resolution.canonical_to_source,
            {
                "datetime": "Date Time",
                "source_id": "From_Node",
                "pm10": "PM10STANDARD",
                "humidity": "Relative-Humidity",
                "latitude": "Lat",
                "longitude": "Lng",
            },
        )
        self.assertIn("pm25", resolution.unmapped_fields)

    def test_resolution_is_idempotent(self) -> None:
        headers = ["datetime", "fromNode", "pm25Standard", "temperature"]

        self.assertEqual(self.normalizer.resolve_fields(headers), self.normalizer.resolve_fields(headers))

    def test_missing_datetime_falls_back_to_ingestion_time(self) -> None:
        record = self._normalize(["datetime", "pm25"], ["", "4"])

        self.assertEqual(record.timestamp, INGESTED_AT)
        self.assertTrue(record.datetime_is_fallback)
        self.assertEqual(record.row_number, 2)

    def test_unparseable_datetime_falls_back_to_ingestion_time(self) -> None:
        record = self._normalize(["datetime", "pm25"], ["yesterday-ish", "4"])

        self.assertTrue(record.datetime_is_fallback)

    def test_all_fields_are_mapped(self) -> None:
        record = self._normalize(
            [
                "datetime",
                "from_node",
                "pm25Standard",
                "pm10Standard",
                "temperature",
                "relativeHumidity",
                "latitude",
                "longitude",
                "elevation",
            ],
            ["2024-03-04 05:06:07", "node-7", "1.5", "2.5", "28.1", "77", "14.6", "121.0", " 12m "],
        )

        self.assertEqual(record.source_id, "node-7")
        self.assertEqual(record.timestamp, datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc))
        self.assertEqual(
            (record.pm25, record.pm10, record.temperature, record.humidity),
            (1.5, 2.5, 28.1, 77.0),
        )
        self.assertEqual((record.latitude, record.longitude), (14.6, 121.0))
        self.assertEqual(record.elevation, "12m")

    def test_custom_aliases_replace_defaults(self) -> None:
        normalizer = FieldNormalizer(aliases={"datetime": ("ts",), "pm25": ("fine_pm",)})

        resolution = normalizer.resolve_fields(["ts", "fine_pm", "pm25"])

        self.assertEqual(resolution.canonical_to_source, {"datetime": "ts", "pm25": "fine_pm"})


    def test_separate_date_and_time_columns_are_joined(self) -> None:
        resolution = self.normalizer.resolve_fields(["date", "time", "pm25"])
        record = self._normalize(["date", "time", "pm25"], ["2024-01-02", "13:00", "5"])

        self.assertEqual(resolution.canonical_to_source["datetime"], "date")
        self.assertEqual(resolution.time_source, "time")
        self.assertFalse(record.datetime_is_fallback)
        self.assertEqual(record.timestamp, datetime(2024, 1, 2, 13, 0, tzinfo=timezone.utc))

    def test_date_column_is_preferred_over_time_column(self) -> None:
        record = self._normalize(["time", "date", "pm25"], ["08:30:15", "2024/01/02", "5"])

        self.assertEqual(record.timestamp, datetime(2024, 1, 2, 8, 30, 15, tzinfo=timezone.utc))

    def test_blank_time_of_day_keeps_the_date(self) -> None:
        record = self._normalize(["date", "time", "pm25"], ["2024-01-02", "", "5"])

        self.assertFalse(record.datetime_is_fallback)
        self.assertEqual(record.timestamp, datetime(2024, 1, 2, tzinfo=timezone.utc))

    def test_full_datetime_column_ignores_a_time_column(self) -> None:
        resolution = self.normalizer.resolve_fields(["datetime", "time", "pm25"])

        self.assertEqual(resolution.canonical_to_source["datetime"], "datetime")
        self.assertIsNone(resolution.time_source)

    def test_canonical_headers_give_back_the_same_numbers(self) -> None:
        record = self._normalize(
            ["datetime", "pm25", "pm10", "temperature", "humidity"],
            ["2024-01-01T00:00:00Z", "12.5", "30", "-4.25", "80.125"],
        )

        self.assertEqual(
            (record.pm25, record.pm10, record.temperature, record.humidity),
            (12.5, 30.0, -4.25, 80.125),
        )

    def test_normalized_readings_written_back_to_csv_normalize_identically(self) -> None:
        headers = ["Date Time", "Node", "PM2.5", "pm10Standard", "Temp", "RH", "Lat", "Lng", "Altitude"]
        rows = [
            ["2024-03-04 05:06:07", "node-7", "1.5", "2.5", "28.1", "77", "14.6", "121.0", "12m"],
            ["03/05/2024 06:07", "", "0.1", "N/A", "", "65.5", "", "", ""],
        ]
        first_pass = [self._normalize(headers, values) for values in rows]

        second_pass = self._renormalize(first_pass)

        self.assertEqual(
            [replace(record, row_number=None) for record in second_pass],
            [replace(record, row_number=None) for record in first_pass],
        )

    def _renormalize(self, records: list[NormalizedRecord]) -> list[NormalizedRecord]:
        def cell(value: object) -> str:
            if value is None:
                return ""
            if isinstance(value, datetime):
                return value.isoformat()
            return repr(value) if isinstance(value, float) else str(value)

        lines = [",".join(CANONICAL_FIELDS)]
        for record in records:
            values = {"datetime": record.timestamp, **{name: getattr(record, name) for name in CANONICAL_FIELDS[1:]}}
            lines.append(",".join(cell(values[name]) for name in CANONICAL_FIELDS))

        rows = tokenize_csv("\n".join(lines))
        headers = next(rows)
        resolution = self.normalizer.resolve_fields(headers)
        return [
            self.normalizer.normalize(raw, resolution=resolution, ingested_at=INGESTED_AT, row_number=row_number)
            for row_number, raw in build_raw_records(headers, rows)
        ]


class TestValueParsers(unittest.TestCase):
    def test_normalize_header(self) -> None:
        self.assertEqual(normalize_header(" PM2.5-Standard "), "pm25standard")

    def test_parse_float(self) -> None:
        self.assertEqual(parse_float(" 1e3 "), 1000.0)
        self.assertEqual(parse_float("-4.25"), -4.25)
        for raw in (None, "", "  ", "N/A", "nan", "inf", "12,5"):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_float(raw))

    def test_parse_timestamp_normalizes_to_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2024-01-01T02:00:00+02:00"),
            datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        self.assertEqual(parse_timestamp("01/02/2024"), datetime(2024, 1, 2, tzinfo=timezone.utc))
        self.assertEqual(
            parse_timestamp("2024/01/02 03:04:05"),
            datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )

    def test_parse_timestamp_rejects_garbage(self) -> None:
        for raw in (None, "", "not a date", "2024-13-45"):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_timestamp(raw))

    def test_parse_timestamp_accepts_short_fractional_seconds(self) -> None:
        self.assertEqual(
            parse_timestamp("2024-01-01T00:00:00.5Z"),
            datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc),
        )
