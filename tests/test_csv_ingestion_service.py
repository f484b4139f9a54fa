from __future__ import annotations

import unittest
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from app.domain.air_quality import InsertFailure, InsertOutcome, NormalizedRecord
from app.domain.errors import (
    EmptyInputError,
    InvalidDateRangeError,
    MalformedCSVError,
    SchemaMismatchError,
    UnrecognizedSchemaError,
)
from app.services.csv_ingestion_service import CSVIngestionService
from app.storage.memory_storage import InMemoryReadingStorage

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _FailingStorage(InMemoryReadingStorage):
    def __init__(self, *, fail_on: Sequence[int] = (), message: str = "statement timeout") -> None:
        super().__init__()
        self.calls = 0
        self._fail_on = set(fail_on)
        self._message = message

    def insert_batch(self, records: Sequence[NormalizedRecord]) -> InsertOutcome:
        self.calls += 1
        if self.calls in self._fail_on:
            return InsertFailure(error_message=self._message, error_code="42703")
        return super().insert_batch(records)


def _csv(row_count: int) -> str:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    lines = ["datetime,from_node,pm25Standard,pm10Standard"]
    for index in range(row_count):
        moment = start + timedelta(minutes=index)
        lines.append(f"{moment.strftime('%Y-%m-%dT%H:%M:%SZ')},node-{index % 3},{index},{index * 2}")
    return "\n".join(lines) + "\n"


class TestCSVIngestionService(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = InMemoryReadingStorage()
        self.service = CSVIngestionService(storage=self.storage, clock=lambda: NOW)

    def test_minimal_file_is_ingested(self) -> None:
        report = self.service.ingest_text("datetime,pm25Standard\n2024-01-01T00:00:00Z,12.3\n")

        self.assertEqual(report.total_parsed, 1)
        self.assertEqual(report.total_retained_after_filter, 1)
        self.assertEqual(report.total_succeeded, 1)
        self.assertEqual(report.total_failed, 0)
        self.assertFalse(report.has_failures)
        stored = self.storage.query(limit=10)
        self.assertEqual(stored[0].pm25, 12.3)
        self.assertEqual(stored[0].timestamp, datetime(2024, 1, 1, tzinfo=timezone.utc))

    def test_report_totals_after_partial_failure(self) -> None:
        storage = _FailingStorage(fail_on=(2,))
        service = CSVIngestionService(storage=storage, batch_size=500, clock=lambda: NOW)

        report = service.ingest_text(_csv(1200))

        self.assertEqual([r.record_count for r in report.batch_results], [500, 500, 200])
        self.assertEqual(report.total_succeeded, 700)
        self.assertEqual(report.total_failed, 500)
        self.assertEqual(storage.calls, 3)
        self.assertTrue(report.has_failures)
        self.assertIn("Batch 2 (500 records) failed", report.warnings[0])
        self.assertEqual(
            report.total_retained_after_filter,
            report.total_succeeded + report.total_failed,
        )

    def test_total_failure_still_returns_a_report(self) -> None:
        storage = _FailingStorage(fail_on=(1, 2), message='column "pm25Standard" does not exist')
        service = CSVIngestionService(storage=storage, batch_size=2, clock=lambda: NOW)

        report = service.ingest_text(_csv(4))

        self.assertEqual(report.total_succeeded, 0)
        self.assertEqual(report.total_failed, 4)
        self.assertIsInstance(report.batch_results[0].error, SchemaMismatchError)

    def test_unrecognized_headers_raise_before_any_submission(self) -> None:
        storage = _FailingStorage()
        service = CSVIngestionService(storage=storage, clock=lambda: NOW)

        with self.assertRaises(UnrecognizedSchemaError):
            service.ingest_text("foo,bar\n1,2\n")
        self.assertEqual(storage.calls, 0)

    def test_skip_schema_check_ingests_unrecognized_headers(self) -> None:
        report = self.service.ingest_text("foo,bar\n1,2\n", skip_schema_check=True)

        self.assertTrue(report.schema_check_skipped)
        self.assertEqual(report.total_succeeded, 1)
        self.assertEqual(report.datetime_fallback_count, 1)

    def test_date_window_filters_before_submission(self) -> None:
        text = (
            "datetime,pm25\n"
            "2024-01-01T12:00:00Z,1\n"
            "2024-01-02T23:58:00Z,2\n"
            "2024-01-03T00:00:00Z,3\n"
        )

        report = self.service.ingest_text(text, start_date="2024-01-02", end_date="2024-01-02")

        self.assertEqual(report.total_parsed, 3)
        self.assertEqual(report.total_retained_after_filter, 1)
        self.assertEqual([r.pm25 for r in self.storage.query(limit=10)], [2.0])

    def test_datetime_fallbacks_are_reported_and_kept(self) -> None:
        text = "datetime,pm25\n,1\n2020-01-01T00:00:00Z,2\nnot-a-date,3\n"

        report = self.service.ingest_text(text, start_date="2024-01-01")

        self.assertEqual(report.datetime_fallback_count, 2)
        self.assertEqual(report.datetime_fallback_rows, [2, 4])
        self.assertEqual(report.total_retained_after_filter, 2)
        self.assertTrue(all(r.timestamp == NOW for r in self.storage.query(limit=10)))
        self.assertTrue(any("ingestion time" in warning for warning in report.warnings))

    def test_fallback_row_list_is_capped(self) -> None:
        service = CSVIngestionService(storage=self.storage, max_fallback_rows=1, clock=lambda: NOW)

        report = service.ingest_text("datetime,pm25\n,1\n,2\n,3\n")

        self.assertEqual(report.datetime_fallback_count, 3)
        self.assertEqual(report.datetime_fallback_rows, [2])

    def test_header_only_file_yields_an_empty_report(self) -> None:
        report = self.service.ingest_text("datetime,pm25\n")

        self.assertEqual(report.total_parsed, 0)
        self.assertEqual(report.batch_results, [])

    def test_ragged_rows_are_accepted(self) -> None:
        report = self.service.ingest_text("datetime,pm25,pm10\n2024-01-01T00:00:00Z,5\n")

        self.assertEqual(report.total_succeeded, 1)
        self.assertIsNone(self.storage.query(limit=1)[0].pm10)

    def test_invalid_date_range_raises_before_submission(self) -> None:
        with self.assertRaises(InvalidDateRangeError):
            self.service.ingest_text("datetime,pm25\n2024-01-01,1\n", start_date="soon")
        self.assertEqual(self.storage.count(), 0)

    def test_empty_input_is_reported_ahead_of_bad_date_bounds(self) -> None:
        for text in ("", "  \n \n"):
            with self.subTest(text=text):
                with self.assertRaises(EmptyInputError):
                    self.service.ingest_text(text, start_date="2024-01-01", end_date="not-a-date")
        with self.assertRaises(EmptyInputError):
            self.service.ingest_bytes(b"", end_date="not-a-date")

    def test_split_date_and_time_columns_keep_the_real_timestamp(self) -> None:
        report = self.service.ingest_text("date,time,pm25\n2024-01-02,13:00,5\n")

        self.assertEqual(report.datetime_fallback_count, 0)
        stored = self.storage.query(limit=1)[0]
        self.assertEqual(stored.timestamp, datetime(2024, 1, 2, 13, 0, tzinfo=timezone.utc))
        self.assertFalse(stored.datetime_is_fallback)

    def test_empty_and_undecodable_bytes(self) -> None:
        with self.assertRaises(EmptyInputError):
            self.service.ingest_bytes(b"")
        with self.assertRaises(EmptyInputError):
            self.service.ingest_bytes(b"\n\n")
        with self.assertRaises(MalformedCSVError):
            self.service.ingest_bytes(b"datetime,pm25\n\xff\xfe,1\n")

    def test_utf8_bom_is_ignored(self) -> None:
        report = self.service.ingest_bytes("\ufeffdatetime,pm25\n2024-01-01T00:00:00Z,1\n".encode("utf-8"))

        self.assertEqual(report.datetime_fallback_count, 0)
        self.assertEqual(report.total_succeeded, 1)
