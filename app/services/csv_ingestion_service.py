"""
app/services/csv_ingestion_service.py

Service layer for air-quality CSV ingestion.

One call walks the stages Parsing -> Validating -> Normalizing ->
Filtering -> Submitting -> Reported. Fatal input problems (empty content,
bad encoding, too few columns, unrecognized headers, bad date bounds) raise
before anything is submitted. Once submission starts, the call always
returns an ``IngestionReport``, even when every batch failed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import UploadFile

from app.config import get_ingestion_settings
from app.domain.air_quality import IngestionReport, IngestionState, NormalizedRecord
from app.domain.errors import EmptyInputError, MalformedCSVError
from app.logging_utils import log_event
from app.mappers.field_normalizer import FieldNormalizer
from app.parsing.csv_tokenizer import build_raw_records, tokenize_csv
from app.services.batch_submitter import BatchSubmitter
from app.services.date_range_filter import DateRange, filter_records
from app.storage import ReadingStorage, get_reading_storage
from app.validators.header_validator import HeaderValidator

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class CSVIngestionService:
    """
    Coordinates CSV parsing, header validation, normalization, date
    filtering and batch submission.
    """

    def __init__(
        self,
        *,
        storage: ReadingStorage,
        batch_size: int = 500,
        max_fallback_rows: int = 100,
        log_batch_errors: bool = True,
        header_validator: HeaderValidator | None = None,
        normalizer: FieldNormalizer | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._submitter = BatchSubmitter(
            storage=storage,
            batch_size=batch_size,
            log_batch_errors=log_batch_errors,
        )
        self._max_fallback_rows = max(0, max_fallback_rows)
        self._header_validator = header_validator or HeaderValidator()
        self._normalizer = normalizer or FieldNormalizer()
        self._clock = clock

    def ingest_upload(
        self,
        *,
        upload_file: UploadFile,
        start_date: str | None = None,
        end_date: str | None = None,
        skip_schema_check: bool = False,
    ) -> IngestionReport:
        """
        Read an uploaded file and ingest its content.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        return self.ingest_bytes(
            raw_file.read(),
            start_date=start_date,
            end_date=end_date,
            skip_schema_check=skip_schema_check,
        )

    def ingest_bytes(
        self,
        content: bytes | None,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        skip_schema_check: bool = False,
    ) -> IngestionReport:
        """
        Decode UTF-8 (BOM tolerated) content and ingest it.
        """

        if not content:
            raise EmptyInputError("No CSV content was provided.")
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedCSVError("CSV must be UTF-8 encoded.") from exc
        return self.ingest_text(
            text,
            start_date=start_date,
            end_date=end_date,
            skip_schema_check=skip_schema_check,
        )

    def ingest_text(
        self,
        text: str | None,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        skip_schema_check: bool = False,
    ) -> IngestionReport:
        """
        Run the full pipeline over CSV text.

        Args:
            text:              Full CSV content, header row first.
            start_date:        Optional inclusive lower bound (ISO date or timestamp).
            end_date:          Optional inclusive upper bound; a date-only value
                               covers that whole day.
            skip_schema_check: Accept headers that do not look like an
                               air-quality export.
        """

        # Empty input outranks every other fatal error.
        rows = tokenize_csv(text)
        date_range = DateRange.from_strings(start_date, end_date)
        ingested_at = self._clock()

        self._enter(IngestionState.PARSING)
        headers = next(rows)

        self._enter(IngestionState.VALIDATING, columns=len(headers))
        self._header_validator.validate(headers, skip_schema_check=skip_schema_check)

        resolution = self._normalizer.resolve_fields(headers)
        self._enter(
            IngestionState.NORMALIZING,
            unmapped=list(resolution.unmapped_fields) or None,
            time_column=resolution.time_source,
        )
        records: list[NormalizedRecord] = [
            self._normalizer.normalize(
                raw_record,
                resolution=resolution,
                ingested_at=ingested_at,
                row_number=row_number,
            )
            for row_number, raw_record in build_raw_records(headers, rows)
        ]
        fallback_rows = [
            record.row_number
            for record in records
            if record.datetime_is_fallback and record.row_number is not None
        ]
        if fallback_rows:
            log_event(
                logger,
                logging.WARNING,
                "datetime_fallback",
                count=len(fallback_rows),
                first_rows=fallback_rows[:10],
                ingested_at=ingested_at.isoformat(),
            )

        self._enter(IngestionState.FILTERING, parsed=len(records), active=date_range.is_active)
        retained = filter_records(records, date_range)

        self._enter(IngestionState.SUBMITTING, retained=len(retained))
        batch_results = self._submitter.submit(retained)

        total_succeeded = sum(result.record_count for result in batch_results if result.succeeded)
        report = IngestionReport(
            total_parsed=len(records),
            total_retained_after_filter=len(retained),
            total_succeeded=total_succeeded,
            total_failed=len(retained) - total_succeeded,
            batch_results=batch_results,
            datetime_fallback_count=len(fallback_rows),
            datetime_fallback_rows=fallback_rows[: self._max_fallback_rows],
            schema_check_skipped=skip_schema_check,
            state=IngestionState.REPORTED,
        )
        log_event(
            logger,
            logging.INFO,
            "ingestion_reported",
            parsed=report.total_parsed,
            retained=report.total_retained_after_filter,
            succeeded=report.total_succeeded,
            failed=report.total_failed,
            batches=len(batch_results),
        )
        return report

    @staticmethod
    def _enter(state: IngestionState, **fields: object) -> None:
        log_event(logger, logging.DEBUG, "ingestion_state", state=state, **fields)


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    settings = get_ingestion_settings()
    return CSVIngestionService(
        storage=get_reading_storage(),
        batch_size=settings.batch_size,
        max_fallback_rows=settings.max_fallback_rows,
        log_batch_errors=settings.log_batch_errors,
    )
