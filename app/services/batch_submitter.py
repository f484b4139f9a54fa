"""
app/services/batch_submitter.py

Submits normalized readings to the storage collaborator in bounded,
strictly sequential batches and records each batch's outcome.

A failed batch never stops the run: the next batch is still attempted and
the caller gets one ``BatchResult`` per batch. Batches already committed
stay committed; nothing is rolled back across batches.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence

from app.domain.air_quality import BatchResult, InsertFailure, InsertSuccess, NormalizedRecord
from app.domain.errors import BatchError, BatchSubmissionError, SchemaMismatchError
from app.logging_utils import log_event
from app.storage.base import ReadingStorage

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500

# Lower-case table columns that break when a client sends camelCase names.
KNOWN_SCHEMA_COLUMNS: tuple[str, ...] = (
    "pm25standard",
    "pm10standard",
    "relativehumidity",
    "from_node",
    "elevation",
)

# PostgreSQL undefined_column, PostgREST unknown column in schema cache.
UNDEFINED_COLUMN_CODES = frozenset({"42703", "PGRST204"})

_COLUMN_REFERENCES = (
    re.compile(r'column\s+"([^"]+)"', re.IGNORECASE),
    re.compile(r"'([^']+)'\s+column", re.IGNORECASE),
)


def classify_failure(message: str, error_code: str | None = None) -> BatchError:
    """
    Turn a storage failure into a typed batch error.

    Messages naming a known column, or carrying an undefined-column code,
    become ``SchemaMismatchError`` with the offending field names.
    """

    lowered = message.lower()
    fields = [name for name in KNOWN_SCHEMA_COLUMNS if name in lowered]
    if not fields and error_code not in UNDEFINED_COLUMN_CODES:
        return BatchSubmissionError(message, error_code=error_code)

    for pattern in _COLUMN_REFERENCES:
        for match in pattern.finditer(message):
            name = match.group(1)
            if name.lower() not in fields and name not in fields:
                fields.append(name)
    return SchemaMismatchError(message, fields=fields, error_code=error_code)


class BatchSubmitter:
    """
    Sequential batch writer over a ``ReadingStorage``.
    """

    def __init__(
        self,
        *,
        storage: ReadingStorage,
        batch_size: int = DEFAULT_BATCH_SIZE,
        log_batch_errors: bool = True,
    ) -> None:
        self._storage = storage
        self._batch_size = max(1, batch_size)
        self._log_batch_errors = log_batch_errors

    def iter_batches(
        self,
        records: Sequence[NormalizedRecord],
    ) -> Iterator[Sequence[NormalizedRecord]]:
        for start in range(0, len(records), self._batch_size):
            yield records[start : start + self._batch_size]

    def submit(self, records: Sequence[NormalizedRecord]) -> list[BatchResult]:
        """
        Submit every batch in order and return one result per batch.
        """

        results: list[BatchResult] = []
        for batch_index, batch in enumerate(self.iter_batches(records), start=1):
            results.append(self._submit_one(batch_index, batch))
        return results

    def _submit_one(self, batch_index: int, batch: Sequence[NormalizedRecord]) -> BatchResult:
        try:
            outcome = self._storage.insert_batch(batch)
        except Exception as exc:  # noqa: BLE001
            code = getattr(exc, "code", None)
            outcome = InsertFailure(
                error_message=str(exc) or exc.__class__.__name__,
                error_code=str(code) if code is not None else None,
            )

        if isinstance(outcome, InsertSuccess):
            log_event(
                logger,
                logging.INFO,
                "batch_submitted",
                batch_index=batch_index,
                record_count=len(batch),
                inserted_count=outcome.inserted_count,
            )
            return BatchResult(
                batch_index=batch_index,
                succeeded=True,
                record_count=len(batch),
                inserted_count=outcome.inserted_count,
            )

        error = classify_failure(outcome.error_message, outcome.error_code)
        if self._log_batch_errors:
            log_event(
                logger,
                logging.WARNING,
                "batch_failed",
                batch_index=batch_index,
                record_count=len(batch),
                kind=error.kind,
                code=error.error_code,
                message=error.message,
            )
        return BatchResult(
            batch_index=batch_index,
            succeeded=False,
            record_count=len(batch),
            error=error,
        )
