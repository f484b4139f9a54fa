"""
SQLAlchemy-backed reading storage (Supabase/PostgreSQL).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.air_quality import InsertFailure, InsertOutcome, InsertSuccess, NormalizedRecord
from app.repositories.air_quality_repository import AirQualityReadingRepository
from app.storage.base import ReadingStorage

if TYPE_CHECKING:
    from app.services.date_range_filter import DateRange

logger = logging.getLogger(__name__)


def _error_code(exc: SQLAlchemyError) -> str | None:
    original = getattr(exc, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate:
        return str(sqlstate)
    return getattr(exc, "code", None)


def _error_message(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original if original is not None else exc).strip()


class SQLAlchemyReadingStorage(ReadingStorage):
    """
    Persist readings through the repository, one transaction per batch.
    """

    name = "postgres"

    def __init__(self, *, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def insert_batch(self, records: Sequence[NormalizedRecord]) -> InsertOutcome:
        if not records:
            return InsertSuccess(inserted_count=0)

        with self._session_factory() as session:
            repository = AirQualityReadingRepository(session)
            try:
                inserted = repository.bulk_insert(records)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.debug("Reading batch insert rolled back: %s", exc)
                return InsertFailure(error_message=_error_message(exc), error_code=_error_code(exc))
        return InsertSuccess(inserted_count=inserted)

    def count(self, date_range: DateRange | None = None) -> int:
        with self._session_factory() as session:
            return AirQualityReadingRepository(session).count(date_range)

    def query(
        self,
        date_range: DateRange | None = None,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[NormalizedRecord]:
        with self._session_factory() as session:
            return AirQualityReadingRepository(session).list_readings(
                date_range,
                limit=limit,
                offset=offset,
            )

    def datetime_bounds(self) -> tuple[datetime, datetime] | None:
        with self._session_factory() as session:
            return AirQualityReadingRepository(session).datetime_bounds()
