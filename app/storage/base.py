"""
Storage collaborator interface for air-quality readings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from app.domain.air_quality import InsertOutcome, NormalizedRecord

if TYPE_CHECKING:
    from app.services.date_range_filter import DateRange


class ReadingStorage(ABC):
    """
    Storage abstraction the ingestion pipeline and read endpoints talk to.

    ``insert_batch`` must not raise for storage-side failures; it returns an
    ``InsertFailure`` instead.
    """

    name: str = "storage"

    @abstractmethod
    def insert_batch(self, records: Sequence[NormalizedRecord]) -> InsertOutcome:
        """
        Persist one batch of readings.
        """

    @abstractmethod
    def count(self, date_range: DateRange | None = None) -> int:
        """
        Count stored readings, optionally inside a window.
        """

    @abstractmethod
    def query(
        self,
        date_range: DateRange | None = None,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[NormalizedRecord]:
        """
        Return stored readings ordered by datetime ascending.
        """

    @abstractmethod
    def datetime_bounds(self) -> tuple[datetime, datetime] | None:
        """
        Return the earliest and latest stored datetime, or None when empty.
        """
