"""
app/schemas package marker.
"""

from app.schemas.csv_ingestion import BatchErrorResponse, BatchResultResponse, IngestionReportResponse
from app.schemas.readings import (
    ReadingFilterRequest,
    ReadingPageResponse,
    ReadingResponse,
    ReadingStatsResponse,
)

__all__ = [
    "BatchErrorResponse",
    "BatchResultResponse",
    "IngestionReportResponse",
    "ReadingFilterRequest",
    "ReadingPageResponse",
    "ReadingResponse",
    "ReadingStatsResponse",
]
