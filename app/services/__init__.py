"""
app/services package marker.
"""

from app.services.batch_submitter import BatchSubmitter, classify_failure
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.services.date_range_filter import DateRange, filter_records
from app.services.reading_query_service import ReadingQueryService, get_reading_query_service

__all__ = [
    "BatchSubmitter",
    "classify_failure",
    "CSVIngestionService",
    "get_csv_ingestion_service",
    "DateRange",
    "filter_records",
    "ReadingQueryService",
    "get_reading_query_service",
]
