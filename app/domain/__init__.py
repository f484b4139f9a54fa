"""
app/domain package marker.
"""

from app.domain.air_quality import (
    METRIC_CATALOGUE,
    BatchResult,
    IngestionReport,
    IngestionState,
    InsertFailure,
    InsertOutcome,
    InsertSuccess,
    MetricDescriptor,
    NormalizedRecord,
    RawRecord,
    ReadingPage,
    ReadingStats,
)
from app.domain.errors import (
    BatchError,
    BatchSubmissionError,
    EmptyInputError,
    IngestionError,
    InvalidDateRangeError,
    MalformedCSVError,
    SchemaMismatchError,
    UnrecognizedSchemaError,
)

__all__ = [
    "METRIC_CATALOGUE",
    "BatchError",
    "BatchResult",
    "BatchSubmissionError",
    "EmptyInputError",
    "IngestionError",
    "IngestionReport",
    "IngestionState",
    "InsertFailure",
    "InsertOutcome",
    "InsertSuccess",
    "InvalidDateRangeError",
    "MalformedCSVError",
    "MetricDescriptor",
    "NormalizedRecord",
    "RawRecord",
    "ReadingPage",
    "ReadingStats",
    "SchemaMismatchError",
    "UnrecognizedSchemaError",
]
