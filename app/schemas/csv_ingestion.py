"""
app/schemas/csv_ingestion.py

Response schemas for the CSV upload endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.air_quality import BatchResult, IngestionReport


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BatchErrorResponse(_CamelModel):
    """
    API response model for one failed batch's error.
    """

    kind: str
    message: str
    code: str | None = None
    fields: list[str] = Field(default_factory=list)


class BatchResultResponse(_CamelModel):
    """
    API response model for one batch outcome.
    """

    batch_index: int = Field(..., ge=1)
    succeeded: bool
    record_count: int = Field(..., ge=0)
    inserted_count: int = Field(0, ge=0)
    error: BatchErrorResponse | None = None

    @classmethod
    def from_domain(cls, result: BatchResult) -> BatchResultResponse:
        error = None
        if result.error is not None:
            error = BatchErrorResponse(**result.error.to_dict())
        return cls(
            batch_index=result.batch_index,
            succeeded=result.succeeded,
            record_count=result.record_count,
            inserted_count=result.inserted_count,
            error=error,
        )


class IngestionReportResponse(_CamelModel):
    """
    API response model for an ingestion report.

    ``total_failed > 0`` is a partial success; clients should show it as a
    warning next to what was stored.
    """

    total_parsed: int = Field(..., ge=0)
    total_retained_after_filter: int = Field(..., ge=0)
    total_succeeded: int = Field(..., ge=0)
    total_failed: int = Field(..., ge=0)
    batch_results: list[BatchResultResponse] = Field(default_factory=list)
    datetime_fallback_count: int = Field(0, ge=0)
    datetime_fallback_rows: list[int] = Field(default_factory=list)
    schema_check_skipped: bool = False
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, report: IngestionReport) -> IngestionReportResponse:
        return cls(
            total_parsed=report.total_parsed,
            total_retained_after_filter=report.total_retained_after_filter,
            total_succeeded=report.total_succeeded,
            total_failed=report.total_failed,
            batch_results=[BatchResultResponse.from_domain(result) for result in report.batch_results],
            datetime_fallback_count=report.datetime_fallback_count,
            datetime_fallback_rows=list(report.datetime_fallback_rows),
            schema_check_skipped=report.schema_check_skipped,
            warnings=report.warnings,
        )
