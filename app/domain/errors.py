"""
app/domain/errors.py

Error taxonomy for air-quality CSV ingestion.

Fatal errors (``IngestionError`` subclasses) abort an ingestion call before
anything is submitted. Batch errors (``BatchError`` subclasses) are recorded
on the report as values and are never raised past the pipeline boundary.
"""

from __future__ import annotations

from typing import Any, Sequence


class IngestionError(ValueError):
    """
    Base class for fatal ingestion errors.
    """

    code = "ingestion_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class EmptyInputError(IngestionError):
    """
    Raised when no CSV content was supplied.
    """

    code = "empty_input"


class MalformedCSVError(IngestionError):
    """
    Raised when the CSV is structurally unusable (encoding, too few columns).
    """

    code = "malformed_csv"


class UnrecognizedSchemaError(IngestionError):
    """
    Raised when no header looks like an air-quality measurement column.
    """

    code = "unrecognized_schema"

    def __init__(self, message: str, *, headers: Sequence[str]) -> None:
        super().__init__(message)
        self.headers = tuple(headers)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "headers": list(self.headers)}


class InvalidDateRangeError(IngestionError):
    """
    Raised when a start/end filter bound cannot be parsed or is inverted.
    """

    code = "invalid_date_range"


class BatchError(RuntimeError):
    """
    Base class for per-batch submission failures recorded on the report.
    """

    kind = "batch_error"

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "code": self.error_code,
            "fields": [],
        }


class SchemaMismatchError(BatchError):
    """
    Storage rejected a batch because its columns do not match the table.
    """

    kind = "schema_mismatch"

    def __init__(
        self,
        message: str,
        *,
        fields: Sequence[str],
        error_code: str | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code)
        self.fields = tuple(fields)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["fields"] = list(self.fields)
        return payload


class BatchSubmissionError(BatchError):
    """
    Any other storage failure for one batch.
    """

    kind = "batch_submission"
