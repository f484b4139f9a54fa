"""
app/validators/header_validator.py

Cheap header gate that rejects files which do not look like air-quality
exports before any row is normalized.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.errors import MalformedCSVError, UnrecognizedSchemaError

MIN_HEADER_COLUMNS = 2

# Matched as case-insensitive substrings of each header.
RECOGNIZED_HEADER_FRAGMENTS: tuple[str, ...] = (
    "datetime",
    "pm25",
    "pm25standard",
    "pm10",
    "pm10standard",
    "temperature",
    "humidity",
    "relativehumidity",
)


class HeaderValidator:
    """
    Validates the header row of an uploaded CSV.
    """

    def __init__(
        self,
        *,
        fragments: Sequence[str] = RECOGNIZED_HEADER_FRAGMENTS,
        min_columns: int = MIN_HEADER_COLUMNS,
    ) -> None:
        self._fragments = tuple(fragment.lower() for fragment in fragments)
        self._min_columns = max(1, min_columns)

    def validate(self, headers: Sequence[str], *, skip_schema_check: bool = False) -> None:
        """
        Raise when the header row is too narrow or unrecognizable.

        ``skip_schema_check`` bypasses only the air-quality fragment check.
        """

        if len(headers) < self._min_columns:
            raise MalformedCSVError(
                f"CSV must have at least {self._min_columns} columns; found {len(headers)}."
            )

        if skip_schema_check:
            return

        if not self.is_recognized(headers):
            raise UnrecognizedSchemaError(
                "CSV does not contain any recognized air quality fields.",
                headers=headers,
            )

    def is_recognized(self, headers: Sequence[str]) -> bool:
        lowered = [header.lower() for header in headers]
        return any(fragment in header for fragment in self._fragments for header in lowered)
