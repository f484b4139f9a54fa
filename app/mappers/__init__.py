"""
app/mappers package marker.
"""

from app.mappers.field_normalizer import (
    CANONICAL_FIELDS,
    FIELD_ALIASES,
    NUMERIC_FIELDS,
    FieldNormalizer,
    FieldResolution,
    normalize_header,
    parse_float,
    parse_timestamp,
)

__all__ = [
    "CANONICAL_FIELDS",
    "FIELD_ALIASES",
    "NUMERIC_FIELDS",
    "FieldNormalizer",
    "FieldResolution",
    "normalize_header",
    "parse_float",
    "parse_timestamp",
]
