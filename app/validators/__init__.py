"""
app/validators package marker.
"""

from app.validators.header_validator import (
    MIN_HEADER_COLUMNS,
    RECOGNIZED_HEADER_FRAGMENTS,
    HeaderValidator,
)

__all__ = [
    "MIN_HEADER_COLUMNS",
    "RECOGNIZED_HEADER_FRAGMENTS",
    "HeaderValidator",
]
