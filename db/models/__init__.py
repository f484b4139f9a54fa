"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.air_quality_reading import AirQualityReading

__all__ = [
    "AirQualityReading",
]
