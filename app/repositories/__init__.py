"""
app/repositories package marker.
"""

from app.repositories.air_quality_repository import AirQualityReadingRepository

__all__ = [
    "AirQualityReadingRepository",
]
