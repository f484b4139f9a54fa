"""
app/api/routers package marker.
"""

from app.api.routers.csv_ingestion import router as csv_ingestion_router
from app.api.routers.readings_router import router as readings_router

__all__ = [
    "csv_ingestion_router",
    "readings_router",
]
