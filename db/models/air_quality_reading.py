"""
db/models/air_quality_reading.py

One sensor reading as stored in the ``air_quality`` table.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class AirQualityReading(Base):
    __tablename__ = "air_quality"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recorded_at: Mapped[datetime] = mapped_column("datetime", DateTime(timezone=True), nullable=False)
    from_node: Mapped[str | None] = mapped_column(Text, nullable=True, comment="Sensor or mesh node id")
    pm25: Mapped[float | None] = mapped_column("pm25standard", Float, nullable=True)
    pm10: Mapped[float | None] = mapped_column("pm10standard", Float, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column("relativehumidity", Float, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    elevation: Mapped[str | None] = mapped_column(Text, nullable=True)
    datetime_is_fallback: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="True when datetime was stamped at ingestion time",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_air_quality_datetime", "datetime"),
        Index("idx_air_quality_location", "latitude", "longitude"),
        Index("idx_air_quality_node", "from_node"),
    )
