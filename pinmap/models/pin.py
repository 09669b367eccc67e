from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pinmap.core.categories import DEFAULT_STATUS
from pinmap.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Pin(Base):
    __tablename__ = "pins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    main_category: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    sub_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=DEFAULT_STATUS)
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Stored as separate columns; exposed as a [lng, lat] point
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)

    # Set client-side so ordering keeps sub-second resolution on every backend
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    __table_args__ = (
        Index("ix_pins_lng_lat", "lng", "lat"),
    )

    @property
    def coordinates(self) -> list[float]:
        return [self.lng, self.lat]
