"""
School settings model: singleton table for the attendance policy.

Only one row should ever exist. The admin updates it via the settings API;
every attendance write reads it to compute late / early / worked minutes.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from app.db.base import Base

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
DEFAULT_GRACE_MINUTES = 15
DEFAULT_HALF_DAY_MINUTES = 240
DEFAULT_WEEKEND_DAYS = "Saturday,Sunday"
DEFAULT_TIMEZONE = "UTC"


class SchoolSettings(Base):
    __tablename__ = "school_settings"

    id: int = Column(Integer, primary_key=True, default=1)  # type: ignore[assignment]
    start_time: str = Column(String(5), nullable=False, default=DEFAULT_START_TIME)  # type: ignore[assignment]
    end_time: str = Column(String(5), nullable=False, default=DEFAULT_END_TIME)  # type: ignore[assignment]
    grace_minutes: int = Column(Integer, nullable=False, default=DEFAULT_GRACE_MINUTES)  # type: ignore[assignment]
    half_day_minutes: int = Column(  # type: ignore[assignment]
        Integer, nullable=False, default=DEFAULT_HALF_DAY_MINUTES
    )
    weekend_days: str = Column(  # type: ignore[assignment]
        String(100), nullable=False, default=DEFAULT_WEEKEND_DAYS
    )
    timezone: str = Column(String(64), nullable=False, default=DEFAULT_TIMEZONE)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
