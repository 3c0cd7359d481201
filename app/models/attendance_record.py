"""
AttendanceRecord model: one row per (teacher, date).

The unique constraint is what guarantees a single record per key; writers go
through ``INSERT .. ON CONFLICT`` on it instead of checking first.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, ForeignKey, Index, Integer, String,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from app.db.base import Base

STATUS_PRESENT = "PRESENT"
STATUS_ABSENT = "ABSENT"
STATUS_LEAVE = "LEAVE"
STATUS_HALF_DAY = "HALF_DAY"
STATUS_NOT_MARKED = "NOT_MARKED"

ATTENDANCE_STATUSES = (
    STATUS_PRESENT,
    STATUS_ABSENT,
    STATUS_LEAVE,
    STATUS_HALF_DAY,
    STATUS_NOT_MARKED,
)


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("teacher_id", "date", name="uq_attendance_teacher_date"),
        Index("ix_attendance_date", "date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    teacher_id: int = Column(Integer, ForeignKey("teachers.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    status: str = Column(String(20), nullable=False, default=STATUS_NOT_MARKED)  # type: ignore[assignment]
    time_in: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:mm
    time_out: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:mm
    late_minutes: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    early_minutes: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    total_minutes: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    edited_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    edit_reason: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    teacher = relationship("Teacher", back_populates="records")
