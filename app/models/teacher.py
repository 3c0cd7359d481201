"""
Teacher model. Teachers are never hard-deleted; ``active=False`` hides them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), unique=True, nullable=True
    )
    name: str = Column(String(200), nullable=False, index=True)  # type: ignore[assignment]
    department: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    subject: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    photo_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    records = relationship("AttendanceRecord", back_populates="teacher")
