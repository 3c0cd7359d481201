"""Pydantic schemas for the school attendance policy."""

from __future__ import annotations

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_WEEKDAYS = {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}


class SchoolSettingsRead(BaseModel):
    start_time: str
    end_time: str
    grace_minutes: int
    half_day_minutes: int
    weekend_days: str
    timezone: str

    model_config = {"from_attributes": True}


class SchoolSettingsUpdate(BaseModel):
    start_time: str | None = None
    end_time: str | None = None
    grace_minutes: int | None = Field(default=None, ge=0)
    half_day_minutes: int | None = Field(default=None, ge=0)
    weekend_days: str | None = None
    timezone: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _time(cls, v: str | None) -> str | None:
        if v is not None and not _TIME_RE.match(v):
            raise ValueError("Time must be HH:mm format")
        return v

    @field_validator("weekend_days")
    @classmethod
    def _weekend(cls, v: str | None) -> str | None:
        if v is None:
            return v
        days = [d.strip() for d in v.split(",") if d.strip()]
        unknown = [d for d in days if d.lower() not in _WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
        return ",".join(d.capitalize() for d in days)

    @field_validator("timezone")
    @classmethod
    def _timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}") from None
        return v
