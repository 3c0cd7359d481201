"""Pydantic schemas for attendance records, stats and reports."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.attendance_record import ATTENDANCE_STATUSES

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def _check_status(v: str) -> str:
    if v not in ATTENDANCE_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(ATTENDANCE_STATUSES)}")
    return v


def _check_time(v: str | None) -> str | None:
    if v is None or v == "":
        return None
    if not _TIME_RE.match(v):
        raise ValueError("Time must be HH:mm")
    return v


# ── Check-in / check-out ────────────────────────────────────────────
class CheckRequest(BaseModel):
    teacher_id: int


# ── Admin mark ──────────────────────────────────────────────────────
class MarkRequest(BaseModel):
    teacher_id: int
    date: str
    status: str
    time_in: str | None = None
    time_out: str | None = None
    notes: str | None = None

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        if not _DATE_RE.match(v):
            raise ValueError("Date must be YYYY-MM-DD")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        return _check_status(v)

    @field_validator("time_in", "time_out")
    @classmethod
    def _time(cls, v: str | None) -> str | None:
        return _check_time(v)


# ── Edit ────────────────────────────────────────────────────────────
class EditRequest(BaseModel):
    status: str
    time_in: str | None = None
    time_out: str | None = None
    notes: str | None = None
    edit_reason: str = ""

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        return _check_status(v)

    @field_validator("time_in", "time_out")
    @classmethod
    def _time(cls, v: str | None) -> str | None:
        return _check_time(v)


# ── Records ─────────────────────────────────────────────────────────
class TeacherBrief(BaseModel):
    id: int
    name: str
    department: str
    subject: str

    model_config = {"from_attributes": True}


class AttendanceRecordRead(BaseModel):
    id: int
    teacher_id: int
    date: str
    status: str
    time_in: str | None
    time_out: str | None
    late_minutes: int
    early_minutes: int
    total_minutes: int | None
    notes: str | None = None
    edited_by: int | None = None
    edit_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    teacher: TeacherBrief | None = None

    model_config = {"from_attributes": True}


class DayStatusResponse(BaseModel):
    """A teacher's day: the stored record, or NOT_MARKED when none exists."""

    teacher_id: int
    date: str
    status: str
    record: AttendanceRecordRead | None = None


# ── Stats ───────────────────────────────────────────────────────────
class TodayStatsResponse(BaseModel):
    PRESENT: int = 0
    ABSENT: int = 0
    LEAVE: int = 0
    HALF_DAY: int = 0
    NOT_MARKED: int = 0


class ReportStatsResponse(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    leave_days: int
    half_days: int
    attendance_percentage: float
    total_late_minutes: int
    total_early_minutes: int
    total_worked_minutes: int
    average_worked_minutes: int
    working_days: int | None = None


# ── Health / Status ────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool


class StatusResponse(BaseModel):
    total_teachers: int
    today_records: int
    status: str


# ── Generic ────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    message: str


class DeleteResponse(BaseModel):
    success: bool
    message: str
