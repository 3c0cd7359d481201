"""
Attendance record manager: the per-(teacher, date) state machine.

Every write goes through a single keyed upsert and recomputes metrics from
the policy in effect at write time.  Stored records are never recomputed
when the policy changes later.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence, Union
from zoneinfo import ZoneInfo

from app.core.exceptions import (AlreadyCheckedIn, AlreadyCheckedOut,
                                 NotCheckedIn, NotFoundError, ValidationError)
from app.models.attendance_record import (ATTENDANCE_STATUSES,
                                          STATUS_NOT_MARKED, STATUS_PRESENT,
                                          AttendanceRecord)
from app.models.teacher import Teacher
from app.repositories.attendance import AttendanceRepository, RecordFilter
from app.services.metrics import Policy, calculate_metrics, minutes_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotMarked:
    """A (teacher, date) with no stored record."""

    teacher_id: int
    date: str
    status: str = STATUS_NOT_MARKED


DayRecord = Union[AttendanceRecord, NotMarked]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_date(value: str) -> str:
    """Return *value* if it is a real ``YYYY-MM-DD`` calendar date."""
    try:
        parsed = datetime.strptime(value or "", "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Date must be YYYY-MM-DD, got {value!r}") from None
    if parsed.strftime("%Y-%m-%d") != value:
        raise ValidationError(f"Date must be YYYY-MM-DD, got {value!r}")
    return value


def validate_status(value: str) -> str:
    if value not in ATTENDANCE_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(ATTENDANCE_STATUSES)}"
        )
    return value


def _validate_times(time_in: str | None, time_out: str | None) -> tuple[str | None, str | None]:
    time_in = time_in or None
    time_out = time_out or None
    if time_out and not time_in:
        raise ValidationError("time_out cannot be set without time_in")
    if time_in and time_out and minutes_of(time_out) < minutes_of(time_in):
        raise ValidationError("time_out must not be earlier than time_in")
    if time_in:
        minutes_of(time_in)
    return time_in, time_out


class AttendanceRecordManager:
    def __init__(
        self,
        repository: AttendanceRepository,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._repo = repository
        self._clock = clock or _utc_now

    def _now(self, policy: Policy) -> tuple[str, str]:
        """Current (date, HH:mm) in the school's time zone.

        A naive clock reading is taken as school-local wall-clock time.
        """
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(ZoneInfo(policy.timezone))
        return now.strftime("%Y-%m-%d"), now.strftime("%H:%M")

    async def _require_teacher(self, teacher_id: int, *, active_only: bool) -> Teacher:
        teacher = await self._repo.get_teacher(teacher_id)
        if teacher is None or (active_only and not teacher.active):
            raise NotFoundError("Teacher not found")
        return teacher

    async def today(self) -> str:
        policy = await self._repo.get_policy()
        return self._now(policy)[0]

    async def lookup(self, teacher_id: int, date: str) -> DayRecord:
        record = await self._repo.find_record(teacher_id, date)
        if record is None:
            await self._require_teacher(teacher_id, active_only=False)
            return NotMarked(teacher_id=teacher_id, date=date)
        return record

    # ── Teacher self service ───────────────────────────────────────
    async def check_in(self, teacher_id: int) -> AttendanceRecord:
        await self._require_teacher(teacher_id, active_only=True)
        policy = await self._repo.get_policy()
        day, time_in = self._now(policy)

        current = await self.lookup(teacher_id, day)
        if isinstance(current, AttendanceRecord) and current.time_in:
            raise AlreadyCheckedIn()

        metrics = calculate_metrics(time_in, None, policy)
        record = await self._repo.upsert_record(
            teacher_id,
            day,
            {
                "status": STATUS_PRESENT,
                "time_in": time_in,
                "time_out": None,
                "late_minutes": metrics.late_minutes,
                "early_minutes": 0,
                "total_minutes": None,
            },
        )
        logger.info(
            "Check-in teacher %d on %s at %s (late %d min)",
            teacher_id, day, time_in, metrics.late_minutes,
        )
        return record

    async def check_out(self, teacher_id: int) -> AttendanceRecord:
        await self._require_teacher(teacher_id, active_only=True)
        policy = await self._repo.get_policy()
        day, time_out = self._now(policy)

        current = await self.lookup(teacher_id, day)
        if isinstance(current, NotMarked) or not current.time_in:
            raise NotCheckedIn()
        if current.time_out:
            raise AlreadyCheckedOut()
        _validate_times(current.time_in, time_out)

        metrics = calculate_metrics(current.time_in, time_out, policy)
        record = await self._repo.upsert_record(
            teacher_id,
            day,
            {
                "time_out": time_out,
                "late_minutes": metrics.late_minutes,
                "early_minutes": metrics.early_minutes,
                "total_minutes": metrics.total_minutes,
            },
        )
        logger.info(
            "Check-out teacher %d on %s at %s (%s min worked)",
            teacher_id, day, time_out, metrics.total_minutes,
        )
        return record

    # ── Admin ──────────────────────────────────────────────────────
    async def mark(
        self,
        teacher_id: int,
        date: str,
        status: str,
        time_in: str | None = None,
        time_out: str | None = None,
        notes: str | None = None,
    ) -> AttendanceRecord:
        """Create or overwrite the day's record; no reason is required."""
        validate_date(date)
        validate_status(status)
        time_in, time_out = _validate_times(time_in, time_out)
        await self._require_teacher(teacher_id, active_only=False)

        policy = await self._repo.get_policy()
        record = await self._repo.upsert_record(
            teacher_id, date, self._fields(status, time_in, time_out, notes, policy)
        )
        logger.info("Marked teacher %d %s on %s", teacher_id, status, date)
        return record

    async def edit(
        self,
        record_id: int,
        *,
        status: str,
        edit_reason: str,
        editor_id: int | None,
        time_in: str | None = None,
        time_out: str | None = None,
        notes: str | None = None,
    ) -> AttendanceRecord:
        """Amend an existing record, stamping who changed it and why."""
        reason = (edit_reason or "").strip()
        if not reason:
            logger.warning("Rejected edit of record %d without a reason", record_id)
            raise ValidationError("Edit reason is required")
        validate_status(status)
        time_in, time_out = _validate_times(time_in, time_out)

        existing = await self._repo.get_record(record_id)
        if existing is None:
            raise NotFoundError("Record not found")

        policy = await self._repo.get_policy()
        fields = self._fields(status, time_in, time_out, notes, policy)
        fields.update(edited_by=editor_id, edit_reason=reason)
        record = await self._repo.upsert_record(existing.teacher_id, existing.date, fields)
        logger.info(
            "Record %d edited by user %s: %s", record_id, editor_id, reason
        )
        return record

    async def list_records(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        if record_filter.start_date:
            validate_date(record_filter.start_date)
        if record_filter.end_date:
            validate_date(record_filter.end_date)
        if (
            record_filter.start_date
            and record_filter.end_date
            and record_filter.start_date > record_filter.end_date
        ):
            raise ValidationError("start_date must not be after end_date")
        if record_filter.status:
            validate_status(record_filter.status)
        return await self._repo.list_records(record_filter)

    @staticmethod
    def _fields(
        status: str,
        time_in: str | None,
        time_out: str | None,
        notes: str | None,
        policy: Policy,
    ) -> dict[str, Any]:
        metrics = calculate_metrics(time_in, time_out, policy)
        return {
            "status": status,
            "time_in": time_in,
            "time_out": time_out,
            "late_minutes": metrics.late_minutes,
            "early_minutes": metrics.early_minutes,
            "total_minutes": metrics.total_minutes,
            "notes": notes or None,
        }
