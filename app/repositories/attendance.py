"""
Persistence for attendance records, teachers and the school policy.

``AttendanceRepository`` is the contract the record manager depends on;
``SqlAttendanceRepository`` implements it on an async SQLAlchemy session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, joinedload

from app.core.exceptions import NotFoundError
from app.models.attendance_record import AttendanceRecord
from app.models.school_settings import SchoolSettings
from app.models.teacher import Teacher
from app.services.metrics import Policy

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class RecordFilter:
    start_date: str | None = None
    end_date: str | None = None
    teacher_id: int | None = None
    status: str | None = None
    department: str | None = None


def policy_from_settings(row: SchoolSettings | None) -> Policy:
    """Freeze a settings row into the immutable policy value."""
    if row is None:
        return Policy()
    weekend = tuple(d.strip() for d in (row.weekend_days or "").split(",") if d.strip())
    return Policy(
        start_time=row.start_time,
        end_time=row.end_time,
        grace_minutes=row.grace_minutes,
        half_day_minutes=row.half_day_minutes,
        weekend_days=weekend,
        timezone=row.timezone,
    )


class AttendanceRepository(Protocol):
    async def get_policy(self) -> Policy:
        raise NotImplementedError

    async def get_teacher(self, teacher_id: int) -> Teacher | None:
        raise NotImplementedError

    async def find_record(self, teacher_id: int, date: str) -> AttendanceRecord | None:
        raise NotImplementedError

    async def get_record(self, record_id: int) -> AttendanceRecord | None:
        raise NotImplementedError

    async def upsert_record(
        self, teacher_id: int, date: str, fields: dict[str, Any]
    ) -> AttendanceRecord:
        """Atomically create or update the single row keyed by (teacher_id, date)."""
        raise NotImplementedError

    async def list_records(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class SqlAttendanceRepository(AttendanceRepository):
    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_policy(self) -> Policy:
        result = await self._db.execute(select(SchoolSettings).limit(1))
        return policy_from_settings(result.scalar_one_or_none())

    async def get_teacher(self, teacher_id: int) -> Teacher | None:
        result = await self._db.execute(select(Teacher).where(Teacher.id == teacher_id))
        return result.scalar_one_or_none()

    async def find_record(self, teacher_id: int, date: str) -> AttendanceRecord | None:
        result = await self._db.execute(
            select(AttendanceRecord)
            .options(joinedload(AttendanceRecord.teacher))
            .where(AttendanceRecord.teacher_id == teacher_id, AttendanceRecord.date == date)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_record(self, record_id: int) -> AttendanceRecord | None:
        result = await self._db.execute(
            select(AttendanceRecord)
            .options(joinedload(AttendanceRecord.teacher))
            .where(AttendanceRecord.id == record_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_record(
        self, teacher_id: int, date: str, fields: dict[str, Any]
    ) -> AttendanceRecord:
        dialect = self._db.bind.dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Upsert is not supported on dialect {dialect!r}")

        now = datetime.now(timezone.utc)
        changes = {**fields, "updated_at": now}
        stmt = insert(AttendanceRecord).values(
            teacher_id=teacher_id, date=date, created_at=now, **changes
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AttendanceRecord.teacher_id, AttendanceRecord.date],
            set_=changes,
        )
        await self._db.execute(stmt)
        await self._db.commit()

        record = await self.find_record(teacher_id, date)
        if record is None:
            raise NotFoundError("Record not found")
        return record

    async def list_records(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        stmt = (
            select(AttendanceRecord)
            .join(Teacher, AttendanceRecord.teacher_id == Teacher.id)
            .options(contains_eager(AttendanceRecord.teacher))
            .order_by(AttendanceRecord.date.desc(), Teacher.name.asc())
        )
        if record_filter.teacher_id is not None:
            stmt = stmt.where(AttendanceRecord.teacher_id == record_filter.teacher_id)
        if record_filter.status:
            stmt = stmt.where(AttendanceRecord.status == record_filter.status)
        if record_filter.start_date:
            stmt = stmt.where(AttendanceRecord.date >= record_filter.start_date)
        if record_filter.end_date:
            stmt = stmt.where(AttendanceRecord.date <= record_filter.end_date)
        if record_filter.department:
            stmt = stmt.where(
                Teacher.department == record_filter.department,
                Teacher.active.is_(True),
            )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())
