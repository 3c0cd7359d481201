"""
Attendance endpoints: check-in / check-out, admin mark, audited edit.

Each write maps onto one AttendanceRecordManager operation; domain errors
are translated to HTTP by the global exception handlers.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (get_attendance_manager, get_current_active_user,
                             get_db, require_admin)
from app.models.attendance_record import AttendanceRecord, STATUS_NOT_MARKED
from app.models.teacher import Teacher
from app.models.user import ROLE_ADMIN, User
from app.repositories.attendance import RecordFilter
from app.schemas.attendance import (AttendanceRecordRead, CheckRequest,
                                    DayStatusResponse, EditRequest,
                                    MarkRequest, TodayStatsResponse)
from app.services.attendance import (AttendanceRecordManager, NotMarked,
                                     validate_date)

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


async def _authorize_self_service(db: AsyncSession, user: User, teacher_id: int) -> None:
    """Admins may act for any teacher; teachers only for their own profile."""
    if user.role == ROLE_ADMIN:
        return
    result = await db.execute(select(Teacher.id).where(Teacher.user_id == user.id))
    if result.scalar_one_or_none() != teacher_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teachers can only check in or out for themselves",
        )


# ── Listing ─────────────────────────────────────────────────────────
@router.get("/today", response_model=list[AttendanceRecordRead])
async def attendance_today(
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> list[AttendanceRecord]:
    """Return today's records for all teachers."""
    today = await manager.today()
    return list(await manager.list_records(RecordFilter(start_date=today, end_date=today)))


@router.get("/date/{date_str}", response_model=list[AttendanceRecordRead])
async def attendance_for_date(
    date_str: str,
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> list[AttendanceRecord]:
    validate_date(date_str)
    return list(await manager.list_records(RecordFilter(start_date=date_str, end_date=date_str)))


@router.get("/teacher/{teacher_id}/{date_str}", response_model=DayStatusResponse)
async def teacher_day(
    teacher_id: int,
    date_str: str,
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> DayStatusResponse:
    """A teacher's status for one date, NOT_MARKED when nothing is stored."""
    validate_date(date_str)
    day = await manager.lookup(teacher_id, date_str)
    if isinstance(day, NotMarked):
        return DayStatusResponse(teacher_id=day.teacher_id, date=day.date, status=day.status)
    return DayStatusResponse(
        teacher_id=day.teacher_id,
        date=day.date,
        status=day.status,
        record=AttendanceRecordRead.model_validate(day),
    )


@router.get("/stats/today", response_model=TodayStatsResponse)
async def stats_today(
    db: AsyncSession = Depends(get_db),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> TodayStatsResponse:
    """Per-status counts for today; unmarked active teachers count as NOT_MARKED."""
    today = await manager.today()
    grouped = await db.execute(
        select(AttendanceRecord.status, func.count(AttendanceRecord.id))
        .where(AttendanceRecord.date == today)
        .group_by(AttendanceRecord.status)
    )
    counts = dict(grouped.all())
    total_teachers = await db.execute(
        select(func.count(Teacher.id)).where(Teacher.active.is_(True))
    )
    marked = sum(counts.values())
    counts[STATUS_NOT_MARKED] = counts.get(STATUS_NOT_MARKED, 0) + max(
        0, (total_teachers.scalar() or 0) - marked
    )
    return TodayStatsResponse(**counts)


# ── Self service ────────────────────────────────────────────────────
@router.post("/check-in", response_model=AttendanceRecordRead)
async def check_in(
    body: CheckRequest,
    db: AsyncSession = Depends(get_db),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    user: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    await _authorize_self_service(db, user, body.teacher_id)
    return await manager.check_in(body.teacher_id)


@router.post("/check-out", response_model=AttendanceRecordRead)
async def check_out(
    body: CheckRequest,
    db: AsyncSession = Depends(get_db),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    user: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    await _authorize_self_service(db, user, body.teacher_id)
    return await manager.check_out(body.teacher_id)


# ── Admin ───────────────────────────────────────────────────────────
@router.post("/mark", response_model=AttendanceRecordRead)
async def mark_attendance(
    body: MarkRequest,
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _admin: User = Depends(require_admin),
) -> AttendanceRecord:
    """Create or overwrite a teacher's record for a date."""
    return await manager.mark(
        body.teacher_id,
        body.date,
        body.status,
        time_in=body.time_in,
        time_out=body.time_out,
        notes=body.notes,
    )


@router.put("/{record_id}", response_model=AttendanceRecordRead)
async def edit_attendance(
    record_id: int,
    body: EditRequest,
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    admin: User = Depends(require_admin),
) -> AttendanceRecord:
    """Amend an existing record; an edit reason is mandatory."""
    return await manager.edit(
        record_id,
        status=body.status,
        time_in=body.time_in,
        time_out=body.time_out,
        notes=body.notes,
        edit_reason=body.edit_reason,
        editor_id=admin.id,
    )
