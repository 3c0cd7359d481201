"""
Teacher CRUD endpoints.

- GET operations require any authenticated user.
- POST / PUT / DELETE operations require admin role.
- DELETE is a soft delete; attendance history is preserved.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.teacher import TeacherCreate, TeacherRead, TeacherUpdate

router = APIRouter(prefix="/teachers", tags=["teachers"])
logger = logging.getLogger(__name__)


async def _get_teacher_or_404(db: AsyncSession, teacher_id: int) -> Teacher:
    result = await db.execute(select(Teacher).where(Teacher.id == teacher_id))
    teacher = result.scalar_one_or_none()
    if teacher is None:
        raise HTTPException(status_code=404, detail="Teacher not found")
    return teacher


@router.get("", response_model=list[TeacherRead])
async def list_teachers(
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    search: str | None = None,
    department: str | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Teacher]:
    query = (
        select(Teacher)
        .where(Teacher.active.is_(True))
        .order_by(Teacher.name)
        .offset(skip)
        .limit(limit)
    )
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe_search = search.replace("%", r"\%").replace("_", r"\_")
        query = query.where(Teacher.name.ilike(f"%{safe_search}%", escape="\\"))
    if department:
        query = query.where(Teacher.department == department)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=TeacherRead, status_code=201)
async def create_teacher(
    body: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Teacher:
    if body.user_id is not None:
        owner = await db.execute(select(User).where(User.id == body.user_id))
        if owner.scalar_one_or_none() is None:
            raise HTTPException(status_code=404, detail="User not found")
        linked = await db.execute(select(Teacher).where(Teacher.user_id == body.user_id))
        if linked.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=400,
                detail="User is already linked to a teacher profile",
            )

    teacher = Teacher(**body.model_dump())
    db.add(teacher)
    await db.commit()
    await db.refresh(teacher)
    logger.info("Created teacher %s (%s / %s)", teacher.name, teacher.department, teacher.subject)
    return teacher


@router.get("/{teacher_id}", response_model=TeacherRead)
async def get_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Teacher:
    return await _get_teacher_or_404(db, teacher_id)


@router.put("/{teacher_id}", response_model=TeacherRead)
async def update_teacher(
    teacher_id: int,
    body: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Teacher:
    teacher = await _get_teacher_or_404(db, teacher_id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(teacher, field, value)

    # Keep the linked login account in step with the profile
    if teacher.user_id is not None and ("name" in changes or "active" in changes):
        result = await db.execute(select(User).where(User.id == teacher.user_id))
        account = result.scalar_one_or_none()
        if account is not None:
            if "name" in changes:
                account.name = teacher.name
            if "active" in changes:
                account.is_active = teacher.active

    await db.commit()
    await db.refresh(teacher)
    logger.info("Updated teacher %d", teacher_id)
    return teacher


@router.delete("/{teacher_id}", response_model=DeleteResponse)
async def delete_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Soft-delete (deactivate) a teacher. Attendance history is preserved."""
    teacher = await _get_teacher_or_404(db, teacher_id)

    teacher.active = False
    if teacher.user_id is not None:
        result = await db.execute(select(User).where(User.id == teacher.user_id))
        account = result.scalar_one_or_none()
        if account is not None:
            account.is_active = False

    await db.commit()
    logger.info("Soft-deleted teacher %d (%s)", teacher_id, teacher.name)
    return DeleteResponse(success=True, message=f"Teacher '{teacher.name}' deactivated")
