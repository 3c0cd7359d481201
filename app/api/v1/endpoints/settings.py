"""
School settings endpoints: the attendance policy.

Singleton pattern: only one row in school_settings. GET retrieves it,
PUT updates it. If no row exists, one is created with defaults on first use.
Changes apply to future writes only; stored records keep their metrics.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.models.school_settings import SchoolSettings
from app.models.user import User
from app.schemas.settings import SchoolSettingsRead, SchoolSettingsUpdate

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


async def get_or_create_settings(db: AsyncSession) -> SchoolSettings:
    """Fetch the singleton settings row, creating it with defaults if absent."""
    result = await db.execute(select(SchoolSettings).limit(1))
    school_settings = result.scalar_one_or_none()
    if school_settings is None:
        school_settings = SchoolSettings(id=1)
        db.add(school_settings)
        await db.commit()
        await db.refresh(school_settings)
        logger.info("Created default school settings")
    return school_settings


@router.get("/settings", response_model=SchoolSettingsRead)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> SchoolSettings:
    """Get the current attendance policy."""
    return await get_or_create_settings(db)


@router.put("/settings", response_model=SchoolSettingsRead)
async def update_settings(
    body: SchoolSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> SchoolSettings:
    """Update school hours, grace period, half-day threshold, weekend, zone."""
    school_settings = await get_or_create_settings(db)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(school_settings, field, value)

    await db.commit()
    await db.refresh(school_settings)
    logger.info("School settings updated: %s", changes)
    return school_settings
