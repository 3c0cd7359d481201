"""
Auth endpoints: PIN login, token refresh, logout, profile, PIN change.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import (APIRouter, Cookie, Depends, HTTPException, Request,
                     Response, status)
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.core.config import settings
from app.core.security import (create_access_token, create_refresh_token,
                               decode_refresh_token, get_pin_hash, verify_pin)
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.attendance import MessageResponse
from app.schemas.token import RefreshRequest, Token
from app.schemas.user import ChangePinRequest, LoginRequest, UserCreate, UserRead

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_auth_cookies(
    response: Response, access_token: str, refresh_token: str, access_max_age: int
) -> None:
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=access_max_age,
    )
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


async def _user_read(db: AsyncSession, user: User) -> UserRead:
    result = await db.execute(select(Teacher.id).where(Teacher.user_id == user.id))
    profile = UserRead.model_validate(user)
    profile.teacher_id = result.scalar_one_or_none()
    return profile


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Authenticate with phone/email + PIN. Also sets HttpOnly cookies."""
    result = await db.execute(select(User).where(User.phone_or_email == body.phone_or_email))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active or not verify_pin(body.pin, user.pin_hash):
        logger.warning("Failed login for %s", body.phone_or_email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    lifetime = (
        timedelta(days=settings.REMEMBER_DEVICE_EXPIRE_DAYS)
        if body.remember_device
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    access_token = create_access_token(user.id, role=user.role, expires_delta=lifetime)
    refresh_token = create_refresh_token(user.id)
    _set_auth_cookies(response, access_token, refresh_token, int(lifetime.total_seconds()))

    return Token(access_token=access_token, refresh_token=refresh_token)


@router.post("/refresh", response_model=Token)
@limiter.limit("10/minute")
async def refresh_access_token_endpoint(
    request: Request,
    response: Response,
    body: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(None, alias="refresh_token"),
    db: AsyncSession = Depends(get_db),
) -> Token:
    # Priority: Body > Cookie
    token_str = None
    if body and body.refresh_token:
        token_str = body.refresh_token
    elif refresh_token_cookie:
        token_str = refresh_token_cookie

    if not token_str:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
        )

    payload = decode_refresh_token(token_str)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    result = await db.execute(select(User).where(User.id == int(payload.get("sub"))))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    new_access = create_access_token(user.id, role=user.role)
    new_refresh = create_refresh_token(user.id)
    _set_auth_cookies(
        response, new_access, new_refresh, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )
    return Token(access_token=new_access, refresh_token=new_refresh)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear auth cookies and end the session."""
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
async def read_current_user(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UserRead:
    """Return profile of the currently authenticated user."""
    return await _user_read(db, current_user)


@router.post("/change-pin", response_model=MessageResponse)
async def change_pin(
    body: ChangePinRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    result = await db.execute(select(User).where(User.id == current_user.id))
    user = result.scalar_one_or_none()
    if user is None or not verify_pin(body.old_pin, user.pin_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid old PIN")

    user.pin_hash = get_pin_hash(body.new_pin)
    await db.commit()
    logger.info("PIN changed for user %d", user.id)
    return MessageResponse(message="PIN changed successfully")


# ── User management (admin-only) ───────────────────────────────────
@router.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserRead:
    """Create a login account (admin only); link it via the teacher profile."""
    existing = await db.execute(select(User).where(User.phone_or_email == body.phone_or_email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Phone or email already registered")

    user = User(
        name=body.name,
        phone_or_email=body.phone_or_email,
        pin_hash=get_pin_hash(body.pin),
        role=body.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created %s user %s", user.role, user.phone_or_email)
    return await _user_read(db, user)
