"""Pydantic schemas for users, login and PIN changes."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.user import ROLE_ADMIN, ROLE_TEACHER

_VALID_ROLES = {ROLE_ADMIN, ROLE_TEACHER}
_PIN_RE = re.compile(r"^\d{4,6}$")


def _check_pin(v: str) -> str:
    if not _PIN_RE.match(v):
        raise ValueError("PIN must be 4-6 digits")
    return v


class LoginRequest(BaseModel):
    phone_or_email: str
    pin: str
    remember_device: bool = False

    @field_validator("phone_or_email")
    @classmethod
    def _normalise(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Phone or email is required")
        return v

    @field_validator("pin")
    @classmethod
    def _pin(cls, v: str) -> str:
        return _check_pin(v)


class ChangePinRequest(BaseModel):
    old_pin: str
    new_pin: str

    @field_validator("new_pin")
    @classmethod
    def _pin(cls, v: str) -> str:
        return _check_pin(v)


class UserCreate(BaseModel):
    name: str
    phone_or_email: str
    pin: str
    role: str = ROLE_TEACHER

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _VALID_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_VALID_ROLES)}")
        return v

    @field_validator("phone_or_email")
    @classmethod
    def _normalise(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Phone or email is required")
        return v

    @field_validator("pin")
    @classmethod
    def _pin(cls, v: str) -> str:
        return _check_pin(v)


class UserRead(BaseModel):
    id: int
    name: str
    phone_or_email: str
    role: str
    is_active: bool
    created_at: datetime | None
    teacher_id: int | None = None

    model_config = {"from_attributes": True}
