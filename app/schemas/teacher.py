"""Pydantic schemas for Teacher CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


def _required(v: str, field: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{field} is required")
    if len(v) > 200:
        raise ValueError(f"{field} must not exceed 200 characters")
    return v


class TeacherCreate(BaseModel):
    name: str
    department: str
    subject: str
    photo_url: str | None = None
    user_id: int | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _required(v, "Name")

    @field_validator("department")
    @classmethod
    def _department(cls, v: str) -> str:
        return _required(v, "Department")

    @field_validator("subject")
    @classmethod
    def _subject(cls, v: str) -> str:
        return _required(v, "Subject")


class TeacherUpdate(BaseModel):
    name: str | None = None
    department: str | None = None
    subject: str | None = None
    photo_url: str | None = None
    active: bool | None = None

    @field_validator("name", "department", "subject")
    @classmethod
    def _not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip() if v is not None else v


class TeacherRead(BaseModel):
    id: int
    user_id: int | None
    name: str
    department: str
    subject: str
    photo_url: str | None
    active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}
