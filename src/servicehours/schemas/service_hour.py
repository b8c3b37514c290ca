"""Pydantic schemas for activity ledger endpoints."""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models import ServiceHourStatus


class ServiceHourCreate(BaseModel):
    """Self-reported activity submitted by a student."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    hours: float = Field(..., ge=0, le=1000, description="Hours spent on the activity.")
    date: dt.date

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ServiceHourRead(BaseModel):
    """Ledger entry payload."""

    service_hour_id: str
    student_id: str
    title: str
    description: str
    hours: float
    date: dt.date
    status: ServiceHourStatus
    is_punishment: bool
    verifier_id: Optional[str]
    verified_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class ServiceHourPage(BaseModel):
    """One page of ledger entries with a continuation cursor."""

    items: List[ServiceHourRead]
    next_cursor: Optional[str] = None
    has_more: bool = False

    class Config:
        from_attributes = True


class PunishmentCreate(BaseModel):
    """Admin-issued punishment hours."""

    hours: float = Field(..., gt=0, le=1000)
    reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class HoursByStatus(BaseModel):
    pending: float = 0
    approved: float = 0
    rejected: float = 0
