"""Schemas for admin-only endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import Role
from .service_hour import ServiceHourRead
from .student import StudentRead


class StudentDetail(BaseModel):
    student: StudentRead
    service_hours: List[ServiceHourRead]


class DiscrepancyRead(BaseModel):
    student_id: str
    email: str
    stored_total: float
    ledger_total: float
    difference: float

    class Config:
        from_attributes = True


class ReconciliationReport(BaseModel):
    checked_at: datetime
    repaired: bool
    discrepancies: List[DiscrepancyRead] = Field(default_factory=list)


class RolePolicyRead(BaseModel):
    email: str
    role: Role
    granted_by: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
