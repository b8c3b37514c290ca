"""Pydantic schemas for class/location preferences."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .student import StudentRead


class PreferenceOptions(BaseModel):
    classes: List[str]
    locations: List[str]


class PreferenceUpdate(BaseModel):
    """Class and location chosen by a student."""

    class_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)


class PreferenceChangeRead(BaseModel):
    """Queued change awaiting an admin decision."""

    change_id: str
    student_id: str
    student_name: str
    student_email: str
    current_class: str
    current_location: str
    requested_class: str
    requested_location: str
    created_at: datetime

    class Config:
        from_attributes = True


class PreferenceOutcomeRead(BaseModel):
    """``applied`` is true when setup was completed directly."""

    applied: bool
    student: StudentRead
    pending_change: Optional[PreferenceChangeRead] = None

    class Config:
        from_attributes = True
