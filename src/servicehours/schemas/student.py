"""Pydantic schemas for student records."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class StudentSummary(BaseModel):
    """Lightweight projection used in admin listings."""

    student_id: str
    display_name: str
    email: str
    class_name: str
    roll_number: str
    total_hours: float

    class Config:
        from_attributes = True


class StudentRead(BaseModel):
    """Full student record as shown on the profile page."""

    student_id: str
    email: str
    display_name: str
    photo_url: Optional[str]
    class_name: str
    location: str
    roll_number: str
    section: Optional[str]
    total_hours: float
    required_hours: float
    remaining_hours: float
    has_completed_setup: bool
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True
