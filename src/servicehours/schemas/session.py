"""Session and dashboard response schemas."""

from typing import Optional

from pydantic import BaseModel

from .preference import PreferenceChangeRead
from .service_hour import HoursByStatus, ServiceHourPage
from .student import StudentRead


class SessionRead(BaseModel):
    """Returned after the identity gate admits a principal."""

    student: StudentRead
    is_admin: bool
    is_first_time: bool
    landing_path: str

    class Config:
        from_attributes = True


class DashboardRead(BaseModel):
    student: StudentRead
    hours_by_status: HoursByStatus
    recent: ServiceHourPage
    pending_change: Optional[PreferenceChangeRead] = None

    class Config:
        from_attributes = True
