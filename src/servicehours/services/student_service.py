"""Student record read models: profile, dashboard and admin listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from sqlalchemy import false, func, or_, select
from sqlalchemy.orm import Session

from ..models import PreferenceChange, Student
from . import ledger_service, preference_service
from .ledger_service import LedgerPage, ensure_student


@dataclass
class Dashboard:
    student: Student
    hours_by_status: Dict[str, float]
    recent: LedgerPage
    pending_change: Optional[PreferenceChange]


def get_profile(session: Session, student_id: str) -> Student:
    return ensure_student(session, student_id)


def get_dashboard(session: Session, *, student_id: str, page_size: int = 10) -> Dashboard:
    """Snapshot for the student's dashboard view."""

    student = ensure_student(session, student_id)
    return Dashboard(
        student=student,
        hours_by_status=ledger_service.hours_by_status(session, student_id=student_id),
        recent=ledger_service.list_entries(session, student_id=student_id, limit=page_size),
        pending_change=preference_service.pending_for(session, student_id),
    )


def search_students(session: Session, *, search: Optional[str] = None) -> Sequence[Student]:
    """Non-admin students matching ``search``, ordered by class then roll number."""

    stmt = select(Student).where(Student.is_admin == false())
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Student.display_name).like(pattern),
                func.lower(Student.roll_number).like(pattern),
                func.lower(Student.class_name).like(pattern),
                func.lower(Student.email).like(pattern),
            )
        )
    stmt = stmt.order_by(Student.class_name.asc(), Student.roll_number.asc())
    return session.execute(stmt).scalars().all()
