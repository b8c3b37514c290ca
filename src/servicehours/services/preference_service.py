"""Class/location preferences and the admin change queue."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import PreferenceChange, Student
from ..utils.datetime import utcnow
from .errors import InvalidRequest, RecordNotFound
from .ledger_service import ensure_student

logger = logging.getLogger(__name__)


@dataclass
class PreferenceOutcome:
    """Result of a student's preference submission."""

    student: Student
    applied: bool
    pending_change: Optional[PreferenceChange] = None


def _validate_choice(class_name: str, location: str) -> None:
    settings = get_settings()
    if class_name not in settings.class_options:
        raise InvalidRequest(f"Unknown class '{class_name}'. Choose one of: {', '.join(settings.class_options)}.")
    if location not in settings.location_options:
        raise InvalidRequest(
            f"Unknown location '{location}'. Choose one of: {', '.join(settings.location_options)}."
        )


def pending_for(session: Session, student_id: str) -> Optional[PreferenceChange]:
    stmt = select(PreferenceChange).where(PreferenceChange.student_id == student_id)
    return session.execute(stmt).scalar_one_or_none()


def submit_preferences(
    session: Session,
    *,
    student_id: str,
    class_name: str,
    location: str,
) -> PreferenceOutcome:
    """Apply first-time setup directly; queue later edits for admin review."""

    _validate_choice(class_name, location)
    student = ensure_student(session, student_id)

    if not student.has_completed_setup:
        student.class_name = class_name
        student.location = location
        student.has_completed_setup = True
        student.updated_at = utcnow()
        session.flush()
        logger.info("student %s completed setup (%s, %s)", student_id, class_name, location)
        return PreferenceOutcome(student=student, applied=True)

    if student.class_name == class_name and student.location == location:
        raise InvalidRequest("Requested class and location match your current settings.")

    existing = pending_for(session, student_id)
    if existing is not None:
        session.delete(existing)
        session.flush()
        logger.info("student %s replaced pending preference change %s", student_id, existing.change_id)

    change = PreferenceChange(
        student_id=student.student_id,
        requested_class=class_name,
        requested_location=location,
        current_class=student.class_name,
        current_location=student.location,
        student_name=student.display_name,
        student_email=student.email,
        created_at=utcnow(),
    )
    session.add(change)
    session.flush()
    logger.info(
        "student %s requested preference change %s/%s -> %s/%s",
        student_id,
        change.current_class,
        change.current_location,
        class_name,
        location,
    )
    return PreferenceOutcome(student=student, applied=False, pending_change=change)


def list_pending(session: Session) -> Sequence[PreferenceChange]:
    stmt = select(PreferenceChange).order_by(PreferenceChange.created_at.asc())
    return session.execute(stmt).scalars().all()


def _ensure_change(session: Session, change_id: str) -> PreferenceChange:
    change = session.get(PreferenceChange, change_id)
    if change is None:
        raise RecordNotFound(f"Preference change {change_id} not found")
    return change


def approve_change(session: Session, *, change_id: str, actor_id: str) -> Student:
    """Copy the proposed values onto the student and drop the request."""

    change = _ensure_change(session, change_id)
    student = ensure_student(session, change.student_id)
    student.class_name = change.requested_class
    student.location = change.requested_location
    student.updated_at = utcnow()
    session.delete(change)
    session.flush()
    logger.info("admin %s approved preference change %s for %s", actor_id, change_id, student.student_id)
    return student


def reject_change(session: Session, *, change_id: str, actor_id: str) -> None:
    """Drop the request without touching the student."""

    change = _ensure_change(session, change_id)
    session.delete(change)
    session.flush()
    logger.info("admin %s rejected preference change %s for %s", actor_id, change_id, change.student_id)
