"""Activity ledger: submission, paged listing and admin deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from ..models import ServiceHour, ServiceHourStatus, Student
from ..utils.cursor import InvalidCursor, decode_cursor, encode_cursor
from ..utils.datetime import utcnow
from .errors import InvalidRequest, RecordNotFound

logger = logging.getLogger(__name__)


@dataclass
class LedgerPage:
    items: Sequence[ServiceHour]
    next_cursor: Optional[str]
    has_more: bool


def ensure_student(session: Session, student_id: str, *, for_update: bool = False) -> Student:
    """Load a student record.

    With ``for_update`` the row is locked and re-read from the database, so a
    ``total_hours`` read-modify-write sees the latest committed value even when
    the record is already in the session.
    """

    stmt = select(Student).where(Student.student_id == student_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    student = session.execute(stmt).scalar_one_or_none()
    if student is None:
        logger.error("student record %s not found", student_id)
        raise RecordNotFound(f"Student {student_id} not found")
    return student


def ensure_entry(session: Session, service_hour_id: str, *, for_update: bool = False) -> ServiceHour:
    stmt = select(ServiceHour).where(ServiceHour.service_hour_id == service_hour_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    entry = session.execute(stmt).scalar_one_or_none()
    if entry is None:
        logger.error("service hour entry %s not found", service_hour_id)
        raise RecordNotFound(f"Service hour entry {service_hour_id} not found")
    return entry


def submit_entry(
    session: Session,
    *,
    student_id: str,
    title: str,
    description: str,
    hours: float,
    entry_date: date,
) -> ServiceHour:
    """Record a self-reported activity. Always pending, never a punishment."""

    student = ensure_student(session, student_id)

    if hours < 0:
        raise InvalidRequest("Hours must not be negative.")
    if not title.strip() or not description.strip():
        raise InvalidRequest("Title and description are required.")

    now = utcnow()
    entry = ServiceHour(
        student=student,
        title=title.strip(),
        description=description.strip(),
        hours=hours,
        date=entry_date,
        status=ServiceHourStatus.PENDING,
        is_punishment=False,
        created_at=now,
        updated_at=now,
    )
    session.add(entry)
    session.flush()
    logger.info("student %s submitted %s hours (%s)", student_id, hours, entry.service_hour_id)
    return entry


def list_entries(
    session: Session,
    *,
    student_id: str,
    status: Optional[ServiceHourStatus] = None,
    limit: int = 10,
    cursor: Optional[str] = None,
) -> LedgerPage:
    """Return one page of a student's entries, newest activity date first."""

    stmt = (
        select(ServiceHour)
        .where(ServiceHour.student_id == student_id)
        .order_by(ServiceHour.date.desc(), ServiceHour.service_hour_id.desc())
    )
    if status is not None:
        stmt = stmt.where(ServiceHour.status == status)

    if cursor:
        try:
            after_date, after_id = decode_cursor(cursor)
        except InvalidCursor as exc:
            raise InvalidRequest(str(exc)) from exc
        stmt = stmt.where(
            or_(
                ServiceHour.date < after_date,
                and_(ServiceHour.date == after_date, ServiceHour.service_hour_id < after_id),
            )
        )

    # One extra row tells us whether another page exists.
    rows = session.execute(stmt.limit(limit + 1)).scalars().all()
    has_more = len(rows) > limit
    items = rows[:limit]
    next_cursor = None
    if has_more and items:
        last = items[-1]
        next_cursor = encode_cursor(last.date, last.service_hour_id)
    return LedgerPage(items=items, next_cursor=next_cursor, has_more=has_more)


def all_entries(session: Session, *, student_id: str) -> Sequence[ServiceHour]:
    """Every entry for a student, for one-shot admin reads."""

    stmt = (
        select(ServiceHour)
        .where(ServiceHour.student_id == student_id)
        .order_by(ServiceHour.date.desc(), ServiceHour.created_at.desc())
    )
    return session.execute(stmt).scalars().all()


def hours_by_status(session: Session, *, student_id: str) -> Dict[str, float]:
    """Sum hours per status for a student."""

    totals = {status.value: 0.0 for status in ServiceHourStatus}
    stmt = (
        select(ServiceHour.status, func.coalesce(func.sum(ServiceHour.hours), 0))
        .where(ServiceHour.student_id == student_id)
        .group_by(ServiceHour.status)
    )
    for status, hours in session.execute(stmt).all():
        totals[status.value] = float(hours)
    return totals


def delete_entry(session: Session, *, service_hour_id: str, actor_id: str) -> ServiceHour:
    """Remove an entry, reversing any hour credit it carried.

    The reversal and the delete are flushed together and commit as one unit.
    """

    entry = ensure_entry(session, service_hour_id, for_update=True)

    if entry.status is ServiceHourStatus.APPROVED:
        student = ensure_student(session, entry.student_id, for_update=True)
        before = student.total_hours
        student.total_hours = max(0.0, before - entry.hours)
        student.updated_at = utcnow()
        logger.info(
            "reversed %s hours for student %s on delete of %s (%s -> %s)",
            entry.hours,
            student.student_id,
            entry.service_hour_id,
            before,
            student.total_hours,
        )

    session.delete(entry)
    session.flush()
    logger.info("admin %s deleted service hour entry %s", actor_id, service_hour_id)
    return entry
