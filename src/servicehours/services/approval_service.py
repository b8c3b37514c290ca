"""Approval workflow for ledger entries and admin-issued punishment hours.

Each transition changes the entry and the owning student's ``total_hours`` in
the same session, so the caller's single commit applies both or neither. The
entry row is locked first, then the student row, and both are re-read under
the lock.

State machine::

    pending --approve--> approved
    pending --reject---> rejected

``approved`` and ``rejected`` are terminal. Repeating the transition that
produced the current state is a no-op; crossing between terminal states is a
``WorkflowViolation``.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..models import ServiceHour, ServiceHourStatus
from ..utils.datetime import utc_today, utcnow
from .errors import InvalidRequest, WorkflowViolation
from .ledger_service import ensure_entry, ensure_student

logger = logging.getLogger(__name__)

PUNISHMENT_TITLE = "Punishment Hours"


def _transition(
    session: Session,
    *,
    service_hour_id: str,
    target: ServiceHourStatus,
    verifier_id: str,
) -> ServiceHour:
    entry = ensure_entry(session, service_hour_id, for_update=True)

    if entry.status is target:
        logger.info("entry %s already %s; nothing to do", entry.service_hour_id, target.value)
        return entry
    if entry.status is not ServiceHourStatus.PENDING:
        raise WorkflowViolation(
            f"Entry {entry.service_hour_id} is already {entry.status.value} and cannot be {target.value}."
        )

    now = utcnow()
    entry.status = target
    entry.verifier_id = verifier_id
    entry.verified_at = now
    entry.updated_at = now

    if target is ServiceHourStatus.APPROVED:
        student = ensure_student(session, entry.student_id, for_update=True)
        student.total_hours = student.total_hours + entry.hours
        student.updated_at = now

    session.flush()
    logger.info(
        "entry %s %s by %s (%s hours, student %s)",
        entry.service_hour_id,
        target.value,
        verifier_id,
        entry.hours,
        entry.student_id,
    )
    return entry


def approve(session: Session, *, service_hour_id: str, verifier_id: str) -> ServiceHour:
    """Approve a pending entry and credit its hours to the student."""

    return _transition(
        session,
        service_hour_id=service_hour_id,
        target=ServiceHourStatus.APPROVED,
        verifier_id=verifier_id,
    )


def reject(session: Session, *, service_hour_id: str, verifier_id: str) -> ServiceHour:
    """Reject a pending entry. Totals are untouched."""

    return _transition(
        session,
        service_hour_id=service_hour_id,
        target=ServiceHourStatus.REJECTED,
        verifier_id=verifier_id,
    )


def add_punishment(
    session: Session,
    *,
    student_id: str,
    hours: float,
    reason: str,
    issued_by: str,
) -> ServiceHour:
    """Create a pre-approved punishment entry and credit it immediately."""

    if hours <= 0:
        raise InvalidRequest("Punishment hours must be greater than zero.")
    if not reason.strip():
        raise InvalidRequest("A reason is required for punishment hours.")

    student = ensure_student(session, student_id, for_update=True)
    now = utcnow()
    entry = ServiceHour(
        student=student,
        title=PUNISHMENT_TITLE,
        description=reason.strip(),
        hours=hours,
        date=utc_today(),
        status=ServiceHourStatus.APPROVED,
        is_punishment=True,
        verifier_id=issued_by,
        verified_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(entry)
    student.total_hours = student.total_hours + hours
    student.updated_at = now
    session.flush()
    logger.info("admin %s added %s punishment hours to student %s", issued_by, hours, student_id)
    return entry
