"""Detect and repair drift between stored hour totals and the ledger."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import ServiceHour, ServiceHourStatus, Student
from ..utils.datetime import utcnow

logger = logging.getLogger(__name__)

TOLERANCE = 1e-6


@dataclass
class HourDiscrepancy:
    student_id: str
    email: str
    stored_total: float
    ledger_total: float

    @property
    def difference(self) -> float:
        return self.stored_total - self.ledger_total


def ledger_totals(session: Session) -> Dict[str, float]:
    """Approved hours per student, punishment entries included."""

    stmt = (
        select(ServiceHour.student_id, func.coalesce(func.sum(ServiceHour.hours), 0))
        .where(ServiceHour.status == ServiceHourStatus.APPROVED)
        .group_by(ServiceHour.student_id)
    )
    return {student_id: float(total) for student_id, total in session.execute(stmt).all()}


def find_discrepancies(session: Session) -> List[HourDiscrepancy]:
    """Compare every student's ``total_hours`` with the recomputed sum."""

    totals = ledger_totals(session)
    discrepancies: List[HourDiscrepancy] = []
    for student in session.execute(select(Student).order_by(Student.student_id)).scalars():
        expected = totals.get(student.student_id, 0.0)
        if not math.isclose(student.total_hours, expected, abs_tol=TOLERANCE):
            discrepancies.append(
                HourDiscrepancy(
                    student_id=student.student_id,
                    email=student.email,
                    stored_total=student.total_hours,
                    ledger_total=expected,
                )
            )
    for item in discrepancies:
        logger.warning(
            "hour total drift for %s: stored=%s ledger=%s", item.student_id, item.stored_total, item.ledger_total
        )
    return discrepancies


def repair(session: Session) -> List[HourDiscrepancy]:
    """Rewrite diverged totals from the ledger. Returns what was fixed."""

    discrepancies = find_discrepancies(session)
    now = utcnow()
    for item in discrepancies:
        student = session.get(Student, item.student_id)
        student.total_hours = item.ledger_total
        student.updated_at = now
    session.flush()
    if discrepancies:
        logger.info("repaired hour totals for %d students", len(discrepancies))
    return discrepancies
