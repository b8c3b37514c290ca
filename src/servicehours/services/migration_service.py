"""Versioned one-time data migrations."""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import SchemaMigration, Student
from ..utils.datetime import utcnow

logger = logging.getLogger(__name__)


def _required_hours_baseline(session: Session) -> int:
    """Align every student's required hours with the configured constant."""

    required = get_settings().required_hours
    result = session.execute(
        update(Student)
        .where(Student.required_hours != required)
        .values(required_hours=required, updated_at=utcnow())
    )
    return result.rowcount or 0


MIGRATIONS: List[Tuple[str, Callable[[Session], int]]] = [
    ("0001_required_hours_baseline", _required_hours_baseline),
]


def applied_versions(session: Session) -> set[str]:
    return set(session.execute(select(SchemaMigration.version)).scalars().all())


def run_pending(session: Session) -> List[str]:
    """Apply migrations not yet recorded, in order. Caller commits."""

    done = applied_versions(session)
    ran: List[str] = []
    for version, migrate in MIGRATIONS:
        if version in done:
            continue
        affected = migrate(session)
        session.add(SchemaMigration(version=version, applied_at=utcnow()))
        session.flush()
        logger.info("applied data migration %s (%d rows)", version, affected)
        ran.append(version)
    return ran
