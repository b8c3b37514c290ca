"""Identity gate: domain policy, role resolution and onboarding."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.security import Principal
from ..models import Role, RolePolicy, Student
from ..utils.datetime import utcnow
from .errors import AuthDomainRejected, InvalidRequest, OnboardingFailure, RecordNotFound

logger = logging.getLogger(__name__)

ADMIN_PLACEHOLDER = "ADMIN"


@dataclass
class SessionState:
    """What the client needs to know right after sign-in."""

    student: Student
    is_admin: bool
    is_first_time: bool
    landing_path: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_institution_email(email: str) -> bool:
    domain = get_settings().allowed_email_domain.lower()
    return normalize_email(email).endswith(f"@{domain}")


def resolve_role(session: Session, email: str) -> Role:
    """Look up the role for ``email`` in the policy table."""

    stmt = select(RolePolicy.role).where(RolePolicy.email == normalize_email(email))
    role = session.execute(stmt).scalar_one_or_none()
    return role or Role.STUDENT


def ensure_allowed(session: Session, principal: Principal) -> Role:
    """Apply the domain rule; admins bypass it. Returns the principal's role."""

    role = resolve_role(session, principal.email)
    if role is Role.ADMIN or is_institution_email(principal.email):
        return role
    logger.warning("rejected sign-in outside allowed domain: %s", principal.email)
    raise AuthDomainRejected(
        f"Please sign in with your @{get_settings().allowed_email_domain} email address."
    )


def roll_number_for(email: str) -> str:
    return normalize_email(email).split("@")[0]


def get_student(session: Session, student_id: str) -> Student | None:
    stmt = select(Student).where(Student.student_id == student_id)
    return session.execute(stmt).scalar_one_or_none()


def provision_student(session: Session, principal: Principal, *, is_admin: bool) -> Student:
    """Create the default record for a first-time identity.

    A concurrent first sign-in for the same uid loses the insert race and
    re-reads the winner's row. The record is flushed, not committed; the
    caller commits. A losing insert rolls back the session before the re-read.
    """

    settings = get_settings()
    now = utcnow()
    student = Student(
        student_id=principal.uid,
        email=normalize_email(principal.email),
        display_name=principal.display_name or roll_number_for(principal.email),
        photo_url=principal.photo_url,
        class_name=ADMIN_PLACEHOLDER if is_admin else "",
        location="",
        roll_number=ADMIN_PLACEHOLDER if is_admin else roll_number_for(principal.email),
        total_hours=0,
        required_hours=settings.required_hours,
        has_completed_setup=False,
        is_admin=is_admin,
        created_at=now,
        updated_at=now,
    )
    session.add(student)
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        existing = get_student(session, principal.uid)
        if existing is None:
            logger.error("could not provision student record for %s", principal.email)
            raise OnboardingFailure("Could not create your student record. Please try again.") from exc
        return existing
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("student provisioning failed for %s", principal.email)
        raise OnboardingFailure("Could not create your student record. Please try again.") from exc

    logger.info("provisioned student record uid=%s email=%s admin=%s", student.student_id, student.email, is_admin)
    return student


def landing_path(*, is_admin: bool, is_first_time: bool) -> str:
    if is_admin:
        return "/admin"
    if is_first_time:
        return "/options"
    return "/dashboard"


def start_session(session: Session, principal: Principal) -> SessionState:
    """Gate the principal, provision on first sight, and describe the session."""

    role = ensure_allowed(session, principal)
    is_admin = role is Role.ADMIN

    student = get_student(session, principal.uid)
    if student is None:
        student = provision_student(session, principal, is_admin=is_admin)
    elif student.is_admin != is_admin:
        student.is_admin = is_admin
        student.updated_at = utcnow()
        session.flush()

    is_first_time = not student.has_completed_setup
    return SessionState(
        student=student,
        is_admin=is_admin,
        is_first_time=is_first_time,
        landing_path=landing_path(is_admin=is_admin, is_first_time=is_first_time),
    )


def list_role_policies(session: Session) -> Sequence[RolePolicy]:
    stmt = select(RolePolicy).order_by(RolePolicy.email.asc())
    return session.execute(stmt).scalars().all()


def _sync_admin_flag(session: Session, email: str, is_admin: bool) -> None:
    stmt = select(Student).where(Student.email == email)
    student = session.execute(stmt).scalar_one_or_none()
    if student is not None and student.is_admin != is_admin:
        student.is_admin = is_admin
        student.updated_at = utcnow()


def grant_admin(session: Session, *, email: str, granted_by: str | None = None) -> RolePolicy:
    """Give ``email`` the admin role. Idempotent."""

    email = normalize_email(email)
    if "@" not in email:
        raise InvalidRequest("A full email address is required.")

    policy = session.get(RolePolicy, email)
    if policy is None:
        policy = RolePolicy(email=email, role=Role.ADMIN, granted_by=granted_by)
        session.add(policy)
    else:
        policy.role = Role.ADMIN
    _sync_admin_flag(session, email, True)
    session.flush()
    logger.info("admin role granted to %s by %s", email, granted_by)
    return policy


def revoke_admin(session: Session, *, email: str, revoked_by: str) -> None:
    """Remove the admin role from ``email``."""

    email = normalize_email(email)
    if email == normalize_email(revoked_by):
        raise InvalidRequest("Admins cannot revoke their own role.")

    policy = session.get(RolePolicy, email)
    if policy is None or policy.role is not Role.ADMIN:
        raise RecordNotFound(f"No admin role recorded for {email}")
    session.delete(policy)
    _sync_admin_flag(session, email, False)
    session.flush()
    logger.info("admin role revoked from %s by %s", email, revoked_by)


def seed_role_policies(session: Session, emails: Sequence[str]) -> int:
    """Insert admin rows for configured bootstrap emails that lack one."""

    added = 0
    for email in emails:
        email = normalize_email(email)
        if session.get(RolePolicy, email) is None:
            session.add(RolePolicy(email=email, role=Role.ADMIN, granted_by="settings"))
            added += 1
    session.flush()
    return added
