"""Administrator endpoints: review, punishments, preference queue, upkeep."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...models import ServiceHourStatus
from ...schemas import (
    DiscrepancyRead,
    PreferenceChangeRead,
    PunishmentCreate,
    ReconciliationReport,
    RolePolicyRead,
    ServiceHourPage,
    ServiceHourRead,
    StudentDetail,
    StudentRead,
    StudentSummary,
)
from ...services import (
    approval_service,
    identity_service,
    ledger_service,
    preference_service,
    reconciliation_service,
    student_service,
)
from ...services.errors import ServiceError
from ...utils.datetime import utcnow
from ..deps import CurrentUser, commit, page_size, require_admin, to_http

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/students", response_model=List[StudentSummary], summary="List students")
def list_students(
    search: Optional[str] = Query(None, description="Matches name, roll number, class or email"),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[StudentSummary]:
    """Non-admin students sorted by class, then roll number."""

    return list(student_service.search_students(db, search=search))


@router.get("/students/{student_id}", response_model=StudentDetail, summary="Student with full activity history")
def get_student(
    student_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StudentDetail:
    try:
        student = ledger_service.ensure_student(db, student_id)
    except ServiceError as exc:
        raise to_http(exc) from exc
    entries = ledger_service.all_entries(db, student_id=student_id)
    return StudentDetail(
        student=StudentRead.model_validate(student),
        service_hours=[ServiceHourRead.model_validate(entry) for entry in entries],
    )


@router.get(
    "/students/{student_id}/service-hours",
    response_model=ServiceHourPage,
    summary="Page through a student's activities",
)
def list_student_service_hours(
    student_id: str,
    *,
    status_filter: Optional[ServiceHourStatus] = Query(None, alias="status", description="Only entries in this state"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum items to return"),
    cursor: Optional[str] = Query(None, description="Continuation cursor from the previous page"),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ServiceHourPage:
    try:
        ledger_service.ensure_student(db, student_id)
        page = ledger_service.list_entries(
            db,
            student_id=student_id,
            status=status_filter,
            limit=page_size(limit),
            cursor=cursor,
        )
    except ServiceError as exc:
        raise to_http(exc) from exc
    return ServiceHourPage.model_validate(page)


@router.post(
    "/students/{student_id}/punishments",
    response_model=ServiceHourRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add punishment hours",
    responses={
        201: {
            "description": "Approved punishment entry created and credited",
            "content": {
                "application/json": {
                    "example": {
                        "service_hour_id": "2c9e4d1a7b3f4e8a9c0d5b6a7e8f9a01",
                        "student_id": "f3Yk1oQm2bS0aR9",
                        "title": "Punishment Hours",
                        "description": "late",
                        "hours": 5,
                        "date": "2025-11-12",
                        "status": "approved",
                        "is_punishment": True,
                        "verifier_id": "a8Kd02mZpQ",
                        "verified_at": "2025-11-12T11:00:00",
                        "created_at": "2025-11-12T11:00:00",
                        "updated_at": "2025-11-12T11:00:00",
                    }
                }
            },
        },
        404: {"description": "Student not found"},
    },
)
def add_punishment(
    student_id: str,
    payload: PunishmentCreate,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ServiceHourRead:
    """Issue pre-approved punishment hours.

    Example request body::

        {"hours": 5, "reason": "late"}
    """

    try:
        entry = approval_service.add_punishment(
            db,
            student_id=student_id,
            hours=payload.hours,
            reason=payload.reason,
            issued_by=admin.uid,
        )
        commit(db)
        db.refresh(entry)
        return entry
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.post(
    "/service-hours/{service_hour_id}/approve",
    response_model=ServiceHourRead,
    summary="Approve an activity",
    responses={
        404: {"description": "Entry not found"},
        409: {"description": "Entry was already rejected"},
    },
)
def approve_service_hours(
    service_hour_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ServiceHourRead:
    """Mark a pending entry approved and credit its hours in the same commit.

    Approving an already-approved entry returns it unchanged.
    """

    try:
        entry = approval_service.approve(db, service_hour_id=service_hour_id, verifier_id=admin.uid)
        commit(db)
        db.refresh(entry)
        return entry
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.post(
    "/service-hours/{service_hour_id}/reject",
    response_model=ServiceHourRead,
    summary="Reject an activity",
    responses={
        404: {"description": "Entry not found"},
        409: {"description": "Entry was already approved"},
    },
)
def reject_service_hours(
    service_hour_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ServiceHourRead:
    try:
        entry = approval_service.reject(db, service_hour_id=service_hour_id, verifier_id=admin.uid)
        commit(db)
        db.refresh(entry)
        return entry
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.delete(
    "/service-hours/{service_hour_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an activity",
)
def delete_service_hours(
    service_hour_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Response:
    """Irreversibly remove an entry; approved hours are taken back off the total."""

    try:
        ledger_service.delete_entry(db, service_hour_id=service_hour_id, actor_id=admin.uid)
        commit(db)
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/preference-changes", response_model=List[PreferenceChangeRead], summary="Queued preference changes")
def list_preference_changes(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[PreferenceChangeRead]:
    return list(preference_service.list_pending(db))


@router.post(
    "/preference-changes/{change_id}/approve",
    response_model=StudentRead,
    summary="Apply a preference change",
)
def approve_preference_change(
    change_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StudentRead:
    try:
        student = preference_service.approve_change(db, change_id=change_id, actor_id=admin.uid)
        commit(db)
        db.refresh(student)
        return student
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.post(
    "/preference-changes/{change_id}/reject",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard a preference change",
)
def reject_preference_change(
    change_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Response:
    try:
        preference_service.reject_change(db, change_id=change_id, actor_id=admin.uid)
        commit(db)
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/reconciliation", response_model=ReconciliationReport, summary="Check hour totals against the ledger")
def check_reconciliation(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ReconciliationReport:
    discrepancies = reconciliation_service.find_discrepancies(db)
    return ReconciliationReport(
        checked_at=utcnow(),
        repaired=False,
        discrepancies=[DiscrepancyRead.model_validate(item) for item in discrepancies],
    )


@router.post("/reconciliation/repair", response_model=ReconciliationReport, summary="Rewrite diverged totals")
def repair_reconciliation(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ReconciliationReport:
    try:
        fixed = reconciliation_service.repair(db)
        commit(db)
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc
    return ReconciliationReport(
        checked_at=utcnow(),
        repaired=True,
        discrepancies=[DiscrepancyRead.model_validate(item) for item in fixed],
    )


@router.get("/roles", response_model=List[RolePolicyRead], summary="Role policy table")
def list_roles(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[RolePolicyRead]:
    return list(identity_service.list_role_policies(db))


@router.put("/roles/{email}", response_model=RolePolicyRead, summary="Grant the admin role")
def grant_admin(
    email: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RolePolicyRead:
    try:
        policy = identity_service.grant_admin(db, email=email, granted_by=admin.principal.email)
        commit(db)
        db.refresh(policy)
        return policy
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.delete("/roles/{email}", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke the admin role")
def revoke_admin(
    email: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Response:
    try:
        identity_service.revoke_admin(db, email=email, revoked_by=admin.principal.email)
        commit(db)
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
