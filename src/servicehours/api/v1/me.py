"""Endpoints for the signed-in student's own record and ledger."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.config import get_settings
from ...core.database import get_db
from ...models import ServiceHourStatus
from ...schemas import (
    DashboardRead,
    PreferenceChangeRead,
    PreferenceOptions,
    PreferenceOutcomeRead,
    PreferenceUpdate,
    ServiceHourCreate,
    ServiceHourPage,
    ServiceHourRead,
    StudentRead,
)
from ...services import ledger_service, preference_service, student_service
from ...services.errors import ServiceError
from ..deps import CurrentUser, commit, get_current_user, page_size, to_http

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=StudentRead, summary="Own profile")
def get_profile(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StudentRead:
    try:
        return student_service.get_profile(db, user.uid)
    except ServiceError as exc:
        raise to_http(exc) from exc


@router.get("/dashboard", response_model=DashboardRead, summary="Dashboard snapshot")
def get_dashboard(
    limit: Optional[int] = Query(None, ge=1, description="Entries in the first page"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DashboardRead:
    """Profile, hour totals by status, newest entries and any queued preference change."""

    try:
        dashboard = student_service.get_dashboard(db, student_id=user.uid, page_size=page_size(limit))
    except ServiceError as exc:
        raise to_http(exc) from exc
    return DashboardRead.model_validate(dashboard)


@router.post(
    "/service-hours",
    response_model=ServiceHourRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log an activity",
    responses={
        201: {
            "description": "Entry recorded as pending",
            "content": {
                "application/json": {
                    "example": {
                        "service_hour_id": "9b1f0c3e6f4a4c2a8d6e1b7a5c3d2e10",
                        "student_id": "f3Yk1oQm2bS0aR9",
                        "title": "Blood donation camp",
                        "description": "Registration desk for the Red Cross drive.",
                        "hours": 4,
                        "date": "2025-11-08",
                        "status": "pending",
                        "is_punishment": False,
                        "verifier_id": None,
                        "verified_at": None,
                        "created_at": "2025-11-12T10:15:30",
                        "updated_at": "2025-11-12T10:15:30",
                    }
                }
            },
        },
        404: {"description": "No student record; start a session first"},
    },
)
def submit_service_hours(
    payload: ServiceHourCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ServiceHourRead:
    """Submit an activity for admin review.

    Example request body::

        {
            "title": "Blood donation camp",
            "description": "Registration desk for the Red Cross drive.",
            "hours": 4,
            "date": "2025-11-08"
        }
    """

    try:
        entry = ledger_service.submit_entry(
            db,
            student_id=user.uid,
            title=payload.title,
            description=payload.description,
            hours=payload.hours,
            entry_date=payload.date,
        )
        commit(db)
        db.refresh(entry)
        return entry
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc


@router.get("/service-hours", response_model=ServiceHourPage, summary="List own activities")
def list_service_hours(
    *,
    status_filter: Optional[ServiceHourStatus] = Query(None, alias="status", description="Only entries in this state"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum items to return"),
    cursor: Optional[str] = Query(None, description="Continuation cursor from the previous page"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ServiceHourPage:
    try:
        page = ledger_service.list_entries(
            db,
            student_id=user.uid,
            status=status_filter,
            limit=page_size(limit),
            cursor=cursor,
        )
    except ServiceError as exc:
        raise to_http(exc) from exc
    return ServiceHourPage.model_validate(page)


@router.get("/preferences/options", response_model=PreferenceOptions, summary="Selectable classes and locations")
def preference_options(user: CurrentUser = Depends(get_current_user)) -> PreferenceOptions:
    settings = get_settings()
    return PreferenceOptions(classes=settings.class_options, locations=settings.location_options)


@router.post("/preferences", response_model=PreferenceOutcomeRead, summary="Set or request class/location")
def submit_preferences(
    payload: PreferenceUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PreferenceOutcomeRead:
    """First-time setup applies immediately; later changes wait for an admin."""

    try:
        outcome = preference_service.submit_preferences(
            db,
            student_id=user.uid,
            class_name=payload.class_name,
            location=payload.location,
        )
        commit(db)
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc

    db.refresh(outcome.student)
    if outcome.pending_change is not None:
        db.refresh(outcome.pending_change)
    return PreferenceOutcomeRead.model_validate(outcome)


@router.get(
    "/preferences/pending",
    response_model=Optional[PreferenceChangeRead],
    summary="Own queued preference change",
)
def pending_preference(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Optional[PreferenceChangeRead]:
    return preference_service.pending_for(db, user.uid)
