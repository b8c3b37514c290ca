"""Sign-in and sign-out endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Principal, revoke_sessions
from ...schemas import SessionRead
from ...services import identity_service
from ...services.errors import AuthDomainRejected, ServiceError
from ..deps import CurrentUser, commit, get_current_user, get_principal, to_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.post(
    "",
    response_model=SessionRead,
    summary="Start a session",
    responses={
        200: {
            "description": "Principal admitted; student record provisioned on first sign-in",
            "content": {
                "application/json": {
                    "example": {
                        "student": {
                            "student_id": "f3Yk1oQm2bS0aR9",
                            "email": "070bscs001@sxc.edu.np",
                            "display_name": "Aarav Shrestha",
                            "photo_url": None,
                            "class_name": "",
                            "location": "",
                            "roll_number": "070bscs001",
                            "section": None,
                            "total_hours": 0,
                            "required_hours": 50,
                            "remaining_hours": 50,
                            "has_completed_setup": False,
                            "is_admin": False,
                            "created_at": "2025-11-12T10:15:30",
                        },
                        "is_admin": False,
                        "is_first_time": True,
                        "landing_path": "/options",
                    }
                }
            },
        },
        401: {"description": "Missing or invalid identity token"},
        403: {"description": "Email outside the institution domain; provider sessions revoked"},
    },
)
def start_session(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SessionRead:
    """Admit a freshly signed-in principal.

    Call this once after the interactive Google sign-in completes.
    """

    try:
        state = identity_service.start_session(db, principal)
        commit(db)
    except AuthDomainRejected as exc:
        db.rollback()
        try:
            revoke_sessions(principal.uid)
        except Exception:
            logger.exception("could not revoke sessions for rejected uid=%s", principal.uid)
        raise to_http(exc) from exc
    except ServiceError as exc:
        db.rollback()
        raise to_http(exc) from exc

    db.refresh(state.student)
    return SessionRead.model_validate(state)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="End the session")
def end_session(user: CurrentUser = Depends(get_current_user)) -> Response:
    """Revoke the principal's provider sessions."""

    try:
        revoke_sessions(user.uid)
    except Exception as exc:
        logger.exception("sign-out failed for uid=%s", user.uid)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sign out failed.") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
