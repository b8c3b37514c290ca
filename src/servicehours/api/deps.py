"""Request dependencies: authentication, role gating and commits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.database import get_db
from ..core.security import Principal, TokenVerificationError, verify_token
from ..models import Role
from ..services import identity_service
from ..services.errors import AuthDomainRejected, AuthProviderFailure, ServiceError, WriteFailure

logger = logging.getLogger(__name__)

security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Principal admitted by the identity gate, with its role for this request."""

    principal: Principal
    role: Role

    @property
    def uid(self) -> str:
        return self.principal.uid

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def to_http(exc: ServiceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def page_size(limit: Optional[int]) -> int:
    settings = get_settings()
    if limit is None:
        return settings.default_page_size
    return min(limit, settings.max_page_size)


def commit(db: Session) -> None:
    """Commit the request's unit of work or raise ``WriteFailure``."""

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("commit failed")
        raise WriteFailure("Could not save your changes. Please try again.") from exc


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Principal:
    """Verify the bearer token with the identity provider."""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return verify_token(credentials.credentials)
    except TokenVerificationError as exc:
        failure = AuthProviderFailure(str(exc))
        raise HTTPException(
            status_code=failure.status_code,
            detail=failure.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_user(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Apply the domain rule and resolve the role fresh for this request."""

    try:
        role = identity_service.ensure_allowed(db, principal)
    except AuthDomainRejected as exc:
        raise to_http(exc) from exc
    return CurrentUser(principal=principal, role=role)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required.")
    return user
