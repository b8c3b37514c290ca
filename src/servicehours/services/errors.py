"""Errors raised by the service layer."""

from __future__ import annotations


class ServiceError(Exception):
    """Base for business rule failures surfaced to the acting user."""

    status_code = 400

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class InvalidRequest(ServiceError):
    status_code = 400


class AuthProviderFailure(ServiceError):
    """Sign-in failed or the bearer token could not be verified."""

    status_code = 401


class AuthDomainRejected(ServiceError):
    """Email is outside the institution domain and not an admin."""

    status_code = 403


class PermissionDenied(ServiceError):
    status_code = 403


class RecordNotFound(ServiceError):
    status_code = 404


class WorkflowViolation(ServiceError):
    """Requested transition is not allowed from the entry's current state."""

    status_code = 409


class WriteFailure(ServiceError):
    """The store rejected a write; nothing was applied."""

    status_code = 503


class OnboardingFailure(WriteFailure):
    """Provisioning the student record for a new identity failed."""
