"""Service layer exports."""

from . import (
    approval_service,
    identity_service,
    ledger_service,
    migration_service,
    preference_service,
    reconciliation_service,
    student_service,
)

__all__ = [
    "approval_service",
    "identity_service",
    "ledger_service",
    "migration_service",
    "preference_service",
    "reconciliation_service",
    "student_service",
]
