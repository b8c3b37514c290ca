"""Public schema exports."""

from .admin import DiscrepancyRead, ReconciliationReport, RolePolicyRead, StudentDetail
from .preference import PreferenceChangeRead, PreferenceOptions, PreferenceOutcomeRead, PreferenceUpdate
from .service_hour import HoursByStatus, PunishmentCreate, ServiceHourCreate, ServiceHourPage, ServiceHourRead
from .session import DashboardRead, SessionRead
from .student import StudentRead, StudentSummary

__all__ = [
    "DashboardRead",
    "DiscrepancyRead",
    "HoursByStatus",
    "PreferenceChangeRead",
    "PreferenceOptions",
    "PreferenceOutcomeRead",
    "PreferenceUpdate",
    "PunishmentCreate",
    "ReconciliationReport",
    "RolePolicyRead",
    "ServiceHourCreate",
    "ServiceHourPage",
    "ServiceHourRead",
    "SessionRead",
    "StudentDetail",
    "StudentRead",
    "StudentSummary",
]
