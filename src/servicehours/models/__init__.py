"""SQLAlchemy models for the service hours tracker."""

from .preference_change import PreferenceChange
from .role_policy import Role, RolePolicy
from .schema_migration import SchemaMigration
from .service_hour import ServiceHour, ServiceHourStatus
from .student import Student

__all__ = [
    "PreferenceChange",
    "Role",
    "RolePolicy",
    "SchemaMigration",
    "ServiceHour",
    "ServiceHourStatus",
    "Student",
]
