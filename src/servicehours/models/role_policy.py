"""Identity to role policy table."""

import enum

from sqlalchemy import Column, DateTime, Enum, String

from ..core.database import Base
from ..utils.datetime import utcnow


class Role(str, enum.Enum):
    """Roles a principal can hold."""

    STUDENT = "student"
    ADMIN = "admin"


class RolePolicy(Base):
    """Maps an email identity to a role. Absent rows mean ``student``."""

    __tablename__ = "role_policies"

    email = Column(String, primary_key=True)
    role = Column(Enum(Role, name="role", values_callable=lambda e: [m.value for m in e]), nullable=False)
    granted_by = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)
