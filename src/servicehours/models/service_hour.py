"""Activity ledger entry model."""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class ServiceHourStatus(str, enum.Enum):
    """Approval lifecycle of a ledger entry."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ServiceHour(Base):
    """Logged (or punitive) block of service hours.

    Only ``status`` and the verification/timestamp columns change after insert.
    """

    __tablename__ = "service_hours"
    __table_args__ = (
        CheckConstraint("hours >= 0", name="service_hours_hours_positive"),
        Index("service_hours_student_date_idx", "student_id", "date"),
    )

    service_hour_id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    student_id = Column(String(128), ForeignKey("students.student_id", ondelete="RESTRICT"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    hours = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    status = Column(
        Enum(ServiceHourStatus, name="service_hour_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ServiceHourStatus.PENDING,
    )
    is_punishment = Column(Boolean, nullable=False, default=False)
    verifier_id = Column(String(128))
    verified_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("Student", back_populates="service_hours")
