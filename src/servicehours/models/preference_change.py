"""Pending class/location change requests."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class PreferenceChange(Base):
    """Proposed class/location edit awaiting an admin decision.

    Rows are created and deleted, never updated in place.
    """

    __tablename__ = "pending_changes"
    __table_args__ = (
        UniqueConstraint("student_id", name="pending_changes_student_unique"),
    )

    change_id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    student_id = Column(String(128), ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False)
    requested_class = Column(String, nullable=False)
    requested_location = Column(String, nullable=False)
    current_class = Column(String, nullable=False, default="")
    current_location = Column(String, nullable=False, default="")
    student_name = Column(String, nullable=False, default="")
    student_email = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("Student", back_populates="preference_change")
