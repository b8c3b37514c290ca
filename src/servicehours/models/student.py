"""Student record model."""

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow

SECTION_BY_DIGIT = {"1": "A", "2": "B", "3": "C", "4": "D", "5": "E", "6": "F"}


class Student(Base):
    """One record per signed-in principal, keyed by the provider uid."""

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("email", name="students_email_unique"),
        CheckConstraint("total_hours >= 0", name="students_total_hours_positive"),
        CheckConstraint("required_hours >= 0", name="students_required_hours_positive"),
    )

    student_id = Column(String(128), primary_key=True)
    email = Column(String, nullable=False)
    display_name = Column(String, nullable=False, default="")
    photo_url = Column(String)
    class_name = Column("class", String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    roll_number = Column(String, nullable=False, default="")
    total_hours = Column(Float, nullable=False, default=0)
    required_hours = Column(Float, nullable=False)
    has_completed_setup = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    service_hours = relationship("ServiceHour", back_populates="student")
    preference_change = relationship("PreferenceChange", back_populates="student", uselist=False)

    @property
    def remaining_hours(self) -> float:
        return max(0.0, (self.required_hours or 0) - (self.total_hours or 0))

    @property
    def section(self) -> Optional[str]:
        """Section letter encoded in the fifth character of the email address."""

        if not self.email or len(self.email) < 5:
            return None
        return SECTION_BY_DIGIT.get(self.email[4])
