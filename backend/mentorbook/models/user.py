# backend/mentorbook/models/user.py
"""
Account and profile records the scheduling engine reads.

Profile CRUD lives elsewhere; the scheduling core only needs identity,
email (for notifications) and the mentor's timezone.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from ..core.enums import RoleName
from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    email = Column(String(255), nullable=True, unique=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    tutor_profile = relationship("TutorProfile", back_populates="user", uselist=False)
    student_profile = relationship("StudentProfile", back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"<User {self.id} role={self.role}>"


class TutorProfile(Base):
    """
    A mentor that can be scheduled.

    ``timezone`` is the single IANA zone all weekly rules are evaluated in;
    NULL means the configured default (UTC).
    """

    __tablename__ = "tutor_profiles"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    timezone = Column(String(64), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("User", back_populates="tutor_profile")
    availability_rules = relationship(
        "WeeklyAvailabilityRule",
        back_populates="tutor",
        cascade="all, delete-orphan",
        order_by="[WeeklyAvailabilityRule.day_of_week, WeeklyAvailabilityRule.start_time]",
    )

    def __repr__(self) -> str:
        return f"<TutorProfile {self.id} tz={self.timezone}>"


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("User", back_populates="student_profile")
