# backend/mentorbook/models/availability.py
"""
Availability models.

WeeklyAvailabilityRule stores a mentor's recurring open hours as local
wall-clock ``HH:MM`` strings, evaluated in the mentor's timezone. The full
rule set is replaced on every update.

TutorTimeBlock stores an ad-hoc unavailable interval in absolute time.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class WeeklyAvailabilityRule(Base):
    """
    Recurring open window: ``day_of_week`` (0=Sunday) from ``start_time`` to
    ``end_time`` local time.
    """

    __tablename__ = "weekly_availability_rules"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    tutor_id = Column(
        String(26), ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    tutor = relationship("TutorProfile", back_populates="availability_rules")

    __table_args__ = (
        # Zero-padded HH:MM compares correctly as text
        CheckConstraint("start_time < end_time", name="ck_weekly_rule_time_order"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_weekly_rule_day_range"),
        Index("ix_weekly_rules_tutor_day", "tutor_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return f"<WeeklyAvailabilityRule {self.tutor_id} {self.day_of_week} {self.start_time}-{self.end_time}>"


class TutorTimeBlock(Base):
    """Mentor-declared unavailable interval ``[start_time, end_time)``."""

    __tablename__ = "tutor_time_blocks"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    tutor_id = Column(
        String(26), ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False
    )
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_time_block_time_order"),
        Index("ix_time_blocks_tutor_range", "tutor_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return f"<TutorTimeBlock {self.id} {self.start_time}-{self.end_time}>"
