# backend/mentorbook/models/lesson.py
"""
Lesson model: one concrete scheduled session.

Non-cancelled lessons block the mentor's availability. The table carries a
storage-level guard so that two non-cancelled lessons for the same tutor can
never overlap, whatever the application-level check concluded:

- PostgreSQL: btree_gist exclusion constraint over ``tstzrange``.
- SQLite: BEFORE INSERT/UPDATE triggers aborting with the constraint name.
"""

from enum import Enum

from sqlalchemy import DDL, CheckConstraint, Column, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now

LESSON_OVERLAP_CONSTRAINT = "lessons_no_overlap_per_tutor"


class LessonStatus(str, Enum):
    PENDING = "PENDING"
    BOOKED = "BOOKED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


BLOCKING_LESSON_STATUSES = tuple(s.value for s in LessonStatus if s is not LessonStatus.CANCELLED)


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True, index=True)
    tutor_id = Column(String(26), ForeignKey("tutor_profiles.id"), nullable=False)
    student_id = Column(String(26), ForeignKey("student_profiles.id"), nullable=False, index=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(String(20), nullable=False, default=LessonStatus.BOOKED.value)

    # Remote meeting reference, filled in after the booking commits
    meeting_event_id = Column(String(255), nullable=True)
    meeting_html_link = Column(Text, nullable=True)
    meeting_link = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    booking = relationship("Booking", back_populates="lessons")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_lessons_time_order"),
        Index("ix_lessons_tutor_range", "tutor_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return f"<Lesson {self.id} {self.tutor_id} {self.start_time}-{self.end_time} {self.status}>"


_OVERLAP_PREDICATE = (
    "SELECT 1 FROM lessons AS existing "
    "WHERE existing.tutor_id = NEW.tutor_id "
    "AND existing.status <> 'CANCELLED' "
    "AND existing.start_time < NEW.end_time "
    "AND NEW.start_time < existing.end_time"
)

event.listen(
    Lesson.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Lesson.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE lessons ADD CONSTRAINT {LESSON_OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (tutor_id WITH =, tstzrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status <> 'CANCELLED')"
    ).execute_if(dialect="postgresql"),
)
event.listen(
    Lesson.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER IF NOT EXISTS lessons_no_overlap_insert "
        "BEFORE INSERT ON lessons "
        "WHEN NEW.status <> 'CANCELLED' "
        "BEGIN "
        f"SELECT RAISE(ABORT, '{LESSON_OVERLAP_CONSTRAINT}') "
        f"WHERE EXISTS ({_OVERLAP_PREDICATE}); "
        "END"
    ).execute_if(dialect="sqlite"),
)
event.listen(
    Lesson.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER IF NOT EXISTS lessons_no_overlap_update "
        "BEFORE UPDATE OF tutor_id, start_time, end_time, status ON lessons "
        "WHEN NEW.status <> 'CANCELLED' "
        "BEGIN "
        f"SELECT RAISE(ABORT, '{LESSON_OVERLAP_CONSTRAINT}') "
        f"WHERE EXISTS ({_OVERLAP_PREDICATE} AND existing.id <> NEW.id); "
        "END"
    ).execute_if(dialect="sqlite"),
)
