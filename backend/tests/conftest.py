# backend/tests/conftest.py
"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database (with the lesson overlap
triggers installed by ``create_all``), so services are free to commit.
"""

import os

# Set before any mentorbook import so the module-level engine never touches disk
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CALENDAR_API_BASE_URL", "")

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mentorbook.api.dependencies.database import get_db
from mentorbook.api.dependencies.services import get_calendar_provider
from mentorbook.core.enums import RoleName
from mentorbook.core.ulid_helper import generate_ulid
from mentorbook.database import Base
from mentorbook.domain.interval import Interval
from mentorbook.integrations.calendar_client import CalendarError, MeetingEvent
from mentorbook.main import app
import mentorbook.models  # noqa: F401
from mentorbook.models.availability import WeeklyAvailabilityRule
from mentorbook.models.user import StudentProfile, TutorProfile, User
from mentorbook.services.availability_service import AvailabilityService
from mentorbook.services.booking_service import BookingService

AUTO_EMAIL = "auto"


@dataclass
class FakeCalendarProvider:
    """In-memory calendar capability recording every call."""

    busy: Optional[List[Interval]] = None
    fail_busy: bool = False
    fail_events: bool = False
    event: Optional[MeetingEvent] = None
    busy_calls: List[dict] = field(default_factory=list)
    event_calls: List[dict] = field(default_factory=list)

    def fetch_busy(self, tutor_id, start, end, *, timeout=None):
        self.busy_calls.append({"tutor_id": tutor_id, "start": start, "end": end, "timeout": timeout})
        if self.fail_busy:
            raise CalendarError("gateway timed out")
        return None if self.busy is None else list(self.busy)

    def create_meeting_event(
        self,
        tutor_id,
        *,
        request_id,
        summary,
        start,
        end,
        attendee_emails: Sequence[str] = (),
    ):
        self.event_calls.append(
            {
                "tutor_id": tutor_id,
                "request_id": request_id,
                "summary": summary,
                "start": start,
                "end": end,
                "attendee_emails": list(attendee_emails),
            }
        )
        if self.fail_events:
            raise CalendarError("calendar not reachable")
        return self.event


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False, future=True
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def calendar() -> FakeCalendarProvider:
    return FakeCalendarProvider()


@pytest.fixture
def make_tutor(db) -> Callable[..., TutorProfile]:
    def _make(
        *,
        timezone_name: Optional[str] = "America/New_York",
        email: Optional[str] = AUTO_EMAIL,
        display_name: str = "Ada Mentor",
    ) -> TutorProfile:
        if email == AUTO_EMAIL:
            email = f"tutor-{generate_ulid().lower()}@example.com"
        user = User(email=email, full_name=display_name, role=RoleName.TUTOR.value)
        db.add(user)
        db.flush()
        tutor = TutorProfile(user_id=user.id, display_name=display_name, timezone=timezone_name)
        db.add(tutor)
        db.commit()
        return tutor

    return _make


@pytest.fixture
def make_student(db) -> Callable[..., StudentProfile]:
    def _make(
        *, email: Optional[str] = AUTO_EMAIL, full_name: str = "Sam Student"
    ) -> StudentProfile:
        if email == AUTO_EMAIL:
            email = f"student-{generate_ulid().lower()}@example.com"
        user = User(email=email, full_name=full_name, role=RoleName.STUDENT.value)
        db.add(user)
        db.flush()
        student = StudentProfile(user_id=user.id)
        db.add(student)
        db.commit()
        return student

    return _make


@pytest.fixture
def add_rule(db) -> Callable[..., WeeklyAvailabilityRule]:
    def _add(tutor: TutorProfile, day_of_week: int, start: str, end: str) -> WeeklyAvailabilityRule:
        rule = WeeklyAvailabilityRule(
            tutor_id=tutor.id, day_of_week=day_of_week, start_time=start, end_time=end
        )
        db.add(rule)
        db.commit()
        return rule

    return _add


@pytest.fixture
def ny_tutor(make_tutor, add_rule) -> TutorProfile:
    """America/New_York mentor open Mondays 09:00-17:00 local."""
    tutor = make_tutor(timezone_name="America/New_York")
    add_rule(tutor, 1, "09:00", "17:00")
    return tutor


@pytest.fixture
def student(make_student) -> StudentProfile:
    return make_student()


@pytest.fixture
def client(db, calendar) -> TestClient:
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_calendar_provider] = lambda: calendar
    test_client = TestClient(app, raise_server_exceptions=False)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def availability_service(db, calendar) -> AvailabilityService:
    return AvailabilityService(db, calendar)


@pytest.fixture
def booking_service(db, calendar) -> BookingService:
    return BookingService(db, calendar)
