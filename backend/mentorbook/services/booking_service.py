# backend/mentorbook/services/booking_service.py
"""
Booking Service

Validates a booking request against the same rule and busy-interval model
used for slot generation and commits the booking record set atomically:

1. lock the tutor row and re-check every requested start,
2. insert the Booking envelope,
3. insert the first Lesson,
4. enqueue notification outbox rows.

Only the first occurrence becomes a Lesson; the envelope records the
declared cadence and window. A remote meeting event is created after the
commit and its failure never affects the booking.

The storage-level guard on ``lessons`` backs up the pre-check: a lesson that
slips past a stale check is rejected with an IntegrityError, translated here
into BookingConflictException.
"""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BookingConflictException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..integrations.calendar_client import CalendarProvider, NullCalendarProvider
from ..models.booking import Booking, BookingFrequency, BookingStatus
from ..models.lesson import LESSON_OVERLAP_CONSTRAINT, Lesson, LessonStatus
from ..models.notification import NotificationType
from ..models.user import StudentProfile, TutorProfile
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Selected time is not available"


class BookingService(BaseService):
    @staticmethod
    def _is_deadlock_error(exc: OperationalError) -> bool:
        orig = getattr(exc, "orig", None)
        pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        # 40P01 deadlock, 40001 serialization failure
        if pgcode in ("40P01", "40001"):
            return True
        message = str(exc).lower()
        return "deadlock detected" in message or "database is locked" in message

    @staticmethod
    def _is_overlap_violation(exc: IntegrityError) -> bool:
        orig = getattr(exc, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", "") if diag is not None else ""
        if constraint_name:
            return constraint_name == LESSON_OVERLAP_CONSTRAINT
        return LESSON_OVERLAP_CONSTRAINT in str(orig if orig is not None else exc)

    def __init__(
        self,
        db: Session,
        calendar: Optional[CalendarProvider] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        super().__init__(db)
        self.calendar = calendar or NullCalendarProvider()
        self.availability_service = availability_service or AvailabilityService(db, self.calendar)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.student_repository = RepositoryFactory.create_student_profile_repository(db)
        self.outbox_repository = RepositoryFactory.create_notification_outbox_repository(db)

    @staticmethod
    def resolve_slot_starts(
        frequency: BookingFrequency,
        start_date: Optional[datetime],
        slot_starts: Optional[Sequence[datetime]],
    ) -> List[datetime]:
        """
        Ordered, UTC-normalised starts for the request.

        ``slot_starts`` wins over ``start_date``; recurring frequencies need
        exactly as many starts as sessions per week.
        """
        starts = list(slot_starts) if slot_starts else ([start_date] if start_date else [])
        if not starts:
            raise ValidationException(
                "start_date or slot_starts is required", code="missing_start"
            )

        required = frequency.sessions_per_week
        if frequency.is_recurring and len(starts) != required:
            raise ValidationException(
                f"Please select {required} weekly time slot{'s' if required > 1 else ''}",
                code="slot_count_mismatch",
                details={"frequency": frequency.value, "required": required, "given": len(starts)},
            )

        normalised = sorted(TimezoneService.ensure_utc(s) for s in starts)
        if len(set(normalised)) != len(normalised):
            raise ValidationException("slot_starts must be distinct", code="duplicate_slot_start")
        return normalised

    def _load_participants(
        self, student_user_id: str, tutor_id: str
    ) -> Tuple[StudentProfile, TutorProfile]:
        tutor = self.tutor_repository.get_with_user(tutor_id)
        if tutor is None:
            raise NotFoundException("Tutor not found", code="tutor_not_found")
        student = self.student_repository.get_by_user_id(student_user_id)
        if student is None:
            raise NotFoundException("Student profile not found", code="student_not_found")
        return student, tutor

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        student_user_id: str,
        tutor_id: str,
        *,
        start_date: Optional[datetime] = None,
        slot_starts: Optional[Sequence[datetime]] = None,
        duration_minutes: Optional[int] = None,
        frequency: BookingFrequency = BookingFrequency.WEEKLY,
    ) -> Booking:
        """
        Create a booking envelope and its first lesson.

        Raises:
            ValidationException: malformed request (duration, slot count)
            NotFoundException: tutor or student profile missing
            BookingConflictException: a requested slot is no longer available
            ServiceException: any other persistence failure (nothing persisted)
        """
        duration = (
            settings.booking_default_duration_minutes if duration_minutes is None else duration_minutes
        )
        if duration <= 0:
            raise ValidationException("duration_minutes must be positive", code="invalid_duration")

        starts = self.resolve_slot_starts(frequency, start_date, slot_starts)
        self.log_operation(
            "create_booking",
            student_user_id=student_user_id,
            tutor_id=tutor_id,
            frequency=frequency.value,
            starts=[s.isoformat() for s in starts],
            duration_minutes=duration,
        )

        student, tutor = self._load_participants(student_user_id, tutor_id)
        session_length = timedelta(minutes=duration)
        booking_start = starts[0]
        booking_end = frequency.envelope_end(booking_start, session_length)
        conflict_details: Dict[str, Any] = {
            "tutor_id": tutor_id,
            "start": booking_start.isoformat(),
            "end": (booking_start + session_length).isoformat(),
        }

        try:
            with self.booking_repository.transaction():
                self.tutor_repository.lock_for_booking(tutor.id)
                self._ensure_available(tutor.id, starts, session_length, conflict_details)

                booking = self.booking_repository.create(
                    student_id=student.id,
                    tutor_id=tutor.id,
                    start_date=booking_start,
                    end_date=booking_end,
                    frequency=frequency.value,
                    duration_minutes=duration,
                    status=BookingStatus.PENDING.value,
                )
                lesson = self.lesson_repository.create(
                    booking_id=booking.id,
                    tutor_id=tutor.id,
                    student_id=student.id,
                    start_time=booking_start,
                    end_time=booking_start + session_length,
                    status=LessonStatus.BOOKED.value,
                )
                if settings.notifications_enabled:
                    self._enqueue_confirmations(booking, lesson, student, tutor)
        except IntegrityError as exc:
            if self._is_overlap_violation(exc):
                prometheus_metrics.inc_booking_conflict("storage")
                self.logger.warning("Booking rejected by lesson overlap guard: %s", conflict_details)
                raise BookingConflictException(CONFLICT_MESSAGE, details=conflict_details) from exc
            self.logger.error("Booking persistence failed: %s", exc)
            raise ServiceException("Failed to create booking", code="booking_failed") from exc
        except OperationalError as exc:
            if self._is_deadlock_error(exc):
                prometheus_metrics.inc_booking_conflict("storage")
                raise BookingConflictException(CONFLICT_MESSAGE, details=conflict_details) from exc
            self.logger.error("Booking persistence failed: %s", exc)
            raise ServiceException("Failed to create booking", code="booking_failed") from exc
        except RepositoryException as exc:
            self.logger.error("Booking persistence failed: %s", exc)
            raise ServiceException("Failed to create booking", code="booking_failed") from exc

        self.log_operation("booking_created", booking_id=booking.id, lesson_id=lesson.id)
        self._attach_meeting_event(lesson, tutor, student)
        return self.booking_repository.get_with_lessons(booking.id) or booking

    def _ensure_available(
        self,
        tutor_id: str,
        starts: Sequence[datetime],
        session_length: timedelta,
        conflict_details: Dict[str, Any],
    ) -> None:
        timeout = settings.commit_calendar_timeout
        for start in starts:
            if not self.availability_service.is_available(
                tutor_id, start, start + session_length, calendar_timeout=timeout
            ):
                prometheus_metrics.inc_booking_conflict("precheck")
                self.logger.warning(
                    "Booking rejected, slot unavailable: tutor=%s start=%s", tutor_id, start
                )
                raise BookingConflictException(
                    CONFLICT_MESSAGE,
                    details={**conflict_details, "unavailable_start": start.isoformat()},
                )

    def _enqueue_confirmations(
        self, booking: Booking, lesson: Lesson, student: StudentProfile, tutor: TutorProfile
    ) -> None:
        """Outbox rows for both parties; recipients without an email are skipped."""
        window = {"start": lesson.start_time.isoformat(), "end": lesson.end_time.isoformat()}
        student_user = student.user
        tutor_user = tutor.user

        entries = []
        if student_user is not None and student_user.email:
            entries.append(
                (
                    NotificationType.BOOKING_CONFIRMATION_STUDENT,
                    student_user,
                    {"booking_id": booking.id, "tutor_name": tutor.display_name, **window},
                    f"booking:{booking.id}:student",
                )
            )
        if tutor_user is not None and tutor_user.email:
            entries.append(
                (
                    NotificationType.BOOKING_CONFIRMATION_TUTOR,
                    tutor_user,
                    {"booking_id": booking.id, "student_id": student.id, **window},
                    f"booking:{booking.id}:tutor",
                )
            )

        for notification_type, user, payload, key in entries:
            try:
                self.outbox_repository.enqueue(
                    notification_type=notification_type.value,
                    recipient_user_id=user.id,
                    recipient_email=user.email,
                    idempotency_key=key,
                    payload=payload,
                )
            except RepositoryException as exc:
                self.logger.warning("Failed to enqueue %s for booking %s: %s", key, booking.id, exc)

    def _attach_meeting_event(
        self, lesson: Lesson, tutor: TutorProfile, student: StudentProfile
    ) -> None:
        """Create the remote meeting after commit and store its reference on the lesson."""
        try:
            attendees = [
                u.email for u in (student.user, tutor.user) if u is not None and u.email
            ]
            event = self.calendar.create_meeting_event(
                tutor.id,
                request_id=f"lesson-{lesson.id}",
                summary=f"Mentoring session with {tutor.display_name or 'your mentor'}",
                start=lesson.start_time,
                end=lesson.end_time,
                attendee_emails=attendees,
            )
            if event is None:
                return
            with self.lesson_repository.transaction():
                self.lesson_repository.set_meeting_reference(
                    lesson.id,
                    event_id=event.event_id,
                    html_link=event.html_link,
                    meeting_link=event.meeting_link,
                )
        except Exception as e:
            prometheus_metrics.inc_calendar_fallback("create_meeting_event")
            self.logger.warning(f"Meeting event creation failed for lesson {lesson.id}: {str(e)}")
