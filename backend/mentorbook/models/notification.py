# backend/mentorbook/models/notification.py
"""
Notification outbox persistence model.

Rows are written inside the booking transaction and delivered by a separate
worker; the idempotency key keeps a retried enqueue from creating duplicates.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class NotificationType(str, Enum):
    BOOKING_CONFIRMATION_STUDENT = "BOOKING_CONFIRMATION_STUDENT"
    BOOKING_CONFIRMATION_TUTOR = "BOOKING_CONFIRMATION_TUTOR"


class NotificationStatus(str, Enum):
    """Lifecycle states for an outbox entry."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class NotificationOutbox(Base):
    """Transactional outbox entry pending delivery."""

    __tablename__ = "notification_outbox"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    notification_type = Column(String(64), nullable=False, index=True)
    recipient_user_id = Column(String(26), nullable=False, index=True)
    recipient_email = Column(String(255), nullable=False)
    idempotency_key = Column(String(255), nullable=False)
    payload = Column(
        JSONB(astext_type=Text()).with_variant(JSON(), "sqlite"),
        nullable=False,
        default=dict,
    )
    status = Column(String(20), nullable=False, default=NotificationStatus.PENDING.value, index=True)
    attempt_count = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("idempotency_key", name="uq_notification_outbox_idempotency_key"),
    )
