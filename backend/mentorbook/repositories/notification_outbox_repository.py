# backend/mentorbook/repositories/notification_outbox_repository.py
"""Repository helpers for the notification outbox."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import NotificationOutbox, NotificationStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class NotificationOutboxRepository(BaseRepository[NotificationOutbox]):
    def __init__(self, db: Session):
        super().__init__(db, NotificationOutbox)

    def enqueue(
        self,
        *,
        notification_type: str,
        recipient_user_id: str,
        recipient_email: str,
        idempotency_key: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> NotificationOutbox:
        """
        Insert a pending row, or return the existing one for the same idempotency key.

        The insert runs in a savepoint so a failure leaves the surrounding
        transaction usable.
        """
        existing = self.find_one_by(idempotency_key=idempotency_key)
        if existing is not None:
            self.logger.debug("Outbox entry %s already enqueued", idempotency_key)
            return existing

        try:
            with self.db.begin_nested():
                entry = NotificationOutbox(
                    notification_type=notification_type,
                    recipient_user_id=recipient_user_id,
                    recipient_email=recipient_email,
                    idempotency_key=idempotency_key,
                    payload=payload or {},
                    status=NotificationStatus.PENDING.value,
                )
                self.db.add(entry)
                self.db.flush()
            return entry
        except SQLAlchemyError as e:
            self.logger.error(f"Error enqueuing outbox entry {idempotency_key}: {str(e)}")
            raise RepositoryException(f"Failed to enqueue notification: {str(e)}") from e

    def list_for_key_prefix(self, prefix: str) -> list[NotificationOutbox]:
        return (
            self.db.query(NotificationOutbox)
            .filter(NotificationOutbox.idempotency_key.startswith(prefix))
            .order_by(NotificationOutbox.idempotency_key)
            .all()
        )
