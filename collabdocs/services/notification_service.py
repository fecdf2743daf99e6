"""Notification outbox: queue, claim, and settle outbound notification events."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.notification_event import NotificationEvent
from ..repositories.base import new_id

logger = logging.getLogger(__name__)

COMMENT_CONTRIBUTION = "comment-contribution"
COMMENT_RESOLVED = "comment-resolved"
COMMENT_LIKED = "comment-liked"
DOCUMENT_CLOSES = "document-closes"

COMMENT_EVENT_TYPES = frozenset({COMMENT_CONTRIBUTION, COMMENT_RESOLVED, COMMENT_LIKED})


class NotificationService:
    """
    Manages the lifecycle of outbound notification events.

    Workflow services enqueue events inside their own transaction (no
    commit here), so an event exists exactly when the change that caused
    it does. Delivery later claims events one at a time through
    queued -> sending -> sent | failed. Failed events are not retried.
    """

    def __init__(self, db: Session):
        self.db = db

    def enqueue_comment_event(self, event_type: str, comment_id: str) -> NotificationEvent:
        """Queue a comment-contribution, comment-resolved or comment-liked event."""
        if event_type not in COMMENT_EVENT_TYPES:
            raise ValueError(f"Unknown comment event type: {event_type}")

        event = NotificationEvent(
            id=new_id(),
            event_type=event_type,
            comment_id=comment_id,
            status="queued",
        )
        self.db.add(event)
        self.db.flush()
        logger.debug("Queued %s for comment %s", event_type, comment_id)
        return event

    def schedule_document_closes(self, document_id: str, closing_date: datetime) -> NotificationEvent:
        """
        Queue a document-closes event.

        Still-queued closes events for the same document are superseded,
        so only the latest closing date is delivered.
        """
        superseded = self._supersede_document_closes(document_id)

        event = NotificationEvent(
            id=new_id(),
            event_type=DOCUMENT_CLOSES,
            document_id=document_id,
            closing_date=closing_date,
            status="queued",
        )
        self.db.add(event)
        self.db.flush()
        logger.debug(
            "Scheduled document-closes for %s at %s (superseded %d)",
            document_id, closing_date.isoformat(), superseded,
        )
        return event

    def cancel_document_closes(self, document_id: str) -> int:
        """Supersede still-queued closes events of a document that no longer has a closing date."""
        superseded = self._supersede_document_closes(document_id)
        if superseded:
            logger.debug("Cancelled document-closes for %s (superseded %d)", document_id, superseded)
        return superseded

    def _supersede_document_closes(self, document_id: str) -> int:
        return self.db.execute(
            update(NotificationEvent)
            .where(
                NotificationEvent.document_id == document_id,
                NotificationEvent.event_type == DOCUMENT_CLOSES,
                NotificationEvent.status == "queued",
            )
            .values(status="superseded")
            .execution_options(synchronize_session=False)
        ).rowcount

    def claim_next(self) -> Optional[NotificationEvent]:
        """
        Claim the oldest queued event for delivery.

        The status flip is a conditional UPDATE, so when the worker and a
        background drain race for the same event only one of them gets it.

        Returns:
            The claimed event, or None if nothing is queued
        """
        while True:
            event = (
                self.db.query(NotificationEvent)
                .filter(NotificationEvent.status == "queued")
                .order_by(NotificationEvent.created_at.asc(), NotificationEvent.id)
                .first()
            )
            if not event:
                return None

            claimed = self.db.execute(
                update(NotificationEvent)
                .where(NotificationEvent.id == event.id, NotificationEvent.status == "queued")
                .values(status="sending")
                .execution_options(synchronize_session=False)
            ).rowcount
            self.db.commit()
            if claimed:
                self.db.refresh(event)
                return event

    def mark_sent(self, event_id: str) -> NotificationEvent:
        """Mark an event as delivered."""
        event = self._get(event_id)
        event.status = "sent"
        event.error_message = None
        event.dispatched_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(event)
        return event

    def mark_failed(self, event_id: str, error_message: str) -> NotificationEvent:
        """Mark an event as undeliverable. Retrying belongs to the external notifier."""
        event = self._get(event_id)
        event.status = "failed"
        event.error_message = error_message
        event.dispatched_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(event)
        logger.warning("Notification %s (%s) failed: %s", event.id, event.event_type, error_message)
        return event

    def dispatch_pending(self, notifier, max_events: int = 100) -> int:
        """
        Deliver queued events until the queue is empty or *max_events* were tried.

        Never raises for delivery problems: each failure is logged and
        recorded on its event.

        Returns:
            Number of events delivered successfully
        """
        from .notifier import NotificationDeliveryError

        delivered = 0
        for _ in range(max_events):
            event = self.claim_next()
            if event is None:
                break
            try:
                notifier.deliver(event)
            except NotificationDeliveryError as e:
                self.mark_failed(event.id, str(e))
                continue
            except Exception as e:
                # A claimed event must not stay in "sending".
                logger.exception("Unexpected error delivering notification %s", event.id)
                self.mark_failed(event.id, f"{type(e).__name__}: {e}")
                continue
            self.mark_sent(event.id)
            delivered += 1
        return delivered

    def list_recent(self, status: Optional[str] = None, limit: int = 50) -> List[NotificationEvent]:
        """Most recent events, newest first, optionally filtered by status."""
        query = self.db.query(NotificationEvent)
        if status:
            query = query.filter(NotificationEvent.status == status)
        return query.order_by(NotificationEvent.created_at.desc()).limit(limit).all()

    def _get(self, event_id: str) -> NotificationEvent:
        event = self.db.get(NotificationEvent, event_id)
        if not event:
            raise ValueError(f"Notification event not found: {event_id}")
        return event
