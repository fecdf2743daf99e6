"""Notification outbox model."""

from sqlalchemy import Column, Index, String, Text, DateTime
from sqlalchemy.sql import func
from ..database import Base


class NotificationEvent(Base):
    """
    Outbound notification waiting for (or done with) delivery.

    Written in the same transaction as the change that caused it and
    delivered afterwards by the worker or a background task.

    Status transitions: queued -> sending -> sent | failed
    A queued ``document-closes`` event becomes ``superseded`` when a newer
    closing date is scheduled for the same document.
    """

    __tablename__ = "notification_events"
    __table_args__ = (
        Index("ix_notification_events_status", "status", "created_at"),
        Index("ix_notification_events_document", "document_id", "event_type"),
    )

    id = Column(String(50), primary_key=True)

    # comment-contribution | comment-resolved | comment-liked | document-closes
    event_type = Column(String(30), nullable=False)

    # Comment events carry comment_id; document-closes carries document_id + closing_date.
    # No foreign keys: the outbox must not block deletes of what it mentions.
    comment_id = Column(String(50), nullable=True)
    document_id = Column(String(50), nullable=True)
    closing_date = Column(DateTime(timezone=True), nullable=True)

    status = Column(String(20), nullable=False, default="queued")
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    dispatched_at = Column(DateTime(timezone=True), nullable=True)
