"""Notification outbox schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotificationEventResponse(BaseModel):
    id: str
    event_type: str
    comment_id: Optional[str] = None
    document_id: Optional[str] = None
    closing_date: Optional[datetime] = None
    status: str
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
