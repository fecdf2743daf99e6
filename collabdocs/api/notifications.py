"""Notification outbox inspection (admin)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_admin
from ..database import get_db
from ..schemas.notification import NotificationEventResponse
from ..services import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationEventResponse])
def list_notifications(
    status: Optional[str] = Query(None, pattern="^(queued|sending|sent|failed|superseded)$"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
):
    """Most recent outbox events, newest first."""
    return NotificationService(db).list_recent(status=status, limit=limit)
