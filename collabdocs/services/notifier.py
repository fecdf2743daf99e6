"""HTTP client for the external notification service.

Deep module: callers hand over an outbox event, the client picks the
endpoint and payload shape and reports failure as a single exception type.
"""

import logging
from typing import Optional

import httpx

from ..core.config import settings
from ..models.notification_event import NotificationEvent
from .notification_service import DOCUMENT_CLOSES

logger = logging.getLogger(__name__)


class NotificationDeliveryError(Exception):
    """The notifier could not be reached or rejected the event."""


class Notifier:
    """Posts outbox events to ``{NOTIFIER_URL}/send-email`` and ``/set-document-closes``.

    Args:
        base_url: Notifier base URL. Defaults to ``settings.notifier_url``.
        timeout: Request timeout in seconds.
        client: Optional pre-built ``httpx.Client`` (tests inject a mock transport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.notifier_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.notifier_timeout
        self._client = client

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.notifier_url)

    def deliver(self, event: NotificationEvent) -> None:
        """Send one event. Raises NotificationDeliveryError on any failure."""
        if not self.base_url:
            raise NotificationDeliveryError("NOTIFIER_URL is not configured")

        if event.event_type == DOCUMENT_CLOSES:
            path = "/set-document-closes"
            payload = {
                "id": event.document_id,
                "closingDate": event.closing_date.isoformat() if event.closing_date else None,
            }
        else:
            path = "/send-email"
            payload = {"type": event.event_type, "comment": event.comment_id}

        try:
            response = self._post(f"{self.base_url}{path}", payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationDeliveryError(
                f"Notifier returned {e.response.status_code} for {event.event_type}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Notifier unreachable: {e}") from e

        logger.info(
            "Notification delivered",
            extra={"event_id": event.id, "event_type": event.event_type},
        )

    def _post(self, url: str, payload: dict) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, json=payload, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, json=payload)


def drain_outbox(max_events: int = 100) -> int:
    """Deliver queued notification events with a fresh session.

    Used by the worker loop and by request background tasks. Returns the
    number of events delivered.
    """
    from ..database import SessionLocal
    from .notification_service import NotificationService

    db = SessionLocal()
    try:
        return NotificationService(db).dispatch_pending(Notifier(), max_events=max_events)
    finally:
        db.close()
