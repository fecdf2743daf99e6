"""Content helpers shared by models and services.

Document content is form-shaped JSON. The only key the workflow itself
interprets is ``closingDate``; everything else belongs to the form.
"""

from datetime import datetime, timezone
from typing import Any, Optional

CLOSING_DATE_KEY = "closingDate"


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Naive values are taken to be UTC. A trailing ``Z`` is accepted.
    Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def closing_date_of(content: Optional[dict]) -> Optional[datetime]:
    """Return the content's closingDate, or None when absent."""
    if not content:
        return None
    return parse_datetime(content.get(CLOSING_DATE_KEY))


def is_past(moment: datetime, now: Optional[datetime] = None) -> bool:
    """True once ``now`` has reached ``moment``."""
    now = now or datetime.now(timezone.utc)
    return now >= moment
