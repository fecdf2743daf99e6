"""
Polling worker for the notification outbox.

Every NOTIFICATION_POLL_INTERVAL seconds, claims queued notification
events one at a time and posts them to the external notifier. Each event
ends up ``sent`` or ``failed``; failed events are not retried here.

Usage:
    python worker.py
"""

import logging
import time

from collabdocs.core.config import settings
from collabdocs.core.logging_config import setup_logging
from collabdocs.services.notifier import Notifier, drain_outbox

# Events delivered per poll before sleeping again
BATCH_SIZE = 100

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger("worker")


def run_once() -> int:
    """Drain up to BATCH_SIZE events. Returns how many were delivered."""
    delivered = drain_outbox(max_events=BATCH_SIZE)
    if delivered:
        logger.info(f"Delivered {delivered} notification(s)")
    return delivered


def main() -> None:
    """Poll the outbox until interrupted."""
    if not Notifier.is_configured():
        logger.error("NOTIFIER_URL is not set; nothing to deliver to. Exiting.")
        raise SystemExit(1)

    interval = settings.notification_poll_interval
    logger.info(f"Worker started, polling every {interval}s -> {settings.notifier_url}")

    while True:
        try:
            delivered = run_once()
            if delivered < BATCH_SIZE:
                time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("Worker shutting down")
            break
        except Exception as e:
            logger.error(f"Worker error: {e}", exc_info=True)
            time.sleep(interval)


if __name__ == "__main__":
    main()
