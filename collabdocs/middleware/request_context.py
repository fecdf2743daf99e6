"""Request context middleware: request ids, access logging and rate limiting.

One middleware does all three in a single pass:
- reuse the caller's ``X-Request-ID`` or mint one, and expose it to log records
- time the request and log method, path, status and duration
- throttle each client with a token bucket (``check_rate_limit``, a pure
  function testable on its own)
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# {client: (tokens_left, last_seen)}
_buckets: dict[str, tuple[float, float]] = {}
_buckets_lock = threading.Lock()

_SWEEP_EVERY = 100
_STALE_AFTER = 120.0
_calls = 0

_UNTHROTTLED = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def check_rate_limit(
    bucket: dict[str, tuple[float, float]],
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Take one token for *key* from its bucket.

    Args:
        bucket: Per-client state, updated in place.
        key: Client identifier.
        max_per_minute: Bucket capacity and refill rate. ``<= 0`` disables limiting.
        now: Monotonic timestamp, injectable for tests.

    Returns:
        ``(allowed, retry_after_seconds)``; retry_after is 0.0 when allowed.
    """
    global _calls

    if max_per_minute <= 0:
        return True, 0.0
    if now is None:
        now = time.monotonic()

    _calls += 1
    if _calls % _SWEEP_EVERY == 0:
        for stale_key in [k for k, (_, seen) in bucket.items() if seen < now - _STALE_AFTER]:
            del bucket[stale_key]

    per_second = max_per_minute / 60.0
    tokens, last_seen = bucket.get(key, (float(max_per_minute), now))
    tokens = min(float(max_per_minute), tokens + (now - last_seen) * per_second)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / per_second


def _client_key(request: Request) -> str:
    """First ``X-Forwarded-For`` hop when proxied, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id, timing, access log and rate limiting for every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in _UNTHROTTLED:
            client = _client_key(request)
            with _buckets_lock:
                allowed, retry_after = check_rate_limit(
                    _buckets, client, settings.rate_limit_per_minute
                )
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": client, "path": request.url.path},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "RATE_LIMITED",
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
