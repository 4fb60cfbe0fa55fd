"""Per-client sliding-window rate limit for the auth and password-reset endpoints."""
import logging
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request, status

from medibot.core.config import settings
from medibot.utils.helpers import get_client_ip

logger = logging.getLogger(__name__)

# "<ip>:<path>" -> request timestamps inside the current window
_buckets: dict[str, deque] = defaultdict(deque)
_last_sweep = 0.0
_clock = time.monotonic


def reset_buckets() -> None:
    global _last_sweep
    _buckets.clear()
    _last_sweep = 0.0


def _sweep(now: float, window: float) -> None:
    """Drop every bucket whose newest request has left the window."""
    global _last_sweep
    if now - _last_sweep < window:
        return
    _last_sweep = now
    stale = [key for key, bucket in _buckets.items() if not bucket or bucket[-1] <= now - window]
    for key in stale:
        del _buckets[key]
    if stale:
        logger.debug("Rate limit: dropped %d idle clients", len(stale))


async def rate_limit(request: Request) -> None:
    if not settings.RATE_LIMIT_ENABLED:
        return

    now = _clock()
    window = settings.RATE_LIMIT_PERIOD_SECONDS
    _sweep(now, window)

    key = f"{get_client_ip(request)}:{request.url.path}"
    bucket = _buckets[key]

    while bucket and bucket[0] <= now - window:
        bucket.popleft()

    if len(bucket) >= settings.RATE_LIMIT_REQUESTS:
        retry_after = max(1, int(window - (now - bucket[0])))
        logger.warning("Rate limit hit for %s", key)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down.",
            headers={"Retry-After": str(retry_after)},
        )

    bucket.append(now)
