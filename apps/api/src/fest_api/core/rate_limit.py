"""
Rate Limiting Module

Per-user limits for mutating college actions, backed by Redis sorted sets
(sliding window). Falls back to in-memory storage when Redis is not
initialised, which is per-process only.
"""

import logging
import time

from fastapi import HTTPException, status
from redis.asyncio import Redis

from fest_api.core.auth import CollegeUser
from fest_api.core.config import settings
from fest_api.core.redis import get_redis

logger = logging.getLogger(__name__)

# (limit, window_seconds) per action
ACTION_RATE_LIMITS: dict[str, tuple[int, int]] = {
    "approve_student": (30, 60),
    "reject_student": (30, 60),
    "edit_student_details": (60, 60),
    "edit_student_events": (60, 60),
    "move_to_rejected": (30, 60),
    "final_approval": (3, 60),
}

# In-memory fallback: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client: Redis,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Sliding-window check with a Redis sorted set.

    Returns:
        True if the request is allowed
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """In-process sliding window, used when Redis is unavailable."""
    now = time.time()
    window_start = now - window_seconds

    timestamps = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(timestamps) >= limit:
        _memory_store[key] = timestamps
        return False

    timestamps.append(now)
    _memory_store[key] = timestamps
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "college_action:approve_student:12")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = get_redis()
    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_action_rate_limit(user: CollegeUser, action: str) -> None:
    """
    Apply the configured limit for ``action`` to ``user``.

    Actions without a configured limit are not limited.

    Raises:
        RateLimitExceeded: If the user exceeded the limit
    """
    if not settings.rate_limit_enabled or action not in ACTION_RATE_LIMITS:
        return

    limit, window_seconds = ACTION_RATE_LIMITS[action]
    key = f"college_action:{action}:{user.user_id}"

    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(
            f"Rate limit exceeded for user {user.user_id} on action '{action}': "
            f"{limit}/{window_seconds}s"
        )
        raise RateLimitExceeded(limit, window_seconds)


__all__ = [
    "ACTION_RATE_LIMITS",
    "RateLimitExceeded",
    "check_rate_limit",
    "enforce_action_rate_limit",
]
