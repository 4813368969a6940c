"""
Hybrid in-memory + Redis rate limiting utilities

Counts live in process memory and are synced to Redis every few seconds, so
several workers converge on a shared count without a Redis round-trip per
request. Without Redis the limiter keeps working from memory alone.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from . import config
from .errors import TooManyRequests, error_body

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None
_redis_unavailable = False

# Format: {key: {'count': int, 'reset_time': int, 'last_redis_sync': int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10  # Sync to Redis every 10 seconds
MEMORY_CACHE_CLEANUP_INTERVAL = 60  # Clean up expired entries every 60 seconds
last_cleanup_time = 0


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create the Redis client; None when REDIS_URL is unset or unreachable
    """
    global redis_client, _redis_unavailable

    if redis_client is not None or _redis_unavailable:
        return redis_client

    redis_url = config.REDIS_URL
    if not redis_url:
        logger.info("ℹ️ REDIS_URL not set - rate limiting runs in memory only")
        _redis_unavailable = True
        return None

    # Mask password in URL for logging
    if "@" in redis_url:
        url_parts = redis_url.split("@")
        protocol = url_parts[0].split(":")[0]
        masked_url = f"{protocol}:****@{url_parts[1]}"
    else:
        masked_url = "****"
    logger.info(f"📡 Using Redis URL connection: {masked_url}")

    try:
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=20,
        )
        client.ping()
        redis_client = client
        logger.info("Redis connected successfully via URL")
    except Exception as e:
        logger.warning(f"⚠️ Failed to connect to Redis, rate limiting runs in memory only: {e}")
        _redis_unavailable = True

    return redis_client


def reset_rate_limits() -> None:
    """Forget all in-memory windows"""
    with cache_lock:
        memory_cache.clear()


def cleanup_expired_cache():
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    current_time = int(time.time())

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [
            k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)
        ]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def _new_window(current_time: int, window_seconds: int) -> dict:
    return {
        "count": 0,
        "reset_time": current_time + window_seconds,
        "last_redis_sync": current_time,
    }


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis] = None
) -> tuple[bool, int, int]:
    """Fixed-window check for one key

    Args:
        key: Redis key for this rate limit
        limit: Maximum number of requests allowed
        window_seconds: Time window in seconds
        client: Redis client instance, or None for memory-only

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_time = int(time.time())
    cleanup_expired_cache()

    with cache_lock:
        if key not in memory_cache:
            entry = _new_window(current_time, window_seconds)
            if client is not None:
                # Pick up a window another worker already started
                try:
                    redis_count = client.get(key)
                    redis_ttl = client.ttl(key)
                    if redis_count and redis_ttl > 0:
                        entry["count"] = int(redis_count)
                        entry["reset_time"] = current_time + redis_ttl
                except Exception as e:
                    logger.warning(f"⚠️ Failed to load from Redis, using memory only: {e}")
            memory_cache[key] = entry

        cache_entry = memory_cache[key]

        if current_time >= cache_entry["reset_time"]:
            cache_entry["count"] = 0
            cache_entry["reset_time"] = current_time + window_seconds
            cache_entry["last_redis_sync"] = 0

        is_allowed = cache_entry["count"] < limit
        if is_allowed:
            cache_entry["count"] += 1

        ttl = max(0, cache_entry["reset_time"] - current_time)

        if client is not None:
            time_since_sync = current_time - cache_entry.get("last_redis_sync", 0)
            if time_since_sync >= MEMORY_CACHE_SYNC_INTERVAL:
                try:
                    client.set(key, cache_entry["count"], ex=max(1, ttl))
                    cache_entry["last_redis_sync"] = current_time
                    logger.debug(f"📡 Synced {key} to Redis: {cache_entry['count']}/{limit}")
                except Exception as e:
                    logger.warning(f"⚠️ Failed to sync to Redis: {e}")

        return is_allowed, cache_entry["count"], ttl


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP window over every /api/ path"""

    def __init__(
        self,
        app,
        limit: int = config.RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = config.RATE_LIMIT_WINDOW_SECONDS,
        path_prefix: str = "/api/",
    ):
        super().__init__(app)
        self.limit = limit
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        if not config.RATE_LIMIT_ENABLED or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = f"rate_limit:api:{client_ip(request)}"
        is_allowed, count, ttl = check_rate_limit(key, self.limit, self.window_seconds, get_redis_client())

        if not is_allowed:
            logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {count}/{self.limit} requests used")
            return JSONResponse(
                status_code=429,
                content=error_body("Too many requests from this IP, please try again later."),
                headers={"Retry-After": str(ttl)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.limit - count))
        return response


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a per-route rate limiter dependency

    Example usage:
        login_limiter = create_rate_limiter(limit=10, window_seconds=900, key_prefix="login")

        @router.post("/login", dependencies=[Depends(login_limiter)])
        async def login(...):
            ...
    """

    async def rate_limiter(request: Request):
        if not config.RATE_LIMIT_ENABLED:
            return
        key = f"{key_prefix}:{client_ip(request)}"
        is_allowed, count, ttl = check_rate_limit(key, limit, window_seconds, get_redis_client())
        if not is_allowed:
            logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {count}/{limit} requests used")
            raise TooManyRequests(retry_after=ttl)

    return rate_limiter
