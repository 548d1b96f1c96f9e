"""
Hybrid in-memory + Redis rate limiting.

Counts live in a process-local window cache and are written through to
Redis every few seconds, so most requests cost no Redis round trip.
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {"count": int, "reset_time": int, "last_redis_sync": int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10
MEMORY_CACHE_CLEANUP_INTERVAL = 60
last_cleanup_time = 0


def _mask_url(redis_url: str) -> str:
    if "@" not in redis_url:
        return "****"
    scheme = redis_url.split("@")[0].split(":")[0]
    return f"{scheme}:****@{redis_url.split('@')[1]}"


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client (REDIS_URL or REDIS_HOST/PORT)"""
    global redis_client

    if redis_client is not None:
        return redis_client

    common = {
        "decode_responses": True,
        "socket_connect_timeout": 15,
        "socket_timeout": 30,
        "retry_on_timeout": True,
        "health_check_interval": 30,
        "max_connections": 20,
    }

    redis_url = os.getenv("REDIS_URL")
    try:
        if redis_url:
            logger.info(f"📡 Using Redis URL connection: {_mask_url(redis_url)}")
            client = redis.from_url(redis_url, **common)
        else:
            redis_host = os.getenv("REDIS_HOST", "localhost")
            redis_port = int(os.getenv("REDIS_PORT", "6379"))
            redis_ssl = os.getenv("REDIS_SSL", "false").lower() == "true"
            logger.info(f"📡 Using Redis at {redis_host}:{redis_port} (SSL: {redis_ssl})")
            client = redis.Redis(
                host=redis_host,
                port=redis_port,
                password=os.getenv("REDIS_PASSWORD"),
                db=int(os.getenv("REDIS_DB", "0")),
                ssl=redis_ssl,
                **common,
            )
        client.ping()
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis: {str(e)}")
        raise

    logger.info("✅ Redis connected")
    redis_client = client
    return redis_client


def cleanup_expired_cache():
    """Remove expired windows from the memory cache"""
    global last_cleanup_time
    current_time = int(time.time())

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)]
        for k in expired_keys:
            del memory_cache[k]

    last_cleanup_time = current_time


def _load_window(key: str, window_seconds: int, client: redis.Redis, now: int) -> dict:
    try:
        redis_count = client.get(key)
        redis_ttl = client.ttl(key)
        if redis_count and redis_ttl > 0:
            return {"count": int(redis_count), "reset_time": now + redis_ttl, "last_redis_sync": now}
    except redis.RedisError as e:
        logger.warning(f"⚠️ Failed to load {key} from Redis, using memory only: {e}")
    return {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": now}


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: redis.Redis
) -> tuple[bool, int, int]:
    """
    Count one request against ``key``.

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    now = int(time.time())
    cleanup_expired_cache()

    with cache_lock:
        if key not in memory_cache:
            memory_cache[key] = _load_window(key, window_seconds, client, now)

        entry = memory_cache[key]
        if now >= entry["reset_time"]:
            entry.update(count=0, reset_time=now + window_seconds, last_redis_sync=0)

        is_allowed = entry["count"] < limit
        if is_allowed:
            entry["count"] += 1

        if now - entry.get("last_redis_sync", 0) >= MEMORY_CACHE_SYNC_INTERVAL:
            try:
                client.set(key, entry["count"], ex=window_seconds)
                entry["last_redis_sync"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

        return is_allowed, entry["count"], max(0, entry["reset_time"] - now)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request, limit: int, window_seconds: int, key_prefix: str = "rate_limit"
):
    """Raise 429 when the caller's IP exceeded ``limit`` requests per window"""
    try:
        client = get_redis_client()
        key = f"{key_prefix}:{client_ip(request)}"
        is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, client)
    except Exception as e:
        logger.error(f"❌ Rate limiting error: {str(e)}")
        logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise HTTPException(
            status_code=429,
            detail={
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after": ttl,
            },
            headers={"Retry-After": str(ttl)},
        )

    request.state.rate_limit_remaining = limit - current_count


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        ai_chat_limit = create_rate_limiter(limit=20, window_seconds=60, key_prefix="ai_chat")

        @router.post("/ai-chat")
        async def ai_chat(data: AiChatRequest, _: None = Depends(ai_chat_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix)

    return rate_limiter
