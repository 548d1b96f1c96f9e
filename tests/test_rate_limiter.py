"""Tests for the hybrid memory + Redis rate limiter."""

import asyncio

import pytest
import redis
from fastapi import HTTPException, Request

from farewelly import rate_limiter


class FakeRedis:
    def __init__(self, fail=False):
        self.store = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.store.get(key)

    def ttl(self, key):
        return 60 if key in self.store else -2

    def set(self, key, value, ex=None):
        if self.fail:
            raise redis.ConnectionError("down")
        self.store[key] = value


@pytest.fixture(autouse=True)
def clear_cache():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


class TestCheckRateLimit:
    def test_allows_up_to_limit(self):
        fake = FakeRedis()

        results = [rate_limiter.check_rate_limit("ai_chat:1.2.3.4", 3, 60, fake)[0] for _ in range(4)]

        assert results == [True, True, True, False]

    def test_resumes_count_from_redis(self):
        fake = FakeRedis()
        fake.store["ai_chat:5.6.7.8"] = "5"

        allowed, count, ttl = rate_limiter.check_rate_limit("ai_chat:5.6.7.8", 5, 60, fake)

        assert allowed is False
        assert count == 5
        assert ttl == 60

    def test_redis_outage_falls_back_to_memory(self):
        allowed, count, _ = rate_limiter.check_rate_limit("ai_chat:9.9.9.9", 2, 60, FakeRedis(fail=True))

        assert allowed is True
        assert count == 1


class TestRateLimitDependency:
    def test_unreachable_redis_fails_closed(self, monkeypatch):
        def no_redis():
            raise redis.ConnectionError("refused")

        monkeypatch.setattr(rate_limiter, "get_redis_client", no_redis)
        request = Request({"type": "http", "method": "POST", "path": "/api/ai-chat", "headers": [], "client": ("1.2.3.4", 1234)})

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(rate_limiter.rate_limit_dependency(request, 5, 60, "ai_chat"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Rate limiting service temporarily unavailable"

    def test_over_limit_is_429_with_retry_after(self, monkeypatch):
        monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: FakeRedis())
        request = Request({"type": "http", "method": "POST", "path": "/api/ai-chat", "headers": [], "client": ("4.3.2.1", 1234)})
        asyncio.run(rate_limiter.rate_limit_dependency(request, 1, 60, "ai_chat"))

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(rate_limiter.rate_limit_dependency(request, 1, 60, "ai_chat"))

        assert exc_info.value.status_code == 429
        assert int(exc_info.value.headers["Retry-After"]) in (59, 60)
