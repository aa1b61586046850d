"""Unit tests for the per-user plan cache (fail-open Redis wrapper)."""

import json
import logging

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from planrun.core import plan_cache as plan_cache_module
from planrun.core.plan_cache import PlanCache, close_plan_cache, get_plan_cache


class FakeRedis:
    """In-memory Redis-like client for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self.ttl: dict[str, int] = {}
        self.closed = False

    async def get(self, key: str):
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None):
        self._store[key] = value
        if ex is not None:
            self.ttl[key] = ex

    async def delete(self, key: str):
        self._store.pop(key, None)

    async def aclose(self):
        self.closed = True


class DownRedis:
    """Every call fails as if the server went away."""

    async def get(self, key: str):
        raise RedisConnectionError("Connection refused")

    async def set(self, key: str, value: str, ex: int | None = None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, key: str):
        raise RedisConnectionError("Connection refused")

    async def aclose(self):
        raise RedisConnectionError("Connection refused")


def test_key_format():
    assert PlanCache(FakeRedis(), enabled=True).key(7) == "training_plan_7"
    assert PlanCache(FakeRedis(), enabled=True, key_prefix="plan").key(42) == "plan_42"


@pytest.mark.asyncio
async def test_set_get_invalidate():
    fake = FakeRedis()
    cache = PlanCache(fake, enabled=True, ttl_seconds=60)
    view = {"weeks": [{"number": 1, "start_date": "2026-03-02", "total_volume": "5 км", "days": {}}]}

    await cache.set(1, view)
    assert fake.ttl["training_plan_1"] == 60
    assert json.loads(fake._store["training_plan_1"]) == view
    assert await cache.get(1) == view
    assert await cache.get(2) is None

    await cache.invalidate(1)
    assert await cache.get(1) is None


@pytest.mark.asyncio
async def test_disabled_cache_does_nothing():
    fake = FakeRedis()
    cache = PlanCache(fake, enabled=False)
    await cache.set(1, {"weeks": []})
    assert fake._store == {}
    assert await cache.get(1) is None
    await cache.invalidate(1)


@pytest.mark.asyncio
async def test_redis_errors_fail_open(caplog):
    cache = PlanCache(DownRedis(), enabled=True)
    with caplog.at_level(logging.WARNING, logger="planrun.core.plan_cache"):
        await cache.set(1, {"weeks": []})
        assert await cache.get(1) is None
        await cache.invalidate(1)
        await cache.close()
    assert caplog.text.count("Plan cache:") == 4


@pytest.mark.asyncio
async def test_unreadable_entry_is_a_miss():
    fake = FakeRedis()
    fake._store["training_plan_1"] = "{not json"
    assert await PlanCache(fake, enabled=True).get(1) is None


@pytest.mark.asyncio
async def test_close_releases_client():
    fake = FakeRedis()
    cache = PlanCache(fake, enabled=True)
    await cache.close()
    assert fake.closed is True
    assert cache._client is None


@pytest.mark.asyncio
async def test_process_wide_cache(monkeypatch):
    monkeypatch.setattr(plan_cache_module, "_plan_cache", None)
    cache = get_plan_cache()
    assert get_plan_cache() is cache
    await close_plan_cache()
    assert plan_cache_module._plan_cache is None
