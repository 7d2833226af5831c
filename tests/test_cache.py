"""Tests for response caches and cache key helpers."""

import asyncio
import json
import os
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis

from vibeprompt.cache import (
    FileResponseCache,
    NullResponseCache,
    RedisResponseCache,
    create_cache,
    make_cache_key,
    pair_cache_key,
    prompt_cache_key,
)


@pytest.fixture
def file_cache(tmp_path):
    return FileResponseCache(str(tmp_path / "vibeprompt_cache"))


def test_null_cache_always_misses():
    cache = NullResponseCache()

    async def _run():
        await cache.set("k", "v", 60)
        return await cache.get("k")

    assert asyncio.run(_run()) is None
    assert cache.is_available() is False


def test_file_cache_miss_returns_none(file_cache):
    assert asyncio.run(file_cache.get("missing")) is None


def test_file_cache_hit_after_set(file_cache):
    async def _run():
        await file_cache.set("k", '{"a": 1}', 60)
        return await file_cache.get("k")

    assert asyncio.run(_run()) == '{"a": 1}'


def test_file_cache_expired_entry_is_removed(file_cache, monkeypatch):
    """Entries past their TTL miss and are deleted from disk."""
    asyncio.run(file_cache.set("k", "v", 60))
    path = file_cache._path("k")
    assert os.path.exists(path)

    real_time = time.time
    monkeypatch.setattr("vibeprompt.cache.time.time", lambda: real_time() + 61)

    assert asyncio.run(file_cache.get("k")) is None
    assert not os.path.exists(path)


def test_file_cache_ignores_corrupt_entry(file_cache):
    os.makedirs(file_cache.directory, exist_ok=True)
    with open(file_cache._path("k"), "w", encoding="utf-8") as f:
        f.write("not json {{{")

    assert asyncio.run(file_cache.get("k")) is None


@pytest.mark.parametrize("payload", [[1, 2], {"expires_at": "soon", "value": "v"}])
def test_file_cache_ignores_wrongly_typed_entry(file_cache, payload):
    os.makedirs(file_cache.directory, exist_ok=True)
    with open(file_cache._path("k"), "w", encoding="utf-8") as f:
        json.dump(payload, f)

    assert asyncio.run(file_cache.get("k")) is None


def test_file_cache_entry_format(file_cache):
    asyncio.run(file_cache.set("k", "v", 60))
    with open(file_cache._path("k"), encoding="utf-8") as f:
        data = json.load(f)

    assert data["key"] == "k"
    assert data["value"] == "v"
    assert "expires_at" in data


def test_file_cache_clear(file_cache):
    async def _run():
        await file_cache.set("a", "1", 60)
        await file_cache.set("b", "2", 60)

    asyncio.run(_run())
    assert file_cache.clear() == 2
    assert asyncio.run(file_cache.get("a")) is None


def _redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


def test_redis_cache_uses_setex_with_ttl():
    client = _redis_client()
    cache = RedisResponseCache(client=client)

    asyncio.run(cache.set("llm:prompt:abc", "value", 3600))

    client.setex.assert_awaited_once_with("llm:prompt:abc", 3600, "value")


def test_redis_cache_get_returns_stored_value():
    client = _redis_client()
    client.get.return_value = "cached"
    cache = RedisResponseCache(client=client)

    assert asyncio.run(cache.get("k")) == "cached"


def test_redis_connection_error_degrades_to_miss():
    """A Redis outage is absorbed: get returns None and the cache goes unavailable."""
    client = _redis_client()
    client.get.side_effect = redis.ConnectionError("connection refused")
    cache = RedisResponseCache(client=client)

    assert asyncio.run(cache.get("k")) is None
    assert cache.is_available() is False


def test_redis_unavailable_skips_store_calls():
    client = _redis_client()
    client.setex.side_effect = redis.ConnectionError("down")
    cache = RedisResponseCache(client=client)

    async def _run():
        await cache.set("k", "v", 60)
        await cache.set("k", "v", 60)
        return await cache.get("k")

    assert asyncio.run(_run()) is None
    assert client.setex.await_count == 1
    client.get.assert_not_called()


def test_redis_recovers_after_backoff(monkeypatch):
    client = _redis_client()
    client.get.side_effect = [redis.ConnectionError("down"), "back"]
    cache = RedisResponseCache(client=client)
    monkeypatch.setattr("vibeprompt.cache.UNAVAILABLE_BACKOFF_SECONDS", 0.0)

    assert asyncio.run(cache.get("k")) is None
    assert asyncio.run(cache.get("k")) == "back"


def test_redis_os_error_degrades():
    client = _redis_client()
    client.ping.side_effect = OSError("network unreachable")
    cache = RedisResponseCache(client=client)

    assert asyncio.run(cache.ping()) is False
    assert cache.is_available() is False


def test_redis_cache_requires_url_or_client():
    with pytest.raises(ValueError):
        RedisResponseCache()


def test_create_cache_by_url(tmp_path):
    assert isinstance(create_cache(None), NullResponseCache)
    assert isinstance(create_cache(""), NullResponseCache)
    assert isinstance(create_cache("redis://localhost:6379/0"), RedisResponseCache)

    file_cache = create_cache(f"file://{tmp_path}/c")
    assert isinstance(file_cache, FileResponseCache)
    assert file_cache.directory == f"{tmp_path}/c"

    with pytest.raises(ValueError, match="Unsupported cache URL scheme"):
        create_cache("memcached://localhost")


def test_prompt_cache_key_is_stable_and_model_scoped():
    assert prompt_cache_key("hello") == prompt_cache_key("hello")
    assert prompt_cache_key("hello").startswith("llm:prompt:")
    assert prompt_cache_key("hello", "model-a") != prompt_cache_key("hello", "model-b")
    assert prompt_cache_key("hello") != prompt_cache_key("hello!")


def test_pair_cache_key_is_order_independent():
    assert pair_cache_key("compat", "u1", "u2") == pair_cache_key("compat", "u2", "u1")
    assert pair_cache_key("compat", "u1", "u2") == "llm:compat:u1:u2"


def test_make_cache_key_depends_on_every_part():
    base = make_cache_key("vibe", "u1", "art,music", "ctx")
    assert base == make_cache_key("vibe", "u1", "art,music", "ctx")
    assert base != make_cache_key("vibe", "u1", "art", "ctx")
    assert base.startswith("llm:vibe:")
