"""
Response cache for validated generation results.

Three stores behind one interface:
- NullResponseCache: caching disabled
- RedisResponseCache: shared cache over ``redis://`` URLs (SETEX with TTL)
- FileResponseCache: content-hash JSON files under a ``file://`` directory

A cache failure is never a request failure: store errors are logged and the
cache behaves as empty until it recovers.
"""

import hashlib
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from urllib.parse import unquote, urlparse

import redis.asyncio as redis
from redis.exceptions import RedisError

from .errors import CacheUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
# Seconds to wait before touching a store again after it failed.
UNAVAILABLE_BACKOFF_SECONDS = 30.0
KEY_PREFIX = "llm"


def _sha256(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def prompt_cache_key(prompt: str, model: str | None = None) -> str:
    """Key for a rendered prompt (and model, when given)."""
    content = f"{model}||{prompt}" if model else prompt
    return f"{KEY_PREFIX}:prompt:{_sha256(content)}"


def make_cache_key(namespace: str, *parts) -> str:
    """Key for ``namespace`` from arbitrary identifying parts, hashed."""
    content = "||".join(str(part) for part in parts)
    return f"{KEY_PREFIX}:{namespace}:{_sha256(content)}"


def pair_cache_key(namespace: str, first: str, second: str) -> str:
    """Order-independent key for a pair of ids: (a, b) and (b, a) collide."""
    low, high = sorted((str(first), str(second)))
    return f"{KEY_PREFIX}:{namespace}:{low}:{high}"


class ResponseCache(ABC):
    """Async string cache. Implementations never raise on store failure."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        raise NotImplementedError

    def is_available(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class NullResponseCache(ResponseCache):
    """Caching disabled: every lookup misses and writes are dropped."""

    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        return None

    def is_available(self) -> bool:
        return False


class RedisResponseCache(ResponseCache):
    def __init__(self, url: str | None = None, client=None):
        if client is None and not url:
            raise ValueError("RedisResponseCache needs a redis:// URL or a client")
        self.url = url
        self.client = client if client is not None else redis.from_url(
            url, encoding="utf-8", decode_responses=True
        )
        self._unavailable_until = 0.0

    def is_available(self) -> bool:
        return time.monotonic() >= self._unavailable_until

    async def _execute(self, operation: str, awaitable):
        try:
            return await awaitable
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(f"Redis {operation} failed: {exc}") from exc

    def _degrade(self, exc: CacheUnavailableError) -> None:
        self._unavailable_until = time.monotonic() + UNAVAILABLE_BACKOFF_SECONDS
        logger.warning("%s; cache disabled for %.0fs", exc, UNAVAILABLE_BACKOFF_SECONDS)

    async def get(self, key: str) -> str | None:
        if not self.is_available():
            return None
        try:
            return await self._execute("GET", self.client.get(key))
        except CacheUnavailableError as exc:
            self._degrade(exc)
            return None

    async def set(self, key: str, value: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not self.is_available():
            return
        try:
            await self._execute("SETEX", self.client.setex(key, ttl_seconds, value))
        except CacheUnavailableError as exc:
            self._degrade(exc)

    async def ping(self) -> bool:
        try:
            await self._execute("PING", self.client.ping())
        except CacheUnavailableError as exc:
            self._degrade(exc)
            return False
        return True

    async def close(self) -> None:
        try:
            await self._execute("CLOSE", self.client.aclose())
        except CacheUnavailableError as exc:
            logger.warning("%s", exc)


class FileResponseCache(ResponseCache):
    """One JSON file per key, named by the key's sha256, with a stored expiry."""

    def __init__(self, directory: str):
        self.directory = os.path.expanduser(directory)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{_sha256(key)}.json")

    async def get(self, key: str) -> str | None:
        cache_file = self._path(key)
        if not os.path.exists(cache_file):
            return None

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if time.time() > data["expires_at"]:
                os.remove(cache_file)
                return None
            return data["value"]
        except (json.JSONDecodeError, KeyError, TypeError, OSError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", cache_file, exc)
            return None

    async def set(self, key: str, value: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        try:
            os.makedirs(self.directory, exist_ok=True)
            data = {
                "key": key,
                "expires_at": time.time() + ttl_seconds,
                "value": value,
            }
            with open(self._path(key), "w", encoding="utf-8") as f:
                json.dump(data, f)
        except OSError as exc:
            logger.warning("Could not write cache entry for %s: %s", key, exc)

    def clear(self) -> int:
        """Delete every entry. Returns the number removed."""
        if not os.path.isdir(self.directory):
            return 0
        removed = 0
        for name in os.listdir(self.directory):
            if name.endswith(".json"):
                try:
                    os.remove(os.path.join(self.directory, name))
                    removed += 1
                except OSError:
                    continue
        return removed


def create_cache(url: str | None) -> ResponseCache:
    """Build the cache for ``url``. Empty means caching is off."""
    if not url:
        return NullResponseCache()
    parsed = urlparse(url)
    if parsed.scheme in ("redis", "rediss", "unix"):
        return RedisResponseCache(url)
    if parsed.scheme == "file":
        return FileResponseCache(unquote(parsed.netloc + parsed.path))
    raise ValueError(f"Unsupported cache URL scheme '{parsed.scheme}'. Available: redis, rediss, file")
