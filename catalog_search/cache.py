"""Search response caching with Redis primary and in-memory fallback."""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import redis

from .config import settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "search"


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None: ...


def cache_key(catalog_version: str, normalized_query: str) -> str:
    """Key a response by catalog snapshot so reloads never serve stale hits."""

    digest = hashlib.sha1(normalized_query.encode("utf-8")).hexdigest()
    return f"{CACHE_PREFIX}:{catalog_version}:{digest}"


@dataclass
class RedisCache:
    client: redis.Redis

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis get failed: %s", exc)
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as exc:
            logger.warning("Redis set failed: %s", exc)


class InMemoryCache:
    """Process-local fallback. Holds at most ``max_entries`` responses.

    Expired entries are swept on every write; when the store is still full the
    oldest insertion is evicted.
    """

    def __init__(self, max_entries: int = 1024) -> None:
        self.max_entries = max(1, max_entries)
        self._store: Dict[str, tuple[float, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._store.get(key)
            if not value:
                return None
            expires_at, payload = value
            if expires_at < time.time():
                self._store.pop(key, None)
                return None
            return payload

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        now = time.time()
        with self._lock:
            self._store.pop(key, None)
            for stale in [k for k, (expires_at, _) in self._store.items() if expires_at < now]:
                del self._store[stale]
            while len(self._store) >= self.max_entries:
                # dicts keep insertion order
                del self._store[next(iter(self._store))]
            self._store[key] = (now + ttl, value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class NullCache:
    """Used when caching is switched off."""

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        return None


_cache: CacheBackend | None = None
_cache_lock = threading.Lock()


def get_cache() -> CacheBackend:
    global _cache
    if _cache is not None:
        return _cache
    with _cache_lock:
        if _cache is None:
            _cache = _connect_cache()
    return _cache


def _connect_cache() -> CacheBackend:
    if not settings.cache_enabled:
        logger.info("Response cache disabled")
        return NullCache()
    try:
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            decode_responses=False,
            socket_connect_timeout=0.5,
            socket_timeout=0.5,
        )
        client.ping()
        logger.info("Using Redis cache at %s:%s", settings.redis_host, settings.redis_port)
        return RedisCache(client)
    except redis.RedisError:
        logger.warning("Redis not available, using in-memory cache")
        return InMemoryCache(settings.cache_max_entries)
