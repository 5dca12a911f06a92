"""Metadata cache.

Resolved metadata can be cached per URL so repeated renders skip the
(possibly expensive) metadata functions.  Load functions still run on
every render; only metadata is cached.

Any object with ``get``/``set``/``delete`` works as storage, with sync
or async methods::

    class RedisStore:
        async def get(self, key): ...
        async def set(self, key, value, ttl=None): ...
        async def delete(self, key): ...

    CacheOptions(enabled=True, storage=RedisStore(), ttl=60)

Without a storage the process-wide ``MemoryCache`` is used.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from warble._internal.invoke import invoke

if TYPE_CHECKING:
    from warble.config import CacheOptions
    from warble.context import RenderContext
    from warble.types import Metadata

logger = logging.getLogger("warble.cache")

DEFAULT_MAX_SIZE = 1000


class CacheStore(Protocol):
    """Storage backend for cached values.  Methods may be sync or async."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: float | None = None) -> Any: ...

    def delete(self, key: str) -> Any: ...


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A stored value.  ``expires_at == 0`` never expires."""

    value: Any
    expires_at: float = 0.0


class MemoryCache:
    """Bounded in-process store.

    Past *max_size* entries the oldest insertion is evicted.  Expired
    entries are dropped lazily when read.
    """

    __slots__ = ("_entries", "_lock", "_max_size")

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        self._max_size = max_size
        self._lock = threading.Lock()
        # Insertion-ordered, so the first key is the oldest
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at and time.monotonic() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else 0.0
        with self._lock:
            # Re-setting a key moves it to the back of the eviction order
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(value, expires_at)
            while len(self._entries) > self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


_default_store = MemoryCache()


def default_store() -> MemoryCache:
    """The process-wide store used when ``CacheOptions.storage`` is ``None``."""
    return _default_store


def _storage(options: CacheOptions) -> CacheStore:
    return options.storage if options.storage is not None else _default_store


def generate_cache_key(context: RenderContext, prefix: str = "render") -> str:
    """Build ``"{prefix}:{url}?k=v&..."`` with params sorted by name."""
    url = context.url or "/"
    params = "&".join(f"{k}={v}" for k, v in sorted(context.params.items()))
    return f"{prefix}:{url}?{params}" if params else f"{prefix}:{url}"


async def get_cache(key: str, options: CacheOptions | None) -> Any:
    """Read *key*; ``None`` on a miss or when caching is disabled."""
    if options is None or not options.enabled:
        return None
    return await invoke(_storage(options).get, key)


async def set_cache(key: str, value: Any, options: CacheOptions | None) -> None:
    """Write *key*, passing the configured TTL when there is one."""
    if options is None or not options.enabled:
        return
    storage = _storage(options)
    if options.ttl is not None:
        await invoke(storage.set, key, value, options.ttl)
    else:
        await invoke(storage.set, key, value)


async def delete_cache(key: str, options: CacheOptions | None) -> None:
    if options is None or not options.enabled:
        return
    await invoke(_storage(options).delete, key)


def _metadata_key(context: RenderContext, options: CacheOptions) -> str:
    if options.get_cache_key is not None:
        return options.get_cache_key(context)
    return generate_cache_key(context, "metadata")


async def cache_metadata(
    context: RenderContext,
    metadata: Metadata,
    options: CacheOptions | None,
) -> None:
    """Store a copy of resolved metadata for *context*."""
    if options is None or not options.enabled:
        return
    key = _metadata_key(context, options)
    await set_cache(key, copy.deepcopy(metadata), options)
    logger.debug("Cached metadata under %s", key)


async def get_cached_metadata(
    context: RenderContext,
    options: CacheOptions | None,
) -> Metadata | None:
    """Return a copy of the cached metadata for *context*, or ``None`` on a miss."""
    if options is None or not options.enabled:
        return None
    key = _metadata_key(context, options)
    cached = await get_cache(key, options)
    if cached is None:
        return None
    logger.debug("Metadata cache hit for %s", key)
    return copy.deepcopy(cached)
