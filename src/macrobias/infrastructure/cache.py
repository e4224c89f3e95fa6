"""TTL cache abstraction injected into data sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from macrobias.domain.models.base import ValueObject

logger = structlog.get_logger(__name__)


class CacheEntry(ValueObject):
    """Cached value with its absolute expiry time."""

    value: Any
    expires_at: datetime


class CacheBackend(ABC):
    """Key/value storage for cache entries."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        pass

    @abstractmethod
    async def set(self, key: str, entry: CacheEntry) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass


class InMemoryCacheBackend(CacheBackend):
    """Process-local backend; one instance per container, never module-level."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()


class CacheManager:
    """Cache with a per-entry time-to-live.

    An entry is served while ``now < expires_at``; expired entries are
    evicted on read. A ``default_ttl`` of zero disables caching.
    """

    def __init__(
        self,
        backend: CacheBackend,
        default_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._default_ttl = default_ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    async def get(self, key: str) -> Any | None:
        entry = await self._backend.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            await self._backend.delete(key)
            logger.debug("Cache entry expired", key=key)
            return None
        return entry.value

    async def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        effective_ttl = self._default_ttl if ttl is None else ttl
        if effective_ttl <= timedelta(0):
            return
        await self._backend.set(key, CacheEntry(value=value, expires_at=self._clock() + effective_ttl))

    async def invalidate(self, key: str) -> None:
        await self._backend.delete(key)

    async def clear(self) -> None:
        await self._backend.clear()
