"""Key-value storage for Link Records.

This module hides the storage engine behind a two-operation interface so the
service never talks to Redis directly. Production deployments use Redis; tests
and local development use an in-process dict.

Flow Diagram — create_store()
=============================
::
    ┌─────────────┐
    │ Settings     │
    │ STORE_BACKEND│
    └──────┬──────┘
    REDIS? │
    ┌─────┴─────┐
    │ YES        │ NO
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Redis   │  │ Memory  │
│ LinkStore│ │ LinkStore│
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Build from settings**::
    store = create_store(get_settings())

**Step 2 — Read and write raw values**::
    raw = await store.get("abc123")
    await store.put("abc123", record.to_json())

**Step 3 — Cleanup on shutdown**::
    await store.close()

Key Behaviours
===============
- Values are opaque strings; encoding belongs to LinkRecord.
- put() overwrites unconditionally; there is no compare-and-set.
- Redis keys are namespaced with REDIS_KEY_PREFIX.
- The Redis client is created lazily by redis.from_url and reused.

Classes:
    LinkStore:  Abstract interface.
    RedisLinkStore:  redis.asyncio implementation.
    MemoryLinkStore:  dict implementation.
"""

from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as redis

from shortlink.config import Settings
from shortlink.enums import StoreBackend

__all__ = ["LinkStore", "RedisLinkStore", "MemoryLinkStore", "create_store"]


class LinkStore(ABC):
    """Minimal key-value contract used by the service layer."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None when absent."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        raise NotImplementedError

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class RedisLinkStore(LinkStore):
    def __init__(self, client: redis.Redis, key_prefix: str = ""):
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "") -> "RedisLinkStore":
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(self._key(key))

    async def put(self, key: str, value: str) -> None:
        await self._client.set(self._key(key), value)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()


class MemoryLinkStore(LinkStore):
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


def create_store(settings: Settings) -> LinkStore:
    if settings.STORE_BACKEND is StoreBackend.MEMORY:
        return MemoryLinkStore()
    return RedisLinkStore.from_url(settings.REDIS_URL, settings.REDIS_KEY_PREFIX)
