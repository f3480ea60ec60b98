from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional


class AsyncMemoryRedis:
    """In-process stand-in for the subset of redis.asyncio used by BlogStore.

    Values come back as ``str`` like a client created with
    ``decode_responses=True``.
    """

    def __init__(self) -> None:
        self._kv: Dict[str, str] = {}
        self._hash: Dict[str, Dict[str, str]] = {}
        self._sets: Dict[str, set] = {}
        self._lock = asyncio.Lock()

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    async def aclose(self) -> None:
        return None

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._kv.get(key)

    async def set(self, key: str, value: Any, nx: bool | None = None) -> bool | None:
        async with self._lock:
            if nx and key in self._kv:
                return None
            self._kv[key] = str(value)
            return True

    async def incr(self, key: str) -> int:
        async with self._lock:
            cur = int(self._kv.get(key, 0)) + 1
            self._kv[key] = str(cur)
            return cur

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            removed = 0
            for k in keys:
                found = False
                for space in (self._kv, self._hash, self._sets):
                    if k in space:
                        del space[k]
                        found = True
                removed += int(found)
            return removed

    async def hset(
        self,
        key: str,
        field: str | None = None,
        value: Any = None,
        mapping: Dict[str, Any] | None = None,
    ) -> int:
        items: Dict[str, Any] = dict(mapping or {})
        if field is not None:
            items[field] = value
        async with self._lock:
            h = self._hash.setdefault(key, {})
            added = sum(1 for f in items if f not in h)
            h.update({f: str(v) for f, v in items.items()})
            return added

    async def hgetall(self, key: str) -> Dict[str, str]:
        async with self._lock:
            return dict(self._hash.get(key, {}))

    async def sadd(self, key: str, *members: Any) -> int:
        async with self._lock:
            s = self._sets.setdefault(key, set())
            before = len(s)
            s.update(str(m) for m in members)
            return len(s) - before

    async def srem(self, key: str, *members: Any) -> int:
        async with self._lock:
            s = self._sets.get(key)
            if s is None:
                return 0
            before = len(s)
            for m in members:
                s.discard(str(m))
            if not s:
                del self._sets[key]
            return before - len(s)

    async def smembers(self, key: str) -> set:
        async with self._lock:
            return set(self._sets.get(key, set()))

    async def scard(self, key: str) -> int:
        async with self._lock:
            return len(self._sets.get(key, set()))
