"""
Per-key asyncio locks.

Serializes work for one key (cart owner, order id) while leaving
other keys free to proceed.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """
    One asyncio.Lock per key, dropped once nobody holds or waits for it.

    Example:
        locks = KeyedLock()

        async with locks.hold(owner_id):
            ...  # read-modify-write of that owner's cart
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ("KeyedLock",)
