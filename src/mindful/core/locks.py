"""
Per-session serialization for read-modify-write on a session.

Turns, manual mode switches and deletions on the same session must apply in
order. Each key (a session id, or a ("quota", user id) pair while a turn
checks and spends the daily quota) maps to one asyncio.Lock that lives only
while some task holds or waits on it. A turn always takes its session key
before its user key.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Hashable


class SessionLockRegistry:
    """
    Reference-counted asyncio locks keyed by session id.

    Only serializes within one process; several workers still need the
    store's atomic updates (message count) to stay consistent.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every request handled in this process
session_locks = SessionLockRegistry()
