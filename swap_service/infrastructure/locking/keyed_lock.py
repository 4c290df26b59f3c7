"""KeyedLock - один asyncio.Lock на key (e.g. trade_id).

Серіалізує status-affecting paths для одного trade в межах процесу.
Cross-process серіалізація - SELECT ... FOR UPDATE в repository.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class KeyedLock:
    """Registry of per-key locks with reference counting.

    Lock видаляється з registry коли останній holder/waiter виходить,
    тому registry не росте з кількістю trades.

    Example:
        >>> locks = KeyedLock()
        >>> async with locks.acquire(trade_id):
        ...     await reconcile(trade_id)
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refcounts: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._refcounts[key] = self._refcounts.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._refcounts[key] -= 1
            if self._refcounts[key] == 0:
                del self._refcounts[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


# Global registry (process-wide)
_trade_locks: KeyedLock | None = None


def get_trade_locks() -> KeyedLock:
    """Get process-wide per-trade lock registry."""
    global _trade_locks
    if _trade_locks is None:
        _trade_locks = KeyedLock()
    return _trade_locks
