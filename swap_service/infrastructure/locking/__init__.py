"""Process-local locking primitives."""

from .keyed_lock import KeyedLock, get_trade_locks

__all__ = ["KeyedLock", "get_trade_locks"]
