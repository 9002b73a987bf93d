"""Per-user mutual exclusion for check-then-write token sequences."""

from __future__ import annotations

import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager


class UserLockRegistry:
    """
    Lazily created ``threading.Lock`` per user id.

    Locks are held weakly: a lock lives while some caller references it (for
    instance inside :meth:`hold`) and is collected once the user goes idle.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def lock_for(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        """Hold the lock of ``user_id`` for the duration of the block."""
        lock = self.lock_for(user_id)
        with lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
