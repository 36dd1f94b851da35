"""Thread-safe queues: an unbounded blocking queue and bounded ring buffers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Generic, TypeVar

T = TypeVar("T")


class ThreadSafeQueue(Generic[T]):
    """Unbounded FIFO queue shared by many producers and consumers."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()
        self._ready = threading.Condition()

    def push(self, item: T) -> None:
        with self._ready:
            self._items.append(item)
            self._ready.notify()

    def pop(self) -> T | None:
        """Remove and return the front item, or None if the queue is empty."""
        with self._ready:
            return self._items.popleft() if self._items else None

    def wait_and_pop(self, timeout: float | None = None) -> T:
        """Block until an item is available; raise TimeoutError after `timeout` seconds."""
        with self._ready:
            if not self._ready.wait_for(lambda: bool(self._items), timeout):
                raise TimeoutError("no item arrived before the timeout")
            return self._items.popleft()

    def __len__(self) -> int:
        with self._ready:
            return len(self._items)


class _Ring(Generic[T]):
    """Bounded ring of power-of-two capacity."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1 or capacity & (capacity - 1):
            raise ValueError(f"capacity must be a positive power of two, got {capacity}")
        self._capacity = capacity
        self._mask = capacity - 1
        self._slots: list[T | None] = [None] * capacity
        self._read = 0
        self._write = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def _push(self, item: T) -> bool:
        with self._lock:
            if self._write - self._read >= self._capacity:
                return False
            self._slots[self._write & self._mask] = item
            self._write += 1
            return True

    def _pop(self) -> T | None:
        with self._lock:
            if self._read == self._write:
                return None
            index = self._read & self._mask
            item = self._slots[index]
            self._slots[index] = None
            self._read += 1
            return item

    def _size(self) -> int:
        with self._lock:
            return self._write - self._read


class SpscRing(_Ring[T]):
    """Bounded ring for one producer and one consumer."""

    def __init__(self, capacity: int) -> None:
        super().__init__(capacity)

    def push(self, item: T) -> bool:
        """Append an item; return False and drop it if the ring is full."""
        return self._push(item)

    def pop(self) -> T | None:
        """Remove and return the oldest item, or None if the ring is empty."""
        return self._pop()

    def snapshot(self, n: int = 0) -> list[T]:
        """Return the newest `n` items (all if 0 or more than held), oldest first."""
        if n < 0:
            raise ValueError("n must not be negative")
        with self._lock:
            total = self._write - self._read
            if n == 0 or n > total:
                n = total
            return [self._slots[i & self._mask] for i in range(self._write - n, self._write)]

    def __len__(self) -> int:
        return self._size()


class MpscRing(_Ring[T]):
    """Bounded ring for many producers and a single consumer."""

    def __init__(self, capacity: int) -> None:
        super().__init__(capacity)

    def try_push(self, item: T) -> bool:
        """Append an item; return False if the ring is full."""
        return self._push(item)

    def try_pop(self) -> T | None:
        """Remove and return the oldest item, or None if the ring is empty."""
        return self._pop()

    def __len__(self) -> int:
        return self._size()