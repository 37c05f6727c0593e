"""Time-bounded cache slots for rarely-changing node queries."""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of cache hits
    cannot starve a refresh.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class CachedValue(Generic[T]):
    value: T
    timestamp: float


class CacheSlot(Generic[T]):
    """A single cached value that goes stale after ttl seconds.

    Empty -> Fresh on a successful refresh, Fresh -> Stale once ttl has
    elapsed, Stale -> Fresh on the next successful refresh. A failed
    refresh leaves the slot as it was and re-raises.

    Concurrent misses are not coalesced: every caller that sees a stale
    slot refreshes it, and the last write sets the next expiry.
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = ReadWriteLock()
        self._entry: CachedValue[T] | None = None

    @property
    def ttl(self) -> float:
        return self._ttl

    def peek(self) -> T | None:
        """Return the stored value regardless of its age."""
        with self._lock.read():
            return None if self._entry is None else self._entry.value

    def put(self, value: T) -> None:
        with self._lock.write():
            self._entry = CachedValue(value, self._clock())

    def invalidate(self) -> None:
        with self._lock.write():
            self._entry = None

    def get_or_refresh(self, refresh: Callable[[], T]) -> tuple[T, bool]:
        """Return (value, hit), calling refresh outside the lock on a miss."""
        with self._lock.read():
            entry = self._entry
            if entry is not None and self._clock() - entry.timestamp < self._ttl:
                return entry.value, True

        value = refresh()
        self.put(value)
        return value, False
