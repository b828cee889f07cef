"""In-memory ordered KV store."""

import bisect
import threading
from typing import Iterable, Iterator

from .base import BackendOp, OrderedKV


class Memory(OrderedKV):
    """A memory-backed ordered KV store.

    Keys are kept in a sorted list alongside a dict of values. Scans
    iterate over a snapshot taken when iteration begins.
    """

    def __init__(self) -> None:
        self.memory: dict[bytes, bytes] = {}
        self._keys: list[bytes] = []
        self._lock = threading.Lock()

    def get(self, key: bytes) -> bytes | None:
        return self.memory.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        with self._lock:
            self._set(key, value)

    def _set(self, key: bytes, value: bytes) -> None:
        if key not in self.memory:
            bisect.insort(self._keys, key)
        self.memory[key] = value

    def _remove(self, key: bytes) -> None:
        if self.memory.pop(key, None) is not None:
            i = bisect.bisect_left(self._keys, key)
            del self._keys[i]

    def remove(self, key: bytes) -> None:
        with self._lock:
            self._remove(key)

    def apply(self, ops: Iterable[BackendOp]) -> None:
        ops = list(ops)
        for kind, _, value in ops:
            if kind == "put" and not isinstance(value, bytes):
                raise TypeError(f"Expected bytes, got {type(value).__name__}")
        with self._lock:
            for kind, key, value in ops:
                if kind == "put":
                    self._set(key, value)
                else:
                    self._remove(key)

    def scan(
        self,
        lower: bytes | None = None,
        upper: bytes | None = None,
        reverse: bool = False,
    ) -> Iterator[tuple[bytes, bytes]]:
        with self._lock:
            lo = 0 if lower is None else bisect.bisect_left(self._keys, lower)
            hi = len(self._keys) if upper is None else bisect.bisect_right(self._keys, upper)
            snapshot = [(k, self.memory[k]) for k in self._keys[lo:hi]]
        if reverse:
            snapshot.reverse()
        yield from snapshot

    def __contains__(self, key: bytes) -> bool:
        return key in self.memory

    def clear(self) -> None:
        with self._lock:
            self.memory.clear()
            self._keys.clear()
