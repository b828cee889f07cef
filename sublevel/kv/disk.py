"""Disk-backed ordered KV store using diskcache."""

import logging
from typing import Iterable, Iterator, cast

from .base import BackendOp, OrderedKV

logger = logging.getLogger(__name__)

ONE_GB = 1024 * 1024 * 1024


class Disk(OrderedKV):
    """Ordered KV store backed by diskcache (SQLite + mmap).

    Keys are stored as raw blobs, which SQLite orders by byte
    comparison, so ``iterkeys`` already walks them in key order.
    diskcache has no seek, so a bounded ``scan`` walks keys from the
    start (or end, reversed) of the cache up to the range and stops
    once it passes the far bound; its cost grows with the number of
    keys sorting before the range.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache as DiskCache

        self.store = DiskCache(directory, size_limit=size_limit)
        logger.debug("Opened disk backend at %s", directory)

    def get(self, key: bytes) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def set(self, key: bytes, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.store[key] = value

    def remove(self, key: bytes) -> None:
        try:
            del self.store[key]
        except KeyError:
            pass

    def apply(self, ops: Iterable[BackendOp]) -> None:
        ops = list(ops)
        for kind, _, value in ops:
            if kind == "put" and not isinstance(value, bytes):
                raise TypeError(f"Expected bytes, got {type(value).__name__}")
        with self.store.transact():
            for kind, key, value in ops:
                if kind == "put":
                    self.store[key] = value
                else:
                    self.store.delete(key, retry=False)

    def scan(
        self,
        lower: bytes | None = None,
        upper: bytes | None = None,
        reverse: bool = False,
    ) -> Iterator[tuple[bytes, bytes]]:
        first, last = (upper, lower) if reverse else (lower, upper)
        for key in self.store.iterkeys(reverse=reverse):
            key = bytes(key)
            if first is not None and (key > first if reverse else key < first):
                continue
            if last is not None and (key < last if reverse else key > last):
                break
            value = self.store.get(key)
            if value is not None:
                yield key, cast(bytes, value)

    def __contains__(self, key: bytes) -> bool:
        return key in self.store

    def clear(self) -> None:
        self.store.clear()

    def close(self) -> None:
        self.store.close()
        logger.debug("Closed disk backend at %s", self.store.directory)
