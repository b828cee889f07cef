"""Abstract ordered KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Literal

BackendOp = tuple[Literal["put", "del"], bytes, bytes | None]


class OrderedKV(ABC):
    """Ordered key-value store operating on bytes only.

    Keys sort by plain byte comparison. Encoding of keys and values is
    handled at higher layers (e.g., Level).
    """

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: bytes, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def remove(self, key: bytes) -> None:
        """Remove a key if present."""

    @abstractmethod
    def apply(self, ops: Iterable[BackendOp]) -> None:
        """Apply put/del operations in order, all or nothing."""

    @abstractmethod
    def scan(
        self,
        lower: bytes | None = None,
        upper: bytes | None = None,
        reverse: bool = False,
    ) -> Iterator[tuple[bytes, bytes]]:
        """Iterate over pairs with ``lower <= key <= upper``.

        Either bound may be None for an open side. Pairs come in
        ascending key order, or descending when ``reverse`` is set.
        """

    @abstractmethod
    def __contains__(self, key: bytes) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""

    def close(self) -> None:
        """Release backend resources."""
