"""Batch operations and chained batch builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal, Mapping

from .errors import ValidationError, WriteError
from .options import Options

if TYPE_CHECKING:
    from .store import Level

_BINARY_KEYS = Options(key_encoding="binary")


@dataclass(frozen=True)
class Operation:
    """A single ``put`` or ``del`` within a batch.

    ``prefix`` optionally names the sublevel whose key space ``key``
    belongs to; sublevels use it to write into another namespace
    within the same atomic batch.
    """

    type: Literal["put", "del"]
    key: Any
    value: Any = None
    prefix: Any = None

    def __post_init__(self) -> None:
        if self.type not in ("put", "del"):
            raise ValidationError(f"Unknown operation type: {self.type!r}")
        if self.key is None:
            raise ValidationError("key cannot be None")
        if self.type == "put" and self.value is None:
            raise ValidationError("value cannot be None")

    @classmethod
    def coerce(cls, op: Operation | Mapping[str, Any]) -> Operation:
        if isinstance(op, Operation):
            return op
        if not isinstance(op, Mapping):
            raise ValidationError(
                f"batch operations must be Operation or mapping, "
                f"not {type(op).__name__}"
            )
        extra = set(op) - {"type", "key", "value", "prefix"}
        if extra:
            raise ValidationError(f"Unknown operation fields: {', '.join(sorted(extra))}")
        return cls(
            type=op.get("type"),  # type: ignore[arg-type]
            key=op.get("key"),
            value=op.get("value"),
            prefix=op.get("prefix"),
        )


class ChainedBatch:
    """Deferred batch builder over a ``Level`` store.

    ``put`` and ``delete`` queue operations and return the batch, so
    calls can be chained. ``write`` submits them as one atomic batch.
    Used as a context manager, the batch is written on a clean exit
    and discarded if the block raises.
    """

    def __init__(self, db: Level) -> None:
        self._db = db
        self._ops: list[Operation] = []
        self._written = False

    def _check(self) -> None:
        if self._written:
            raise WriteError("write() already called on this batch")

    def put(self, key: Any, value: Any) -> ChainedBatch:
        self._check()
        self._ops.append(Operation("put", key, value))
        return self

    def delete(self, key: Any) -> ChainedBatch:
        self._check()
        self._ops.append(Operation("del", key))
        return self

    def clear(self) -> ChainedBatch:
        self._check()
        self._ops.clear()
        return self

    @property
    def length(self) -> int:
        return len(self._ops)

    @property
    def written(self) -> bool:
        return self._written

    def write(self, *, options: Options | Mapping[str, Any] | None = None) -> None:
        """Commit the queued operations."""
        self._check()
        self._db.batch(self._ops, options=options)
        self._written = True

    def __enter__(self) -> ChainedBatch:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._written:
            self.write()


class PrefixedBatch:
    """Decorates a ``ChainedBatch`` so every key goes through a prefixer.

    Keys are rewritten as they are queued. ``options`` is the owning
    sublevel's resolved record; ``write`` merges per-call options over
    it, keeping keys binary since they are already encoded.
    """

    def __init__(
        self,
        batch: ChainedBatch,
        prefix: Callable[[Any], bytes],
        options: Options,
    ) -> None:
        self._batch = batch
        self._prefix = prefix
        self._options = options

    def put(self, key: Any, value: Any) -> PrefixedBatch:
        self._batch.put(self._prefix(key), value)
        return self

    def delete(self, key: Any) -> PrefixedBatch:
        self._batch.delete(self._prefix(key))
        return self

    def clear(self) -> PrefixedBatch:
        self._batch.clear()
        return self

    @property
    def length(self) -> int:
        return self._batch.length

    @property
    def written(self) -> bool:
        return self._batch.written

    def write(self, *, options: Options | Mapping[str, Any] | None = None) -> None:
        opts = self._options.merge(options).merge(_BINARY_KEYS)
        self._batch.write(options=opts)

    def __enter__(self) -> PrefixedBatch:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self.written:
            self.write()
