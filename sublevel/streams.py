"""Stream records and the buffered write stream."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, NamedTuple

from .batch import Operation
from .errors import ValidationError, WriteError
from .options import Options

if TYPE_CHECKING:
    from .store import Level

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 128

Transform = Callable[[Operation], Operation]


class Entry(NamedTuple):
    """A key/value record emitted by a read stream."""

    key: Any
    value: Any


def as_operation(record: Any) -> Operation:
    """Normalize a written record into a batch ``Operation``.

    Accepts an ``Operation``, an ``Entry`` or ``(key, value)`` pair,
    or a mapping with ``key``, ``value`` and an optional ``type``.
    """
    if isinstance(record, Operation):
        return record
    if isinstance(record, Mapping):
        return Operation.coerce({"type": "put", **record})
    if isinstance(record, tuple) and len(record) == 2:
        return Operation("put", record[0], record[1])
    raise ValidationError(f"Cannot write record of type {type(record).__name__}")


class WriteStream:
    """Buffered sink that writes records to a store in batches.

    Every record passes through the ``transforms`` stages, in order,
    when it is written. Buffered operations are flushed as a single
    batch once ``buffer_size`` records are pending and when the stream
    is ended. Used as a context manager, the stream is ended on a clean
    exit; on error pending records are dropped and the stream closed.
    """

    def __init__(
        self,
        db: Level,
        *,
        options: Options | Mapping[str, Any] | None = None,
        transforms: Iterable[Transform] = (),
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        self._db = db
        self._options = options
        self._transforms = tuple(transforms)
        self._buffer_size = buffer_size
        self._pending: list[Operation] = []
        self._closed = False
        self.written = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, record: Any) -> None:
        if self._closed:
            raise WriteError("write() after end()")
        op = as_operation(record)
        for transform in self._transforms:
            op = transform(op)
        self._pending.append(op)
        if len(self._pending) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write pending operations to the store."""
        if not self._pending:
            return
        ops, self._pending = self._pending, []
        self._db.batch(ops, options=self._options)
        self.written += len(ops)
        logger.debug("Write stream flushed %d records", len(ops))

    def end(self, record: Any = None) -> None:
        """Optionally write a last record, flush and close the stream."""
        if record is not None:
            self.write(record)
        if self._closed:
            return
        self.flush()
        self._closed = True

    def destroy(self) -> None:
        """Close the stream, dropping pending records."""
        self._pending.clear()
        self._closed = True

    def __enter__(self) -> WriteStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.end()
        else:
            self.destroy()
