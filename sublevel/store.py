"""Database protocol, the Level root store and its factory."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import (
    Any,
    Iterable,
    Iterator,
    Literal,
    Mapping,
    Protocol,
    runtime_checkable,
)

from .batch import ChainedBatch, Operation
from .codecs import Codec, decode, encode, get_codec
from .errors import DatabaseClosedError, NotFoundError, ValidationError
from .kv.base import BackendOp, OrderedKV
from .kv.memory import Memory
from .options import DEFAULT_OPTIONS, KeyRange, Options
from .streams import DEFAULT_BUFFER_SIZE, Entry, Transform, WriteStream

logger = logging.getLogger(__name__)

OptionsLike = Options | Mapping[str, Any] | None


@runtime_checkable
class Database(Protocol):
    """Operations shared by the root store and sublevels.

    Implementations: ``Level``, ``Sublevel``.
    """

    options: Options

    def put(self, key: Any, value: Any, *, options: OptionsLike = None) -> None: ...
    def get(self, key: Any, *, options: OptionsLike = None) -> Any: ...
    def delete(self, key: Any, *, options: OptionsLike = None) -> None: ...
    def batch(self, ops: Iterable[Any] | None = None, *, options: OptionsLike = None): ...
    def create_read_stream(self, start: Any = None, end: Any = None, **kwargs) -> Iterator[Entry]: ...
    def create_key_stream(self, start: Any = None, end: Any = None, **kwargs) -> Iterator[Any]: ...
    def create_value_stream(self, start: Any = None, end: Any = None, **kwargs) -> Iterator[Any]: ...
    def create_write_stream(self, *, options: OptionsLike = None) -> WriteStream: ...


def fix_range(rng: KeyRange) -> KeyRange:
    """Convert an ascending range into the store's iteration convention.

    Bounds are first put in ascending order; a reverse range then has
    them swapped, since iteration starts at ``start``.
    """
    start, end = rng.start, rng.end
    if start is not None and end is not None and start > end:
        start, end = end, start
    if rng.reverse:
        start, end = end, start
    return replace(rng, start=start, end=end)


class Level:
    """Ordered key-value store over an ``OrderedKV`` backend.

    Keys and values are encoded with the codecs named by the effective
    options (store defaults merged with per-call overrides). Range
    primitives follow the store convention: ``start`` is where
    iteration begins, so a reversed range has ``start >= end``. The
    ``create_*_stream`` helpers take ascending ranges and normalize
    them with ``fix_range``.

    Implements the ``Database`` protocol.
    """

    def __init__(
        self,
        backend: OrderedKV | None = None,
        *,
        options: OptionsLike = None,
    ) -> None:
        self._backend = backend if backend is not None else Memory()
        self.options = DEFAULT_OPTIONS.merge(options)
        self._closed = False

    def __repr__(self) -> str:
        return f"Level({type(self._backend).__name__})"

    @property
    def backend(self) -> OrderedKV:
        return self._backend

    @property
    def is_open(self) -> bool:
        return not self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._backend.close()
        logger.debug("Closed %r", self)

    def _check_open(self) -> None:
        if self._closed:
            raise DatabaseClosedError("Database is not open")

    def _codecs(self, options: OptionsLike) -> tuple[Options, Codec, Codec]:
        opts = self.options.merge(options)
        return opts, get_codec(opts.key_encoding), get_codec(opts.value_encoding)

    # -- Single-key operations --

    def put(self, key: Any, value: Any, *, options: OptionsLike = None) -> None:
        self._check_open()
        if key is None:
            raise ValidationError("key cannot be None")
        if value is None:
            raise ValidationError("value cannot be None")
        _, kc, vc = self._codecs(options)
        self._backend.set(encode(kc, key), encode(vc, value))

    def get(self, key: Any, *, options: OptionsLike = None) -> Any:
        self._check_open()
        if key is None:
            raise ValidationError("key cannot be None")
        _, kc, vc = self._codecs(options)
        raw = self._backend.get(encode(kc, key))
        if raw is None:
            raise NotFoundError(key)
        return decode(vc, raw)

    def delete(self, key: Any, *, options: OptionsLike = None) -> None:
        self._check_open()
        if key is None:
            raise ValidationError("key cannot be None")
        _, kc, _ = self._codecs(options)
        self._backend.remove(encode(kc, key))

    # -- Batches --

    def batch(
        self,
        ops: Iterable[Operation | Mapping[str, Any]] | None = None,
        *,
        options: OptionsLike = None,
    ) -> ChainedBatch | None:
        """Apply ``ops`` atomically, or return a ``ChainedBatch``.

        Every operation is validated and encoded before the backend is
        touched, so a bad operation leaves the store unchanged.
        """
        self._check_open()
        if ops is None:
            return ChainedBatch(self)
        _, kc, vc = self._codecs(options)
        encoded: list[BackendOp] = []
        for op in ops:
            op = Operation.coerce(op)
            if op.type == "put":
                encoded.append(("put", encode(kc, op.key), encode(vc, op.value)))
            else:
                encoded.append(("del", encode(kc, op.key), None))
        self._backend.apply(encoded)
        logger.debug("Applied batch of %d operations", len(encoded))
        return None

    # -- Range reads --

    def iterator(
        self,
        rng: KeyRange | None = None,
        *,
        options: OptionsLike = None,
        keys: bool = True,
        values: bool = True,
    ) -> Iterator[Any]:
        """Iterate over ``rng`` in store convention.

        Yields ``Entry`` records, or bare keys or values when the other
        half is switched off.
        """
        self._check_open()
        rng = rng or KeyRange()
        _, kc, vc = self._codecs(options)
        start = encode(kc, rng.start) if rng.start is not None else None
        end = encode(kc, rng.end) if rng.end is not None else None
        lower, upper = (end, start) if rng.reverse else (start, end)
        return self._iterate(lower, upper, rng, kc, vc, keys, values)

    def _iterate(self, lower, upper, rng, kc, vc, keys, values) -> Iterator[Any]:
        count = 0
        for raw_key, raw_value in self._backend.scan(lower, upper, rng.reverse):
            if rng.limit >= 0 and count >= rng.limit:
                return
            count += 1
            if keys and values:
                yield Entry(decode(kc, raw_key), decode(vc, raw_value))
            elif keys:
                yield decode(kc, raw_key)
            else:
                yield decode(vc, raw_value)

    def _stream(self, start, end, reverse, limit, options, keys, values) -> Iterator[Any]:
        rng = fix_range(KeyRange(start, end, reverse, limit))
        return self.iterator(rng, options=options, keys=keys, values=values)

    def create_read_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Entry]:
        return self._stream(start, end, reverse, limit, options, True, True)

    def create_key_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Any]:
        return self._stream(start, end, reverse, limit, options, True, False)

    def create_value_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Any]:
        return self._stream(start, end, reverse, limit, options, False, True)

    # -- Write stream --

    def create_write_stream(
        self,
        *,
        options: OptionsLike = None,
        transforms: Iterable[Transform] = (),
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> WriteStream:
        self._check_open()
        return WriteStream(
            self,
            options=self.options.merge(options),
            transforms=transforms,
            buffer_size=buffer_size,
        )


ONE_GB = 1024 * 1024 * 1024


def open_db(
    storage: Literal["memory", "disk"] = "memory",
    *,
    path: str | None = None,
    options: OptionsLike = None,
    size_limit: int = ONE_GB,
) -> Level:
    """Create a ``Level`` store with sensible defaults.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. Directory path for
            the disk backend.
        options: Store-wide defaults, e.g. ``{"value_encoding": "json"}``.
        size_limit: Size limit for the disk backend in bytes.

    Returns:
        An open ``Level`` store.
    """
    if storage == "memory":
        backend: OrderedKV = Memory()
    elif storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .kv.disk import Disk

        backend = Disk(path, size_limit=size_limit)
    else:
        raise ValueError(f"Unknown storage: {storage!r}")

    db = Level(backend, options=options)
    logger.debug("Opened %r", db)
    return db
