"""Sublevel: a prefixed, nestable key space over a Level store."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Iterable, Iterator, Mapping

from . import keyspace
from .batch import _BINARY_KEYS, Operation, PrefixedBatch
from .codecs import decode, encode, get_codec
from .errors import ValidationError
from .options import KeyRange, Options
from .store import Database, Level, OptionsLike, fix_range
from .streams import Entry, WriteStream

logger = logging.getLogger(__name__)


class Sublevel:
    """A namespaced view over a ``Level`` store.

    Keys are prefixed with the sublevel's ``prefix`` (see
    ``keyspace``), and range reads are confined to that prefix so
    neither sibling, parent nor child keys leak through. Nested
    sublevels are created by wrapping another Sublevel or calling
    ``sublevel()``.

    All operations go straight to the root store with fully prefixed
    keys; the parent chain is only used to compose the prefix and the
    options.

    Implements the ``Database`` protocol.

    Args:
        parent: The root ``Level`` or another ``Sublevel``.
        name: The namespace name (must not contain ``\\x00`` or
            ``\\x01``). May be empty.
        options: Overrides merged over the parent's options.
    """

    def __init__(
        self,
        parent: Database,
        name: str | bytes = "",
        options: OptionsLike = None,
    ) -> None:
        if not isinstance(parent, Database):
            raise TypeError(
                f"Sublevel requires a Level or Sublevel, "
                f"not {type(parent).__name__}"
            )
        segment = keyspace.validate_segment(name)

        self.parent = parent
        self.name = name
        parent_prefix = parent.prefix if isinstance(parent, Sublevel) else b""
        self.prefix = keyspace.compose_prefix(parent_prefix, segment)
        self.options = parent.options.merge(options)
        self.db = self.top()
        logger.debug("Created sublevel %r", self.prefix)

    def __repr__(self) -> str:
        return f"Sublevel({self.prefix!r})"

    def top(self) -> Level:
        """The root store at the end of the parent chain."""
        node: Any = self
        while getattr(node, "parent", None) is not None:
            node = node.parent
        return node

    def sublevel(self, name: str | bytes, options: OptionsLike = None, **overrides: Any) -> Sublevel:
        """Create a child sublevel inheriting this one's options."""
        return Sublevel(self, name, Options.coerce(options).merge(overrides))

    # -- Key translation --

    def _merged(self, options: OptionsLike = None) -> Options:
        return self.options.merge(options)

    def _db_options(self, options: OptionsLike = None) -> Options:
        # keys reach the root store already prefixed
        return self._merged(options).merge(_BINARY_KEYS)

    def _encode_key(self, key: Any, opts: Options) -> bytes:
        if key is None:
            raise ValidationError("key cannot be None")
        return encode(get_codec(opts.key_encoding), key)

    def prefix_key(self, key: Any, *, options: OptionsLike = None) -> bytes:
        """Encode ``key`` and place it inside this key space."""
        encoded = self._encode_key(key, self._merged(options))
        return keyspace.prefix_key(self.prefix, encoded)

    def prefixer(self, options: OptionsLike = None) -> Callable[[Any], bytes]:
        opts = self._merged(options)
        codec = get_codec(opts.key_encoding)
        prefix = self.prefix + keyspace.KEY_BOUNDARY

        def fn(key: Any) -> bytes:
            if key is None:
                raise ValidationError("key cannot be None")
            return prefix + encode(codec, key)

        return fn

    def prefix_range(self, rng: KeyRange | None = None, *, options: OptionsLike = None) -> KeyRange:
        """Translate a relative range into absolute bounds for this key space.

        A missing ``start`` becomes the lowest key of the namespace and
        a missing ``end`` the highest. The result is still ascending;
        the store's ``fix_range`` is applied by the caller.
        """
        rng = rng or KeyRange()
        opts = self._merged(options)
        start = self._encode_key(rng.start, opts) if rng.start is not None else None
        end = self._encode_key(rng.end, opts) if rng.end is not None else None
        return keyspace.prefix_range(self.prefix, rng, start, end)

    def strip_prefix(self, key: bytes, *, options: OptionsLike = None) -> Any:
        """Remove this sublevel's prefix from a stored key and decode it."""
        codec = get_codec(self._merged(options).key_encoding)
        return decode(codec, keyspace.strip_prefix(self.prefix, key))

    # -- Single-key operations --

    def put(self, key: Any, value: Any, *, options: OptionsLike = None) -> None:
        """Put a value into the sublevel."""
        self.db.put(self.prefix_key(key, options=options), value, options=self._db_options(options))

    def get(self, key: Any, *, options: OptionsLike = None) -> Any:
        """Get a value from the sublevel."""
        return self.db.get(self.prefix_key(key, options=options), options=self._db_options(options))

    def delete(self, key: Any, *, options: OptionsLike = None) -> None:
        """Delete a key from the sublevel."""
        self.db.delete(self.prefix_key(key, options=options), options=self._db_options(options))

    # -- Batches --

    def batch(
        self,
        ops: Iterable[Operation | Mapping[str, Any]] | None = None,
        *,
        options: OptionsLike = None,
    ) -> PrefixedBatch | None:
        """Apply ``ops`` atomically, or return a chained batch.

        An operation whose ``prefix`` is another Sublevel on the same
        store is keyed into that sublevel instead of this one.
        Only the key follows the target sublevel: values are encoded
        with this sublevel's ``value_encoding`` (or ``options``), so a
        target with a different value encoding will not decode them.
        """
        if ops is None:
            return PrefixedBatch(self.db.batch(), self.prefixer(options), self._db_options(options))

        prefix = self.prefixer(options)
        rewritten = []
        for op in ops:
            op = Operation.coerce(op)
            if op.prefix is None:
                key = prefix(op.key)
            elif isinstance(op.prefix, Sublevel):
                if op.prefix.db is not self.db:
                    raise ValidationError("Batch operations must target the same database")
                key = op.prefix.prefix_key(op.key, options=options)
            else:
                raise ValidationError(
                    f"Operation prefix must be a Sublevel, not {type(op.prefix).__name__}"
                )
            rewritten.append(Operation(op.type, key, op.value))
        logger.debug("Sublevel %r submitting batch of %d", self.prefix, len(rewritten))
        self.db.batch(rewritten, options=self._db_options(options))
        return None

    # -- Streams --

    def _range(self, start, end, reverse, limit, options) -> KeyRange:
        return fix_range(self.prefix_range(KeyRange(start, end, reverse, limit), options=options))

    def create_read_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Entry]:
        """Stream ``Entry`` records of this sublevel with relative keys."""
        rng = self._range(start, end, reverse, limit, options)
        stream = self.db.iterator(rng, options=self._db_options(options))
        return self._unprefix_read_stream(stream, options)

    def create_key_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Any]:
        rng = self._range(start, end, reverse, limit, options)
        stream = self.db.iterator(rng, options=self._db_options(options), values=False)
        return self._unprefix_key_stream(stream, options)

    def create_value_stream(
        self,
        start: Any = None,
        end: Any = None,
        *,
        reverse: bool = False,
        limit: int = -1,
        options: OptionsLike = None,
    ) -> Iterator[Any]:
        rng = self._range(start, end, reverse, limit, options)
        return self.db.iterator(rng, options=self._db_options(options), keys=False)

    def _unprefix_read_stream(self, stream: Iterator[Entry], options: OptionsLike) -> Iterator[Entry]:
        for entry in stream:
            yield entry._replace(key=self.strip_prefix(entry.key, options=options))

    def _unprefix_key_stream(self, stream: Iterator[bytes], options: OptionsLike) -> Iterator[Any]:
        for key in stream:
            yield self.strip_prefix(key, options=options)

    def create_write_stream(self, *, options: OptionsLike = None) -> WriteStream:
        """A write stream whose records are keyed into this sublevel."""
        prefix = self.prefixer(options)

        def prefix_record(op: Operation) -> Operation:
            return replace(op, key=prefix(op.key))

        return self.db.create_write_stream(
            options=self._db_options(options),
            transforms=[prefix_record],
        )


def sublevel(
    parent: Database,
    name: str | bytes = "",
    options: OptionsLike = None,
    **overrides: Any,
) -> Sublevel:
    """Create a sublevel of ``parent``.

    Options may be given as an ``Options``/mapping, as keyword
    overrides, or both (keywords win)::

        items = sublevel(db, "items", value_encoding="json")
        posts = items.sublevel("posts")
    """
    return Sublevel(parent, name, Options.coerce(options).merge(overrides))
