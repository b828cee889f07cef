"""Key space layout for sublevels.

A sublevel's prefix is its parent's prefix followed by
``NAMESPACE_MARKER + name + PATH_SEPARATOR``. Keys written through the
sublevel are ``prefix + KEY_BOUNDARY + key``. Because the marker sorts
below the boundary, the keys of every child namespace sort before the
parent's own keys and never fall inside the parent's key range::

    \\x00items/\\x00posts/\\x01foo   <- key "foo" in items/posts
    \\x00items/\\x01foo              <- key "foo" in items
    \\x00users/\\x01foo              <- key "foo" in users

These constants are fixed for the life of the process; changing any of
them changes the on-disk layout.
"""

from __future__ import annotations

from .errors import InvalidNamespaceError
from .options import KeyRange

NAMESPACE_MARKER = b"\x00"
KEY_BOUNDARY = b"\x01"
PATH_SEPARATOR = b"/"
HIGH_SENTINEL = b"\xff"

RESERVED_BYTES = (NAMESPACE_MARKER, KEY_BOUNDARY)


def validate_segment(name: str | bytes) -> bytes:
    """Return ``name`` as bytes, rejecting reserved bytes."""
    if isinstance(name, str):
        segment = name.encode("utf-8")
    elif isinstance(name, (bytes, bytearray)):
        segment = bytes(name)
    else:
        raise TypeError(f"Sublevel name must be str or bytes, not {type(name).__name__}")
    for reserved in RESERVED_BYTES:
        if reserved in segment:
            raise InvalidNamespaceError(
                f"Sublevel names cannot contain {reserved!r}: {name!r}"
            )
    return segment


def compose_prefix(parent_prefix: bytes, segment: bytes) -> bytes:
    """Prefix for a child named ``segment`` under ``parent_prefix``.

    The root store has an empty prefix, so a top-level sublevel named
    ``items`` gets ``b"\\x00items/"`` and an unnamed one ``b"\\x00/"``.
    """
    return parent_prefix + NAMESPACE_MARKER + segment + PATH_SEPARATOR


def prefix_key(prefix: bytes, key: bytes) -> bytes:
    return prefix + KEY_BOUNDARY + key


def strip_prefix(prefix: bytes, key: bytes) -> bytes:
    return key[len(prefix) + len(KEY_BOUNDARY):]


def lower_bound(prefix: bytes) -> bytes:
    """The smallest key in the namespace."""
    return prefix + KEY_BOUNDARY


def upper_bound(prefix: bytes) -> bytes:
    """The end bound covering every key in the namespace.

    Keys that themselves begin with ``\\xff`` sort past this bound; UTF-8
    text never contains that byte.
    """
    return prefix + KEY_BOUNDARY + HIGH_SENTINEL


def prefix_range(
    prefix: bytes,
    rng: KeyRange,
    start: bytes | None = None,
    end: bytes | None = None,
) -> KeyRange:
    """Translate a namespace-relative range into absolute bounds.

    ``start`` and ``end`` are the already-encoded bounds of ``rng``;
    missing ones default to the namespace's own bounds. Ordering flags
    are left as they are.
    """
    return KeyRange(
        start=prefix_key(prefix, start) if start is not None else lower_bound(prefix),
        end=prefix_key(prefix, end) if end is not None else upper_bound(prefix),
        reverse=rng.reverse,
        limit=rng.limit,
    )
