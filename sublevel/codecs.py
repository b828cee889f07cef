"""Codecs: key and value encodings understood by the store."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from .errors import EncodingError


@dataclass(frozen=True)
class Codec:
    """A named pair of encode/decode functions.

    ``encode`` turns a caller value into bytes for the backend and
    ``decode`` turns backend bytes back into a caller value.
    """

    name: str
    encode: Callable[[Any], bytes]
    decode: Callable[[bytes], Any]


def _utf8_encode(val: Any) -> bytes:
    if isinstance(val, (bytes, bytearray, memoryview)):
        return bytes(val)
    if isinstance(val, str):
        return val.encode("utf-8")
    return str(val).encode("utf-8")


def _utf8_decode(raw: bytes) -> str:
    return raw.decode("utf-8")


def _binary_encode(val: Any) -> bytes:
    if isinstance(val, (bytes, bytearray, memoryview)):
        return bytes(val)
    if isinstance(val, str):
        return val.encode("utf-8")
    raise TypeError(f"Expected bytes, got {type(val).__name__}")


def _json_encode(val: Any) -> bytes:
    return json.dumps(val, sort_keys=True).encode("utf-8")


def _json_decode(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))


utf8 = Codec("utf8", _utf8_encode, _utf8_decode)
binary = Codec("binary", _binary_encode, bytes)
json_codec = Codec("json", _json_encode, _json_decode)

ENCODINGS: dict[str, Codec] = {
    "utf8": utf8,
    "utf-8": utf8,
    "binary": binary,
    "json": json_codec,
}


def get_codec(name: str) -> Codec:
    """Look up a codec by encoding name."""
    try:
        return ENCODINGS[name]
    except KeyError:
        raise EncodingError(f"Unknown encoding: {name!r}") from None


def encode(codec: Codec, val: Any) -> bytes:
    """Encode ``val``, reporting failures as ``EncodingError``."""
    try:
        return codec.encode(val)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode with {codec.name}: {e}") from e


def decode(codec: Codec, raw: bytes) -> Any:
    """Decode ``raw``, reporting failures as ``EncodingError``."""
    try:
        return codec.decode(raw)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot decode with {codec.name}: {e}") from e
