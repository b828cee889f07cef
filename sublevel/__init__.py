"""sublevel: nested, prefixed key spaces over an ordered KV store."""

from .batch import ChainedBatch, Operation, PrefixedBatch
from .codecs import Codec, get_codec
from .errors import (
    DatabaseClosedError,
    EncodingError,
    InvalidNamespaceError,
    LevelError,
    NotFoundError,
    ValidationError,
    WriteError,
)
from .kv.base import OrderedKV
from .namespaced import Sublevel, sublevel
from .options import DEFAULT_OPTIONS, KeyRange, Options
from .store import Database, Level, fix_range, open_db
from .streams import Entry, WriteStream

__all__ = [
    "ChainedBatch",
    "Codec",
    "DEFAULT_OPTIONS",
    "Database",
    "DatabaseClosedError",
    "EncodingError",
    "Entry",
    "InvalidNamespaceError",
    "KeyRange",
    "Level",
    "LevelError",
    "NotFoundError",
    "Operation",
    "OrderedKV",
    "Options",
    "PrefixedBatch",
    "Sublevel",
    "ValidationError",
    "WriteError",
    "WriteStream",
    "fix_range",
    "get_codec",
    "open_db",
    "sublevel",
]
