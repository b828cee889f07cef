"""Options and range requests."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from .errors import ValidationError


@dataclass(frozen=True)
class Options:
    """Per-store, per-sublevel or per-call configuration.

    ``None`` means "unset": merging never lets an unset field override
    a set one. The root store fills whatever is still unset from
    ``DEFAULT_OPTIONS``.
    """

    key_encoding: str | None = None
    value_encoding: str | None = None
    sync: bool | None = None
    fill_cache: bool | None = None

    @classmethod
    def coerce(cls, value: Options | Mapping[str, Any] | None) -> Options:
        """Build an ``Options`` from a mapping of field names."""
        if value is None:
            return cls()
        if isinstance(value, Options):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"options must be Options or a mapping, not {type(value).__name__}"
            )
        known = {f.name for f in fields(cls)}
        unknown = set(value) - known
        if unknown:
            raise ValidationError(f"Unknown options: {', '.join(sorted(unknown))}")
        return cls(**value)

    def merge(self, overrides: Options | Mapping[str, Any] | None = None) -> Options:
        """Return a copy with the set fields of ``overrides`` applied."""
        other = Options.coerce(overrides)
        changes = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **changes) if changes else self


DEFAULT_OPTIONS = Options(
    key_encoding="utf8",
    value_encoding="utf8",
    sync=False,
    fill_cache=True,
)


@dataclass(frozen=True)
class KeyRange:
    """A range request over ordered keys.

    ``start`` and ``end`` are inclusive; ``None`` leaves that side
    unbounded. ``limit`` of -1 means no limit.
    """

    start: Any = None
    end: Any = None
    reverse: bool = False
    limit: int = -1
