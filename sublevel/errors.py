"""sublevel error types."""


class LevelError(Exception):
    """Base class for errors raised by the root store."""


class NotFoundError(LevelError, KeyError):
    """Raised by ``get`` when the key is absent.

    Attributes:
        key: The key as given to the store (prefixed when the
            lookup came through a sublevel).
    """

    def __init__(self, key) -> None:
        self.key = key
        super().__init__(f"Key not found in database [{key!r}]")

    def __str__(self) -> str:
        return self.args[0]


class ValidationError(LevelError, ValueError):
    """Raised for malformed options, operations, keys or values."""


class EncodingError(LevelError):
    """Raised when a key or value cannot be encoded or decoded."""


class WriteError(LevelError):
    """Raised when writing to an ended stream or a spent batch."""


class DatabaseClosedError(LevelError):
    """Raised when an operation is attempted on a closed store."""


class InvalidNamespaceError(ValueError):
    """Raised when a sublevel name contains a reserved byte."""
