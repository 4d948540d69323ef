"""
Error taxonomy shared by the store, the importer and both presentation layers.

Every failure the core raises carries an ``ErrorKind``. Adapters decide what
the user sees from ``error.kind`` alone:

    NOT_FOUND            -> "no such resource"
    everything else      -> "internal failure"
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    STORE_IO = "store_io"
    SOURCE_READ = "source_read"
    STORE_INIT = "store_init"


class Outcome(str, Enum):
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class QuoteServerError(Exception):
    """Base error; ``kind`` is fixed per subclass."""

    kind: ErrorKind = ErrorKind.STORE_IO

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class NotFound(QuoteServerError):
    kind = ErrorKind.NOT_FOUND


class StoreIoError(QuoteServerError):
    kind = ErrorKind.STORE_IO


class SourceReadError(QuoteServerError):
    kind = ErrorKind.SOURCE_READ


class StoreInitError(QuoteServerError):
    kind = ErrorKind.STORE_INIT


def outcome_for(kind: ErrorKind) -> Outcome:
    """Two-way split consumed by the JSON and HTML layers."""
    if kind is ErrorKind.NOT_FOUND:
        return Outcome.NOT_FOUND
    return Outcome.INTERNAL
