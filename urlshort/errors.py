"""
Error taxonomy for urlshort.

Every failure the engine reports carries an explicit `ErrorKind` so the HTTP
layer (or any other caller) can tell "no such short token" apart from
"backend unavailable" without string matching.

    InvalidInputError  -> empty URL or empty token (caller contract violation)
    NotFoundError      -> token has no usable mapping
    StoreError         -> any storage collaborator failure, wrapped
    EncodingError      -> negative / non-integer id handed to the encoder
"""

from enum import Enum

__all__ = [
    "ErrorKind",
    "ShortenerError",
    "InvalidInputError",
    "NotFoundError",
    "StoreError",
    "EncodingError",
]


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"
    ENCODING_ERROR = "encoding_error"


class ShortenerError(Exception):
    """Base class for all urlshort errors."""

    kind: ErrorKind = ErrorKind.STORE_ERROR


class InvalidInputError(ShortenerError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class NotFoundError(ShortenerError, LookupError):
    kind = ErrorKind.NOT_FOUND


class StoreError(ShortenerError):
    """Wraps connectivity, throttling, malformed-record and counter failures."""

    kind = ErrorKind.STORE_ERROR


class EncodingError(ShortenerError, ValueError):
    kind = ErrorKind.ENCODING_ERROR
