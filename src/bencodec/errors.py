"""
Exception hierarchy for Bencode decoding, encoding and value conversion.
"""
from enum import Enum
from typing import Any, Dict, Optional

# Bytes of input kept on a decode error for diagnostics
SPAN_LIMIT = 32


class DecodeErrorKind(Enum):
    """Every way a decode can fail."""
    UNTERMINATED_INTEGER = "UnterminatedInteger"
    MALFORMED_INTEGER = "MalformedInteger"
    UNTERMINATED_STRING = "UnterminatedString"
    MALFORMED_STRING_LENGTH = "MalformedStringLength"
    UNTERMINATED_LIST = "UnterminatedList"
    UNTERMINATED_DICT = "UnterminatedDict"
    NON_STRING_DICT_KEY = "NonStringDictKey"
    ODD_DICT_ENTRY_COUNT = "OddDictEntryCount"
    UNKNOWN_TAG = "UnknownTag"
    TRAILING_BYTES = "TrailingBytes"
    RECURSION_LIMIT_EXCEEDED = "RecursionLimitExceeded"


class BencodeError(Exception):
    """Base exception for all bencodec errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class BencodeDecodeError(BencodeError, ValueError):
    """
    Raised when input bytes are not valid Bencode.

    Carries the sub-parser that failed, a reason, the byte offset where the
    offending element starts and a short span of the input from there.
    """
    kind: Optional[DecodeErrorKind] = None

    def __init__(self, parser: str, reason: str, offset: int = 0, span: bytes = b""):
        self.parser = parser
        self.reason = reason
        self.offset = offset
        self.span = bytes(span[:SPAN_LIMIT])
        super().__init__(
            f"{parser}: {reason} at offset {offset}",
            {"near": self.snippet} if self.span else None,
        )

    @property
    def snippet(self) -> str:
        """Lossy text rendering of the offending span."""
        return self.span.decode("utf-8", errors="replace")


class UnterminatedIntegerError(BencodeDecodeError):
    kind = DecodeErrorKind.UNTERMINATED_INTEGER


class MalformedIntegerError(BencodeDecodeError):
    kind = DecodeErrorKind.MALFORMED_INTEGER


class UnterminatedStringError(BencodeDecodeError):
    """Missing colon, or the declared length runs past the end of input."""
    kind = DecodeErrorKind.UNTERMINATED_STRING


class MalformedStringLengthError(BencodeDecodeError):
    kind = DecodeErrorKind.MALFORMED_STRING_LENGTH


class UnterminatedListError(BencodeDecodeError):
    kind = DecodeErrorKind.UNTERMINATED_LIST


class UnterminatedDictError(BencodeDecodeError):
    kind = DecodeErrorKind.UNTERMINATED_DICT


class NonStringDictKeyError(BencodeDecodeError):
    kind = DecodeErrorKind.NON_STRING_DICT_KEY


class OddDictEntryCountError(BencodeDecodeError):
    """A dict key with no value before the terminator."""
    kind = DecodeErrorKind.ODD_DICT_ENTRY_COUNT


class UnknownTagError(BencodeDecodeError):
    kind = DecodeErrorKind.UNKNOWN_TAG


class TrailingBytesError(BencodeDecodeError):
    kind = DecodeErrorKind.TRAILING_BYTES


class RecursionLimitExceededError(BencodeDecodeError):
    kind = DecodeErrorKind.RECURSION_LIMIT_EXCEEDED


class TypeMismatchError(BencodeError, TypeError):
    """Raised when a value is extracted as the wrong variant."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected}, got {actual}")


class BencodeEncodeError(BencodeError, TypeError):
    """Raised when an object cannot be bencoded."""
