"""
Bencode decoder for BitTorrent metainfo and tracker responses.
"""
import logging
import re
from typing import Optional, Tuple

from .errors import (
    SPAN_LIMIT,
    BencodeDecodeError,
    MalformedIntegerError,
    MalformedStringLengthError,
    NonStringDictKeyError,
    OddDictEntryCountError,
    RecursionLimitExceededError,
    TrailingBytesError,
    UnknownTagError,
    UnterminatedDictError,
    UnterminatedIntegerError,
    UnterminatedListError,
    UnterminatedStringError,
)
from .structure import (
    DEFAULT_MAX_DEPTH,
    INT_MAX,
    INT_MIN,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeType,
)

logger = logging.getLogger(__name__)

# Canonical literals only: no leading zeros, no "-0"
_INT_RE = re.compile(rb"0|-?[1-9][0-9]*")
_LENGTH_RE = re.compile(rb"0|[1-9][0-9]*")

# "-9223372036854775808" is the longest literal that can fit in 64 bits
_MAX_INT_DIGITS = 20


class _OpenContainer:
    """A list or dict whose terminator has not been reached yet."""
    __slots__ = ("parser", "start", "items", "key", "key_start", "last_key")

    def __init__(self, parser: str, start: int):
        self.parser = parser
        self.start = start
        self.items = {} if parser == "dict" else []
        self.key = None  # dict key waiting for its value
        self.key_start = 0
        self.last_key = None


class BencodeDecoder:
    """
    Decodes Bencoded byte strings into Bencode values.

    Scalars are parsed directly off a cursor into the input; lists and dicts
    are tracked on an explicit stack, so nesting is bounded by ``max_depth``
    alone and never by the interpreter's recursion limit.
    """
    def __init__(self, data: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"BencodeDecoder requires bytes, got {type(data).__name__}")
        if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 1:
            raise ValueError("max_depth must be a positive integer")
        self.data = bytes(data)
        self.max_depth = max_depth
        self.i = 0  # cursor index

    def decode(self) -> BencodeType:
        """Main decode entry point. Decodes the entire Bencoded data."""
        result, _ = self._run(0)
        if self.i != len(self.data):
            exc = TrailingBytesError(
                "decoder",
                f"{len(self.data) - self.i} unconsumed byte(s) after value",
                self.i,
                self._span(self.i),
            )
            logger.debug("Bencode decode failed: %s", exc)
            raise exc
        return result

    def decode_one(self, offset: int = 0) -> Tuple[BencodeType, int]:
        """
        Decodes a single value starting at ``offset``.
        Returns the value and the number of bytes it occupied.
        """
        if not 0 <= offset <= len(self.data):
            raise ValueError(f"offset {offset} outside input of length {len(self.data)}")
        return self._run(offset)

    def _run(self, offset: int) -> Tuple[BencodeType, int]:
        self.i = offset
        try:
            result = self._parse_value()
        except BencodeDecodeError as exc:
            logger.debug("Bencode decode failed: %s", exc)
            raise
        return result, self.i - offset

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _peek(self) -> bytes:
        """Returns the byte under the cursor, or b'' at end of input."""
        return self.data[self.i:self.i+1]

    def _consume(self, n=1):
        """Moves cursor forward by n bytes and returns the consumed chunk."""
        chunk = self.data[self.i:self.i+n]
        self.i += n
        return chunk

    def _span(self, start: int, end: Optional[int] = None) -> bytes:
        """Input bytes from ``start`` kept on an error, capped at SPAN_LIMIT."""
        stop = start + SPAN_LIMIT
        if end is not None:
            stop = min(stop, end)
        return self.data[start:stop]

    # --------------------------
    # Parsing functions
    # --------------------------

    def _parse_value(self) -> BencodeType:
        """Parses one complete value, containers included, from the cursor."""
        stack = []

        while True:
            top = stack[-1] if stack else None
            ch = self._peek()
            start = self.i

            if top is not None and not ch:
                error = UnterminatedListError if top.parser == "list" else UnterminatedDictError
                raise error(top.parser, "missing 'e' terminator", top.start, self._span(top.start))

            if top is not None and ch == b'e':
                self._consume(1)  # skip 'e'
                stack.pop()
                value = self._close(top)
                start = top.start
            elif ch == b'l' or ch == b'd':
                parser = "list" if ch == b'l' else "dict"
                if len(stack) >= self.max_depth:
                    raise RecursionLimitExceededError(
                        parser,
                        f"nesting deeper than {self.max_depth} levels",
                        start,
                        self._span(start),
                    )
                self._consume(1)  # skip 'l' / 'd'
                stack.append(_OpenContainer(parser, start))
                continue
            elif ch == b'i':
                value = self._parse_int()
            elif ch.isdigit():  # Bencode strings start with length, which is a digit
                value = self._parse_string()
            elif not ch:
                raise UnknownTagError("tag", "unexpected end of input", self.i)
            else:
                raise UnknownTagError("tag", f"invalid token {ch!r}", self.i, self._span(self.i))

            if not stack:
                return value
            self._add(stack[-1], value, start)

    def _close(self, container: _OpenContainer) -> BencodeType:
        if container.parser == "list":
            return BencodeList(container.items)

        if container.key is not None:
            # cursor is just past the 'e' that arrived in place of a value
            raise OddDictEntryCountError(
                "dict",
                f"key {container.key.value!r} has no value",
                container.key_start,
                self._span(container.key_start, self.i),
            )
        return BencodeDict(container.items)

    def _add(self, container: _OpenContainer, value: BencodeType, start: int):
        """
        Attaches a finished value to the innermost open container.
        Dicts alternate key, value; duplicate keys keep the last value and
        unsorted keys are accepted.
        """
        if container.parser == "list":
            container.items.append(value)
            return

        if container.key is None:
            # keys MUST be strings
            if not isinstance(value, BencodeString):
                raise NonStringDictKeyError(
                    "dict",
                    f"dict key must be a string, got {value.type_name}",
                    start,
                    self._span(start, self.i),
                )
            container.key = value
            container.key_start = start
            return

        k = container.key.value
        if k in container.items:
            logger.debug("Duplicate dict key %r at offset %d, keeping last value", k, container.key_start)
        elif container.last_key is not None and k < container.last_key:
            logger.debug("Dict key %r at offset %d is out of canonical order", k, container.key_start)
        container.last_key = k
        container.items[k] = value
        container.key = None

    def _parse_int(self) -> BencodeInt:
        """Parses an integer from the Bencoded data."""
        start = self.i

        end_pos = self.data.find(b'e', start + 1)
        if end_pos == -1:
            raise UnterminatedIntegerError("integer", "missing 'e' terminator", start, self._span(start))

        number_bytes = self.data[start+1:end_pos]
        if not _INT_RE.fullmatch(number_bytes):
            raise MalformedIntegerError(
                "integer",
                f"invalid integer literal {number_bytes[:SPAN_LIMIT]!r}",
                start,
                self._span(start, end_pos + 1),
            )

        num = int(number_bytes) if len(number_bytes) <= _MAX_INT_DIGITS else None
        if num is None or not INT_MIN <= num <= INT_MAX:
            raise MalformedIntegerError(
                "integer",
                "integer out of 64-bit range",
                start,
                self._span(start, end_pos + 1),
            )

        self.i = end_pos + 1  # skip 'e'
        return BencodeInt(num)

    def _parse_string(self) -> BencodeString:
        """Parses a byte string from the Bencoded data."""
        start = self.i

        # read length until ':'
        colon = self.data.find(b':', start)
        if colon == -1:
            raise UnterminatedStringError("string", "missing ':' after length", start, self._span(start))

        length_bytes = self.data[start:colon]
        if not _LENGTH_RE.fullmatch(length_bytes):
            raise MalformedStringLengthError(
                "string",
                f"invalid string length {length_bytes[:SPAN_LIMIT]!r}",
                start,
                self._span(start, colon + 1),
            )

        begin = colon + 1
        remaining = len(self.data) - begin
        # a prefix with more digits than the input size can never be satisfied
        if len(length_bytes) > len(str(len(self.data))) or int(length_bytes) > remaining:
            raise UnterminatedStringError(
                "string",
                f"declared length {length_bytes[:SPAN_LIMIT].decode()} exceeds {remaining} remaining byte(s)",
                start,
                self._span(start),
            )

        self.i = begin + int(length_bytes)
        return BencodeString(self.data[begin:self.i])


def decode(data: bytes, *, max_depth: int = DEFAULT_MAX_DEPTH) -> BencodeType:
    """
    Convenience function to decode Bencoded data.
    The whole input must be exactly one value.
    """
    return BencodeDecoder(data, max_depth).decode()


def decode_one(data: bytes, offset: int = 0, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[BencodeType, int]:
    """Decodes one value at ``offset``, returning it with the bytes consumed."""
    return BencodeDecoder(data, max_depth).decode_one(offset)
