"""
Data structures for representing Bencoded types.

Every value is immutable once constructed. Dict keys are raw bytes and are
kept in ascending byte order, so iteration (and encoding) is deterministic.
"""
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional

from .errors import TypeMismatchError

__all__ = [
    "BencodeType",
    "BencodeInt",
    "BencodeString",
    "BencodeList",
    "BencodeDict",
    "from_native",
    "DEFAULT_MAX_DEPTH",
    "INT_MIN",
    "INT_MAX",
]

# Bencode integers are held to the signed 64-bit range
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

# Deepest container nesting accepted by the decoder, encoder and from_native
DEFAULT_MAX_DEPTH = 256


class BencodeType:
    """Base class for all Bencode data types."""
    __slots__ = ("_value",)
    type_name = "value"

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def value(self):
        return self._value

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash((self.type_name, self._value))

    def __repr__(self):
        return f"{type(self).__name__}({self._value!r})"

    # --------------------------
    # Typed extraction
    # --------------------------

    def as_int(self) -> int:
        raise TypeMismatchError("integer", self.type_name)

    def as_bytes(self) -> bytes:
        raise TypeMismatchError("string", self.type_name)

    def as_str(self, encoding: str = "utf-8") -> str:
        raise TypeMismatchError("string", self.type_name)

    def as_list(self) -> List["BencodeType"]:
        raise TypeMismatchError("list", self.type_name)

    def as_dict(self) -> Dict[bytes, "BencodeType"]:
        raise TypeMismatchError("dict", self.type_name)

    def to_native(self):
        """Recursively converts to plain int / bytes / list / dict."""
        raise NotImplementedError


class BencodeInt(BencodeType):
    """Represents a Bencoded integer."""
    __slots__ = ()
    type_name = "integer"

    def __init__(self, value: int):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("BencodeInt requires an integer.")
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f"BencodeInt out of 64-bit range: {value}")
        object.__setattr__(self, "_value", int(value))

    def __str__(self):
        return str(self._value)

    def __int__(self):
        return self._value

    def as_int(self) -> int:
        return self._value

    def to_native(self) -> int:
        return self._value


class BencodeString(BencodeType):
    """
    Represents a Bencoded byte string.

    The raw bytes are authoritative; ``text`` is a convenience view that is
    ``None`` when the bytes are not valid UTF-8.
    """
    __slots__ = ()
    type_name = "string"

    def __init__(self, value: bytes):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("BencodeString requires bytes.")
        object.__setattr__(self, "_value", bytes(value))

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "BencodeString":
        return cls(text.encode(encoding))

    @property
    def text(self) -> Optional[str]:
        try:
            return self._value.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def __str__(self):
        text = self.text
        if text is not None:
            return f'"{text}"'
        return "[" + ", ".join(f"{b:02x}" for b in self._value) + "]"

    def __len__(self):
        return len(self._value)

    def __bytes__(self):
        return self._value

    def as_bytes(self) -> bytes:
        return self._value

    def as_str(self, encoding: str = "utf-8") -> str:
        # strict: raises UnicodeDecodeError on non-text payloads
        return self._value.decode(encoding)

    def to_native(self) -> bytes:
        return self._value


class BencodeList(BencodeType):
    """Represents a Bencoded list."""
    __slots__ = ()
    type_name = "list"

    def __init__(self, value=()):
        if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, Iterable):
            raise TypeError("BencodeList requires a sequence of values.")
        value = tuple(value)
        for item in value:
            if not isinstance(item, BencodeType):
                raise TypeError(f"BencodeList items must be Bencode values, got {type(item).__name__}")
        object.__setattr__(self, "_value", value)

    def __str__(self):
        return _render(self)

    def __len__(self):
        return len(self._value)

    def __iter__(self) -> Iterator[BencodeType]:
        return iter(self._value)

    def __getitem__(self, index):
        return self._value[index]

    def as_list(self) -> List[BencodeType]:
        return list(self._value)

    def to_native(self) -> list:
        return [item.to_native() for item in self._value]


def _key_bytes(key) -> bytes:
    if isinstance(key, BencodeString):
        return key.value
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    raise TypeError("BencodeDict keys must be bytes.")


def _lookup_key(key) -> bytes:
    """Like _key_bytes, but lets callers look entries up by text."""
    if isinstance(key, str):
        return key.encode("utf-8")
    return _key_bytes(key)


class BencodeDict(BencodeType):
    """
    Represents a Bencoded dictionary.

    Keys are stored in ascending byte order regardless of the order they
    were supplied in; equality does not depend on insertion order.
    """
    __slots__ = ()
    type_name = "dict"

    def __init__(self, value=None):
        if value is None:
            value = {}
        if not isinstance(value, (Mapping, BencodeDict)):
            raise TypeError("BencodeDict requires a mapping.")
        items = {}
        # keys must be bytes (bencode requirement)
        for k, v in value.items():
            if not isinstance(v, BencodeType):
                raise TypeError(f"BencodeDict values must be Bencode values, got {type(v).__name__}")
            items[_key_bytes(k)] = v
        object.__setattr__(self, "_value", dict(sorted(items.items())))

    @property
    def value(self):
        return MappingProxyType(self._value)

    def __hash__(self):
        return hash((self.type_name, tuple(self._value.items())))

    def __repr__(self):
        return f"BencodeDict({self._value!r})"

    def __str__(self):
        return _render(self)

    def __len__(self):
        return len(self._value)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._value)

    def __getitem__(self, key) -> BencodeType:
        return self._value[_lookup_key(key)]

    def __contains__(self, key) -> bool:
        try:
            return _lookup_key(key) in self._value
        except TypeError:
            return False

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self):
        return self._value.keys()

    def values(self):
        return self._value.values()

    def items(self):
        return self._value.items()

    def as_dict(self) -> Dict[bytes, BencodeType]:
        return dict(self._value)

    def to_native(self) -> Dict[bytes, Any]:
        return {k: v.to_native() for k, v in self._value.items()}


def _render(root: BencodeType) -> str:
    """
    Readable text for a value tree, built with a work stack so any depth the
    decoder accepts can be rendered.
    """
    out = []
    todo = [root]

    while todo:
        item = todo.pop()
        if isinstance(item, str):
            out.append(item)
            continue

        if isinstance(item, BencodeList):
            parts = ["["]
            for n, child in enumerate(item.value):
                if n:
                    parts.append(", ")
                parts.append(child)
            parts.append("]")
        elif isinstance(item, BencodeDict):
            if not len(item):
                out.append("{}")
                continue
            parts = ["{ "]
            for n, (key, child) in enumerate(item.items()):
                if n:
                    parts.append(", ")
                parts.append(f"{BencodeString(key)} : ")
                parts.append(child)
            parts.append(" }")
        else:
            out.append(str(item))
            continue

        todo.extend(reversed(parts))

    return "".join(out)


def from_native(obj, max_depth: int = DEFAULT_MAX_DEPTH) -> BencodeType:
    """
    Builds a Bencode value tree from plain Python objects.

    int -> BencodeInt, bytes/str -> BencodeString (str as UTF-8),
    list/tuple -> BencodeList, dict with bytes or str keys -> BencodeDict.
    Bencode values are returned unchanged. Containers are converted with a
    work stack, so nesting is bounded by ``max_depth`` only.
    """
    # each frame: [remaining children, converted so far, key of current child]
    stack = []
    item = obj

    while True:
        if isinstance(item, (list, tuple, dict)):
            if len(stack) >= max_depth:
                raise ValueError("Nesting too deep to convert to a Bencode value")
            if isinstance(item, dict):
                entries = [(_native_key(key), child) for key, child in item.items()]
                stack.append([iter(entries), {}, None])
            else:
                stack.append([iter(item), [], None])
            value = None
        else:
            value = _scalar_from_native(item)

        while True:
            if value is not None:
                if not stack:
                    return value
                frame = stack[-1]
                if isinstance(frame[1], dict):
                    frame[1][frame[2]] = value
                else:
                    frame[1].append(value)

            frame = stack[-1]
            entry = next(frame[0], _DONE)
            if entry is _DONE:
                stack.pop()
                done = frame[1]
                value = BencodeDict(done) if isinstance(done, dict) else BencodeList(done)
                continue

            if isinstance(frame[1], dict):
                frame[2], item = entry
            else:
                item = entry
            break


_DONE = object()


def _native_key(key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return _key_bytes(key)


def _scalar_from_native(obj) -> BencodeType:
    if isinstance(obj, BencodeType):
        return obj

    if isinstance(obj, bool):
        raise TypeError("Cannot convert bool to a Bencode value")

    if isinstance(obj, int):
        return BencodeInt(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodeString(obj)

    if isinstance(obj, str):
        return BencodeString.from_text(obj)

    raise TypeError(f"Cannot convert object of type {type(obj).__name__} to a Bencode value")
