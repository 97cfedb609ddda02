"""
Bencode encoder for BitTorrent metainfo and tracker responses.

Output is canonical: minimal integer literals and dict keys in ascending
byte order, so equal values always encode to identical bytes.
"""
from .errors import BencodeEncodeError
from .structure import (
    DEFAULT_MAX_DEPTH,
    INT_MAX,
    INT_MIN,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
)


class _Chunk:
    """Already-encoded bytes waiting on the work stack."""
    __slots__ = ("data",)

    def __init__(self, data: bytes):
        self.data = data


# closes the innermost open list or dict
_END = _Chunk(b"e")


def encode(obj, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Encodes a Python object or BencodeType into bencoded bytes.

    Containers are walked with an explicit work stack, so nesting is bounded
    by ``max_depth`` rather than the interpreter's recursion limit.
    """
    chunks = []
    todo = [obj]
    depth = 0

    while todo:
        item = todo.pop()

        if item is _END:
            chunks.append(item.data)
            depth -= 1
            continue

        if isinstance(item, _Chunk):
            chunks.append(item.data)
            continue

        if isinstance(item, (list, tuple, BencodeList, dict, BencodeDict)):
            if depth >= max_depth:
                raise BencodeEncodeError("Nesting too deep to bencode")
            depth += 1
            todo.append(_END)

            if isinstance(item, (dict, BencodeDict)):
                chunks.append(b"d")
                pending = []
                for key, value in _sorted_items(item):
                    pending.append(_Chunk(encode_bytes(key)))
                    pending.append(value)
            else:
                chunks.append(b"l")
                pending = list(item)

            todo.extend(reversed(pending))
            continue

        chunks.append(_encode_scalar(item))

    return b"".join(chunks)


def _encode_scalar(obj) -> bytes:
    if isinstance(obj, BencodeInt):
        return encode_int(obj.value)

    if isinstance(obj, BencodeString):
        return encode_bytes(obj.value)

    if isinstance(obj, bool):
        raise BencodeEncodeError("Cannot bencode bool; use an int")

    if isinstance(obj, int):
        return encode_int(obj)

    if isinstance(obj, str):
        return encode_str(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return encode_bytes(bytes(obj))

    raise BencodeEncodeError(f"Cannot bencode object of type {type(obj).__name__}")


def _sorted_items(d):
    """Dict entries with keys as bytes, in ascending byte order."""
    if isinstance(d, BencodeDict):
        # already kept in canonical order
        return d.items()

    items = {}
    for key, value in d.items():
        if isinstance(key, str):
            key_bytes = key.encode()
        elif isinstance(key, (bytes, bytearray)):
            key_bytes = bytes(key)
        elif isinstance(key, BencodeString):
            key_bytes = key.value
        else:
            raise BencodeEncodeError(f"Dict keys must be bytes or str, got {type(key).__name__}")

        if key_bytes in items:
            raise BencodeEncodeError(f"Duplicate dict key after encoding: {key_bytes!r}")
        items[key_bytes] = value

    return sorted(items.items(), key=lambda kv: kv[0])


# ------------------------------------------------------------
#   Encoding primitives
# ------------------------------------------------------------

def encode_int(n: int) -> bytes:
    """Encodes an integer to bencoded bytes (e.g., i123e)."""
    if not isinstance(n, int) or isinstance(n, bool):
        raise BencodeEncodeError(f"Expected an int, got {type(n).__name__}")
    if not INT_MIN <= n <= INT_MAX:
        raise BencodeEncodeError(f"Integer out of 64-bit range: {n}")
    return f"i{n}e".encode()


def encode_bytes(b: bytes) -> bytes:
    """Encodes bytes to bencoded bytes (e.g., 4:spam)."""
    return str(len(b)).encode() + b":" + b


def encode_str(s: str) -> bytes:
    """Encodes a string to bencoded bytes (e.g., 4:spam)."""
    b = s.encode()
    return encode_bytes(b)


def encode_list(lst) -> bytes:
    """Encodes a list to bencoded bytes (e.g., l4:spame)."""
    if not isinstance(lst, (list, tuple, BencodeList)):
        raise BencodeEncodeError(f"Expected a list, got {type(lst).__name__}")
    return encode(lst)


def encode_dict(d) -> bytes:
    """Encodes a dictionary to bencoded bytes (e.g., d3:cow3:moo4:spam4:eggse)."""
    if not isinstance(d, (dict, BencodeDict)):
        raise BencodeEncodeError(f"Expected a dict, got {type(d).__name__}")
    return encode(d)
