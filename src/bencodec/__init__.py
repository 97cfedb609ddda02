"""
Bencode package for encoding and decoding BitTorrent data.
"""
from .decoder import BencodeDecoder, decode, decode_one
from .encoder import encode
from .errors import (
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    DecodeErrorKind,
    MalformedIntegerError,
    MalformedStringLengthError,
    NonStringDictKeyError,
    OddDictEntryCountError,
    RecursionLimitExceededError,
    TrailingBytesError,
    TypeMismatchError,
    UnknownTagError,
    UnterminatedDictError,
    UnterminatedIntegerError,
    UnterminatedListError,
    UnterminatedStringError,
)
from .structure import (
    DEFAULT_MAX_DEPTH,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeType,
    from_native,
)

__version__ = "0.1.0"

__all__ = [
    'decode', 'decode_one', 'encode', 'from_native', 'BencodeDecoder',
    'BencodeType', 'BencodeInt', 'BencodeString', 'BencodeList', 'BencodeDict',
    'DEFAULT_MAX_DEPTH',
    'BencodeError', 'BencodeDecodeError', 'BencodeEncodeError', 'TypeMismatchError',
    'DecodeErrorKind',
    'UnterminatedIntegerError', 'MalformedIntegerError',
    'UnterminatedStringError', 'MalformedStringLengthError',
    'UnterminatedListError', 'UnterminatedDictError',
    'NonStringDictKeyError', 'OddDictEntryCountError',
    'UnknownTagError', 'TrailingBytesError', 'RecursionLimitExceededError',
]
