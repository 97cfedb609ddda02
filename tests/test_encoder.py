import pytest

from bencodec import BencodeEncodeError, decode, encode, from_native
from bencodec.encoder import encode_bytes, encode_dict, encode_int, encode_list, encode_str
from bencodec.structure import BencodeDict, BencodeInt, BencodeList, BencodeString


def test_encode_primitives():
    assert encode_int(0) == b"i0e"
    assert encode_int(-42) == b"i-42e"
    assert encode_bytes(b"\x00\xff") == b"2:\x00\xff"
    assert encode_str("spam") == b"4:spam"
    assert encode_str("é") == b"2:\xc3\xa9"
    assert encode_list([1, b"a"]) == b"li1e1:ae"
    assert encode_dict({b"cow": b"moo", b"spam": b"eggs"}) == b"d3:cow3:moo4:spam4:eggse"


def test_encode_primitives_reject_wrong_types():
    with pytest.raises(BencodeEncodeError):
        encode_int(True)
    with pytest.raises(BencodeEncodeError):
        encode_list({b"a": 1})
    with pytest.raises(BencodeEncodeError):
        encode_dict([1])


def test_encode_native_objects():
    obj = {
        "info": {"name": "file.bin", "length": 1024},
        "announce": "http://tracker",
        b"list": [1, -2, (b"x",)],
    }
    assert encode(obj) == (
        b"d8:announce14:http://tracker"
        b"4:infod6:lengthi1024e4:name8:file.bine"
        b"4:listli1ei-2el1:xeee"
    )


def test_encode_matches_for_native_and_value_trees():
    native = {b"b": [1, 2], b"a": b"x"}
    assert encode(native) == encode(from_native(native)) == b"d1:a1:x1:bli1ei2eee"


def test_dict_keys_sorted_as_raw_bytes():
    d = BencodeDict({
        b"b": BencodeInt(1),
        b"\xff": BencodeInt(2),
        b"B": BencodeInt(3),
        b"ab": BencodeInt(4),
        b"a": BencodeInt(5),
    })
    assert encode(d) == b"d1:Bi3e1:ai5e2:abi4e1:bi1e1:\xffi2ee"


def test_mixed_key_types_sort_together():
    assert encode({"b": 1, b"a": 2}) == b"d1:ai2e1:bi1ee"


def test_colliding_keys_rejected():
    with pytest.raises(BencodeEncodeError):
        encode({"a": 1, b"a": 2})


@pytest.mark.parametrize("obj", [1.5, None, True, {1: 2}, [object()], 2 ** 63, -(2 ** 63) - 1])
def test_unencodable_objects(obj):
    with pytest.raises(BencodeEncodeError):
        encode(obj)


def test_encode_error_is_type_error():
    with pytest.raises(TypeError):
        encode(set())


def test_self_referencing_list_rejected():
    lst = [1]
    lst.append(lst)
    with pytest.raises(BencodeEncodeError):
        encode(lst)


def test_encode_depth_is_configurable():
    nested = [[[]]]
    assert encode(nested, max_depth=3) == b"llleee"
    with pytest.raises(BencodeEncodeError):
        encode(nested, max_depth=2)


def test_reencoding_is_idempotent():
    value = BencodeDict({
        b"z": BencodeList([BencodeString(b"\xfe"), BencodeInt(-1)]),
        b"a": BencodeDict({b"y": BencodeInt(0), b"x": BencodeString(b"")}),
    })
    once = encode(value)
    assert decode(once) == value
    assert encode(decode(once)) == once


def test_encode_deep_tree_with_large_limit():
    depth = 3000
    raw = b"l" * depth + b"e" * depth
    value = decode(raw, max_depth=depth)
    assert encode(value, max_depth=depth) == raw
    with pytest.raises(BencodeEncodeError):
        encode(value)
