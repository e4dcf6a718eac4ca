import pytest

from crudbench.engine import KeyType
from crudbench.keyprovider import (
    OrderedInteger,
    OrderedString,
    UnorderedInteger,
    UnorderedString,
    hash_string,
    make_key_provider,
    xxh64,
)

S90 = "d79235c904e704c6c379c25fea98cd11b4d0f71900f91df2ecc87c25d7fff4b03be1bd13590485d3"
S250 = (
    S90
    + "1bc0feb2815d5c908f5a4633b8a9d5d6ec1c074d5d64ab296c6495f784f8294ac42b828a9c4ef45d3decc0a8dff00062adfb547fea6132f38afda36acf629cc15413acfe35a50fecbec285e9ee42b136"
)
S506 = (
    S250
    + "91088df6c3740c87c3d003e3addf1888a582ac5cb408feec138fe9a43c9fda574006e770bb0b5e84edcbeecc6f723960ed7d02591a7b2487bb317f83bfd95e44a69d957deb6b10e22d895a375acfa54143137feeb53921625bc9d582166477e562454fecc90f130662338c070bd709c27d8478abaa825dc69bc3aa89dc7ce076"
)


def test_ordered_string_26():
    s = OrderedString(1).key(12345678)
    assert len(s) == 26
    assert s == "0012345678d79235c904e704c6"


def test_unordered_string_26():
    s = UnorderedString(1).key(12345678)
    assert len(s) == 26
    assert s == "d79235c904e704c60012345678"


def test_ordered_string_90():
    s = OrderedString(5).key(12345678)
    assert len(s) == 90
    assert s == "0012345678" + S90


def test_unordered_string_90():
    s = UnorderedString(5).key(12345678)
    assert len(s) == 90
    assert s == S90 + "0012345678"


def test_ordered_string_250():
    s = OrderedString(15).key(12345678)
    assert len(s) == 250
    assert s == "0012345678" + S250


def test_unordered_string_250():
    s = UnorderedString(15).key(12345678)
    assert len(s) == 250
    assert s == S250 + "0012345678"


def test_ordered_string_506():
    s = OrderedString(31).key(12345678)
    assert len(s) == 506
    assert s == "0012345678" + S506


def test_unordered_string_506():
    s = UnorderedString(31).key(12345678)
    assert len(s) == 506
    assert s == S506 + "0012345678"


def test_xxh64_empty_input():
    assert xxh64(b"", 0) == 0xEF46DB3751D8E999


def test_xxh64_seed_changes_result():
    data = bytes(range(40))
    assert xxh64(data, 0) != xxh64(data, 1)
    assert 0 <= xxh64(data, 7) < 2**64


def test_hash_string_prefix_is_stable():
    assert hash_string(12345678, 5).startswith(hash_string(12345678, 1))


def test_ordered_integer_starts_at_one():
    assert OrderedInteger().key(0) == 1
    assert OrderedInteger().key(41) == 42


def test_unordered_integer_is_unique():
    provider = UnorderedInteger()
    keys = [provider.key(n) for n in range(5000)]
    assert len(set(keys)) == len(keys)
    assert all(0 <= k < 2**32 for k in keys)


def test_ordered_strings_sort_in_sample_order():
    provider = OrderedString(1)
    keys = [provider.key(n) for n in range(200)]
    assert keys == sorted(keys)


@pytest.mark.parametrize(
    "key_type,length",
    [
        (KeyType.STRING26, 26),
        (KeyType.STRING90, 90),
        (KeyType.STRING250, 250),
        (KeyType.STRING506, 506),
    ],
)
def test_make_key_provider_string_lengths(key_type, length):
    assert len(make_key_provider(key_type, False).key(12345678)) == length
    assert len(make_key_provider(key_type, True).key(12345678)) == length


def test_make_key_provider_integer():
    assert make_key_provider(KeyType.INTEGER, False) == OrderedInteger()
    assert make_key_provider(KeyType.INTEGER, True) == UnorderedInteger()


def test_make_key_provider_uuid_unsupported():
    with pytest.raises(ValueError):
        make_key_provider(KeyType.UUID, False)