import pytest
from hypothesis import given
from hypothesis import strategies as st

from trackerkit.bencode import BencodeError, bdecode, bencode

values = st.recursive(
    st.integers() | st.binary(max_size=30),
    lambda children: st.lists(children, max_size=5)
    | st.dictionaries(st.binary(max_size=10), children, max_size=5),
    max_leaves=20,
)


@given(values)
def test_round_trip(value):
    assert bdecode(bencode(value)) == value


@given(st.dictionaries(st.binary(max_size=8), st.integers(), max_size=8))
def test_dictionary_keys_are_written_sorted(mapping):
    decoded = bdecode(bencode(mapping))
    assert list(decoded) == sorted(mapping)


@given(st.text(max_size=20))
def test_str_encodes_as_utf8_bytes(text):
    assert bencode(text) == bencode(text.encode("utf-8"))
    assert bdecode(bencode(text)) == text.encode("utf-8")


def test_pinned_encodings():
    assert bencode(42) == b"i42e"
    assert bencode(b"spam") == b"4:spam"
    assert bencode([]) == b"le"


def test_failure_dictionary_prefix():
    encoded = bencode({"failure reason": "x"})
    assert encoded.startswith(b"d14:failure reason")
    assert bdecode(encoded) == {b"failure reason": b"x"}


def test_twenty_byte_key_uses_length_prefix():
    key = bytes(range(20))
    encoded = bencode({key: 1})
    assert encoded[1:4] == b"20:"
    assert bdecode(encoded) == {key: 1}


def test_tuple_encodes_as_list():
    assert bencode((1, b"a")) == bencode([1, b"a"])


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"i1",
        b"i01e",
        b"i-0e",
        b"ie",
        b"5:ab",
        b"01:a",
        b"i1ei2e",
        b"di1ei2ee",
        b"l",
        b"x",
    ],
)
def test_malformed_input_rejected(data):
    with pytest.raises(BencodeError):
        bdecode(data)


@pytest.mark.parametrize("value", [True, 1.5, None, {1: 2}, {"a": 1, b"a": 2}])
def test_unencodable_values_rejected(value):
    with pytest.raises(BencodeError):
        bencode(value)


def test_error_is_value_error():
    with pytest.raises(ValueError):
        bdecode(b"i1x")


def test_deep_nesting_is_reported():
    with pytest.raises(BencodeError):
        bdecode(b"l" * 100000 + b"e" * 100000)