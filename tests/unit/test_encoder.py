"""
Tests for the Base62 encoder.
Focus on alphabet order, length growth, injectivity and rejected inputs.
"""
import pytest

from urlshort.engine.encoder import ALPHABET, decode, encode
from urlshort.errors import EncodingError, ErrorKind


def test_alphabet_order_is_digits_lower_upper():
    assert ALPHABET[:10] == "0123456789"
    assert ALPHABET[10:36] == "abcdefghijklmnopqrstuvwxyz"
    assert ALPHABET[36:] == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert len(set(ALPHABET)) == 62


@pytest.mark.parametrize(
    "ident,token",
    [(1, "1"), (10, "a"), (36, "A"), (61, "Z"), (62, "10"), (3843, "ZZ"), (3844, "100")],
)
def test_known_values(ident, token):
    assert encode(ident) == token


def test_zero_encodes_to_first_symbol():
    assert encode(0) == "0"


def test_injective_and_never_empty():
    seen = set()
    for ident in range(1, 10_000):
        token = encode(ident)
        assert token != ""
        assert token not in seen
        seen.add(token)


def test_length_is_monotone_non_decreasing():
    prev = 0
    for ident in range(1, 250_000, 7):
        length = len(encode(ident))
        assert length >= prev
        prev = length


def test_length_boundaries():
    assert len(encode(61)) == 1
    assert len(encode(62)) == 2
    assert len(encode(62 ** 2 - 1)) == 2
    assert len(encode(62 ** 2)) == 3


def test_no_leading_zero_symbol():
    for ident in (1, 62, 3844, 238328, 2 ** 40):
        assert not encode(ident).startswith("0")


@pytest.mark.parametrize("ident", [1, 61, 62, 12345, 2 ** 63 - 1])
def test_decode_inverts_encode(ident):
    assert decode(encode(ident)) == ident


@pytest.mark.parametrize("bad", [-1, -62])
def test_negative_id_rejected(bad):
    with pytest.raises(EncodingError, match="non-negative") as ei:
        encode(bad)
    assert ei.value.kind is ErrorKind.ENCODING_ERROR


@pytest.mark.parametrize("bad", [1.5, "12", True, None])
def test_non_integer_id_rejected(bad):
    with pytest.raises(EncodingError, match="must be an integer"):
        encode(bad)


@pytest.mark.parametrize("bad", ["", "ab-c", "ü"])
def test_decode_rejects_invalid_tokens(bad):
    with pytest.raises(EncodingError):
        decode(bad)
