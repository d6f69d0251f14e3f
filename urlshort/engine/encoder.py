"""
Base62 encoder for short tokens.

Alphabet order is part of the token contract: digits, then lowercase, then
uppercase. Changing it would re-map every issued token.

    encode(1)    -> "1"
    encode(61)   -> "Z"
    encode(62)   -> "10"
    encode(3843) -> "ZZ"

Tokens have no fixed width and no leading zero symbols; they grow by one
symbol each time the id crosses a power of 62. Id 0 encodes to "0" but is
never allocated (counters start at 1).
"""

from ..errors import EncodingError

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE = len(ALPHABET)

_INDEX = {ch: i for i, ch in enumerate(ALPHABET)}


def encode(ident: int) -> str:
    """
    Convert a non-negative integer to a Base62 token, most significant symbol first.

    Raises:
        EncodingError: If `ident` is negative or not an integer.
    """
    if isinstance(ident, bool) or not isinstance(ident, int):
        raise EncodingError(f"id must be an integer, got {type(ident).__name__}")
    if ident < 0:
        raise EncodingError("id must be non-negative")
    if ident == 0:
        return ALPHABET[0]
    out = []
    while ident > 0:
        ident, rem = divmod(ident, BASE)
        out.append(ALPHABET[rem])
    return "".join(reversed(out))


def decode(token: str) -> int:
    """Inverse of `encode`. Only used for debugging; resolution goes through the store."""
    if not token:
        raise EncodingError("token must be non-empty")
    num = 0
    for ch in token:
        try:
            num = num * BASE + _INDEX[ch]
        except KeyError:
            raise EncodingError(f"invalid Base62 symbol {ch!r}") from None
    return num
