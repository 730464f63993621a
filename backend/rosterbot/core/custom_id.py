"""Custom ID Codec — length-prefixed key/value tokens for interactive UI handles.

Invariants:
    - Token grammar: for each key in ascending order, "<len(key)>:<key><len(value)>:<value>"
    - No separators between entries; lengths are explicit so no escaping is needed
    - Encoded tokens never exceed MAX_CUSTOM_ID_LENGTH characters
    - decode_custom_id(encode_custom_id(m)) == m for every encodable m
    - Malformed input raises MalformedTokenError, never IndexError/ValueError

Design Decisions:
    - Lengths count characters (str), matching how the platform measures handle size
"""

from rosterbot.core.errors import MalformedTokenError, SizeExceededError

MAX_CUSTOM_ID_LENGTH = 100


def encode_custom_id(items: dict[str, str]) -> str:
    """Encode a flat str->str map into a compact token."""
    token = "".join(
        f"{len(key)}:{key}{len(items[key])}:{items[key]}"
        for key in sorted(items)
    )
    if len(token) > MAX_CUSTOM_ID_LENGTH:
        raise SizeExceededError(len(token), MAX_CUSTOM_ID_LENGTH)
    return token


def decode_custom_id(token: str) -> dict[str, str]:
    """Decode a token produced by encode_custom_id."""
    items: dict[str, str] = {}
    pos = 0
    while pos < len(token):
        key, pos = _read_field(token, pos, "key")
        value, pos = _read_field(token, pos, "value")
        items[key] = value
    return items


def _read_field(token: str, pos: int, label: str) -> tuple[str, int]:
    """Read one "<len>:<text>" field starting at pos. Returns (text, next_pos)."""
    colon = token.find(":", pos)
    if colon == -1:
        raise MalformedTokenError(f"missing colon for {label} length")
    digits = token[pos:colon]
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedTokenError(f"invalid {label} length {digits!r}")
    length = int(digits)
    start = colon + 1
    if start + length > len(token):
        raise MalformedTokenError(f"{label} length exceeds token")
    return token[start:start + length], start + length
