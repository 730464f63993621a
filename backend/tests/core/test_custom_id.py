"""Custom ID Codec — tests for the length-prefixed token grammar.

Tests cover:
    - Keys emitted in ascending order with explicit lengths
    - Round trip, including values containing ':' and digits
    - 100-character ceiling (100 ok, 101 rejected)
    - Malformed tokens raise MalformedTokenError
"""

import pytest

from rosterbot.core.custom_id import (
    encode_custom_id, decode_custom_id, MAX_CUSTOM_ID_LENGTH,
)
from rosterbot.core.errors import MalformedTokenError, SizeExceededError


# ─── encode ──────────────────────────────────────────────────────

def test_encode_sorts_keys_and_prefixes_lengths():
    token = encode_custom_id({"message": "123", "action": "roster/join"})
    assert token == "6:action11:roster/join7:message3:123"


def test_encode_empty_map_is_empty_token():
    assert encode_custom_id({}) == ""


def test_encode_allows_empty_value():
    assert encode_custom_id({"k": ""}) == "1:k0:"


def test_encode_accepts_token_at_limit():
    token = encode_custom_id({"key": "v" * 92})
    assert len(token) == MAX_CUSTOM_ID_LENGTH


def test_encode_rejects_token_over_limit():
    with pytest.raises(SizeExceededError) as exc_info:
        encode_custom_id({"key": "v" * 93})
    assert exc_info.value.size == 101
    assert exc_info.value.limit == 100
    assert exc_info.value.code == "TOKEN_SIZE_EXCEEDED"


# ─── decode ──────────────────────────────────────────────────────

def test_decode_empty_token_is_empty_map():
    assert decode_custom_id("") == {}


def test_decode_reads_sequential_fields():
    assert decode_custom_id("1:a1:b2:cd3:efg") == {"a": "b", "cd": "efg"}


@pytest.mark.parametrize("items", [
    {"action": "roster/cancel", "message": "1234567890123456789"},
    {"a:b": "1:2:3"},
    {"10": "20", "x": ""},
    {"emoji": "🙋 join"},
])
def test_round_trip(items):
    assert decode_custom_id(encode_custom_id(items)) == items


def test_decode_rejects_missing_key_colon():
    with pytest.raises(MalformedTokenError, match="missing colon for key"):
        decode_custom_id("6action")


def test_decode_rejects_missing_value_colon():
    with pytest.raises(MalformedTokenError, match="missing colon for value"):
        decode_custom_id("1:a1b")


def test_decode_rejects_key_longer_than_token():
    with pytest.raises(MalformedTokenError, match="key length exceeds"):
        decode_custom_id("9:abc")


def test_decode_rejects_value_longer_than_token():
    with pytest.raises(MalformedTokenError, match="value length exceeds"):
        decode_custom_id("1:a5:bc")


@pytest.mark.parametrize("token", ["x:abc", "-1:a1:b", ":a1:b", "١:a1:b"])
def test_decode_rejects_non_numeric_length(token):
    with pytest.raises(MalformedTokenError):
        decode_custom_id(token)
