import pytest
from cbor2 import CBORTag
from hypothesis import given
from hypothesis import strategies as st

from appic_dex.cbor import (
    CborDecodeError,
    Principal,
    decode_i128,
    decode_i256,
    decode_nat,
    decode_principal,
    decode_u128,
    decode_u256,
    dumps,
    encode_i128,
    encode_i256,
    encode_nat,
    encode_principal,
    encode_u128,
    encode_u256,
    loads,
)


def roundtrip(encode, decode, value):
    return decode(loads(dumps(encode(value))))


@given(st.integers(0, 2**256 - 1))
def test_u256_encoding_roundtrip(n):
    assert roundtrip(encode_u256, decode_u256, n) == n


@given(st.integers(0, 2**64 - 1))
def test_u256_small_value_encoding_roundtrip(n):
    assert roundtrip(encode_u256, decode_u256, n) == n


@given(st.integers(0, 2**128 - 1))
def test_u128_encoding_roundtrip(n):
    assert roundtrip(encode_u128, decode_u128, n) == n


@given(st.integers(0, 2**64 - 1))
def test_u128_small_value_encoding_roundtrip(n):
    assert roundtrip(encode_u128, decode_u128, n) == n


@given(st.integers(-(2**127), 2**127 - 1))
def test_i128_encoding_roundtrip(n):
    assert roundtrip(encode_i128, decode_i128, n) == n


@given(st.integers(-(2**63), 2**63 - 1))
def test_i128_small_value_encoding_roundtrip(n):
    assert roundtrip(encode_i128, decode_i128, n) == n


@given(st.integers(-(2**31), 2**255 - 1))
def test_i256_encoding_roundtrip(n):
    assert roundtrip(encode_i256, decode_i256, n) == n


@given(st.integers(0, 2**128 - 1))
def test_nat_encoding_roundtrip(n):
    assert roundtrip(encode_nat, decode_nat, n) == n


@given(st.none() | st.integers(0, 2**128 - 1))
def test_opt_nat_encoding_roundtrip(n):
    assert roundtrip(encode_nat, decode_nat, n) == n


@given(st.binary(max_size=29))
def test_principal_encoding_roundtrip(raw):
    principal = Principal(raw)
    assert roundtrip(encode_principal, decode_principal, principal) == principal


@given(st.none() | st.binary(max_size=29))
def test_opt_principal_encoding_roundtrip(raw):
    principal = None if raw is None else Principal(raw)
    assert roundtrip(encode_principal, decode_principal, principal) == principal


@given(st.binary(max_size=29))
def test_principal_text_roundtrip(raw):
    principal = Principal(raw)
    assert Principal.from_text(principal.to_text()) == principal


def test_small_values_are_plain_integers():
    assert encode_u256(5) == 5
    assert encode_u128(2**32) == 2**32
    assert encode_i128(-5) == -5
    assert encode_nat(0) == 0


def test_large_u256_is_minimal_bignum():
    assert encode_u256(2**64) == CBORTag(2, b"\x01" + bytes(8))
    assert dumps(encode_u128(2**64)) == bytes.fromhex("c249010000000000000000")


def test_i128_min_is_twos_complement_bignum():
    expected = CBORTag(2, b"\xff" * 8 + b"\x80" + bytes(7))
    assert encode_i128(-(2**63)) == expected
    assert decode_i128(expected) == -(2**63)


def test_i128_negative_bignum_decodes_as_negative():
    assert decode_i128(CBORTag(2, b"\xff" * 16)) == -1


def test_i256_wraps_below_i32_range():
    assert encode_i256(-(2**32) - 1) == -1


def test_nat_accepts_values_wider_than_256_bits():
    n = 2**300 + 7
    assert roundtrip(encode_nat, decode_nat, n) == n


def test_wrong_tag_rejected():
    with pytest.raises(CborDecodeError):
        decode_u256(CBORTag(3, b"\x01"))


def test_too_many_bytes_rejected():
    with pytest.raises(CborDecodeError):
        decode_u256(CBORTag(2, b"\x01" * 33))
    with pytest.raises(CborDecodeError):
        decode_u128(CBORTag(2, b"\x01" * 17))
    with pytest.raises(CborDecodeError):
        decode_i128(CBORTag(2, b"\x01" * 17))


def test_negative_unsigned_rejected():
    with pytest.raises(CborDecodeError):
        decode_u256(-1)


def test_wrong_item_type_rejected():
    with pytest.raises(CborDecodeError):
        decode_u128("12")
    with pytest.raises(CborDecodeError):
        decode_principal(12)


def test_principal_too_long_rejected():
    with pytest.raises(CborDecodeError):
        decode_principal(bytes(30))
    with pytest.raises(ValueError):
        Principal(bytes(30))


def test_encode_out_of_range_rejected():
    with pytest.raises(ValueError):
        encode_u256(2**256)
    with pytest.raises(ValueError):
        encode_u128(-1)
    with pytest.raises(ValueError):
        encode_i128(2**127)


def test_principal_text_known_values():
    assert Principal(b"").to_text() == "aaaaa-aa"
    assert Principal(b"\x04").to_text() == "2vxsx-fae"
    assert Principal.from_text("2vxsx-fae") == Principal(b"\x04")


def test_principal_text_bad_checksum():
    with pytest.raises(ValueError):
        Principal.from_text("2vxsx-faa")


def test_truncated_input_rejected():
    with pytest.raises(CborDecodeError):
        loads(b"\x1b\x00")