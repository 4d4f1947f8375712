"""CBOR representations of wide integers, natural numbers and principals.

Each ``encode_*`` function turns a value into a CBOR data item that
``dumps`` can serialise, and each ``decode_*`` function turns a decoded
data item back into the value. Values that fit into 64 bits are written as
plain CBOR integers. Larger values are written as big-endian byte strings
under the positive-bignum tag (2).

``loads`` turns tag-2 bignums into Python ints, so the decoders accept a
bignum either as a ``CBORTag`` or as the int it became.
"""

from __future__ import annotations

import base64
import binascii
import zlib
from dataclasses import dataclass
from typing import Any, Optional

import cbor2
from cbor2 import CBORTag

POS_BIGNUM_TAG = 2
PRINCIPAL_MAX_LENGTH = 29

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_I32_MAX = 2**31 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class CborDecodeError(ValueError):
    """Raised when a CBOR item cannot be read as the expected value."""


@dataclass(frozen=True, order=True)
class Principal:
    """An opaque identifier of at most 29 bytes."""

    raw: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError("principal bytes must be bytes")
        if len(self.raw) > PRINCIPAL_MAX_LENGTH:
            raise ValueError(
                f"principal is longer than {PRINCIPAL_MAX_LENGTH} bytes: {len(self.raw)}"
            )
        object.__setattr__(self, "raw", bytes(self.raw))

    def to_text(self) -> str:
        """Return the textual form: CRC32 plus bytes, base32, dash-grouped."""
        checksum = zlib.crc32(self.raw).to_bytes(4, "big")
        encoded = base64.b32encode(checksum + self.raw).decode("ascii")
        encoded = encoded.lower().rstrip("=")
        return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        """Parse the textual form produced by ``to_text``."""
        compact = text.replace("-", "").upper()
        padding = "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(compact + padding)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid principal text: {text!r}") from exc
        if len(decoded) < 4:
            raise ValueError(f"principal text too short: {text!r}")
        principal = cls(decoded[4:])
        if zlib.crc32(principal.raw).to_bytes(4, "big") != decoded[:4]:
            raise ValueError(f"principal checksum mismatch: {text!r}")
        if principal.to_text() != text:
            raise ValueError(f"principal text is not in canonical form: {text!r}")
        return principal

    def __str__(self) -> str:
        return self.to_text()


def _bignum(value: int) -> CBORTag:
    length = max(1, (value.bit_length() + 7) // 8)
    be_bytes = value.to_bytes(length, "big").lstrip(b"\x00")
    return CBORTag(POS_BIGNUM_TAG, be_bytes)


def _check_int(value: Any, low: int, high: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int")
    if not low <= value <= high:
        raise ValueError(f"{value} is out of range for {what}")
    return value


def _bignum_value(item: Any, what: str, byte_limit: Optional[int]) -> int:
    if not isinstance(item, CBORTag):
        raise CborDecodeError(
            f"failed to parse {what}: expected an integer or a PosBignum tag"
        )
    if item.tag != POS_BIGNUM_TAG:
        raise CborDecodeError(f"failed to parse {what}: expected a PosBignum tag")
    payload = item.value
    if not isinstance(payload, (bytes, bytearray)):
        raise CborDecodeError(f"failed to parse {what}: bignum payload is not bytes")
    if byte_limit is not None and len(payload) > byte_limit:
        raise CborDecodeError(
            f"failed to parse {what}: expected at most {byte_limit} bytes, "
            f"got: {len(payload)}"
        )
    return int.from_bytes(payload, "big")


def _decode_unsigned(item: Any, what: str, byte_limit: Optional[int]) -> int:
    if isinstance(item, bool):
        raise CborDecodeError(f"failed to parse {what}: unexpected boolean")
    if isinstance(item, int):
        if item < 0:
            raise CborDecodeError(f"failed to parse {what}: negative value {item}")
        if byte_limit is not None and item.bit_length() > 8 * byte_limit:
            raise CborDecodeError(
                f"failed to parse {what}: expected at most {byte_limit} bytes"
            )
        return item
    return _bignum_value(item, what, byte_limit)


def _decode_signed(item: Any, what: str, width: int) -> int:
    bits = 8 * width
    if isinstance(item, bool):
        raise CborDecodeError(f"failed to parse {what}: unexpected boolean")
    if isinstance(item, int):
        if _I64_MIN <= item <= _I64_MAX:
            return item
        if item < 0:
            raise CborDecodeError(f"failed to parse {what}: {item} does not fit i64")
        if item.bit_length() > bits:
            raise CborDecodeError(
                f"failed to parse {what}: expected at most {width} bytes"
            )
        raw = item
    else:
        raw = _bignum_value(item, what, width)
    # Bignum bytes hold a two's-complement value of the full width.
    return raw - (1 << bits) if raw >> (bits - 1) else raw


def encode_u256(value: int) -> Any:
    """Encode an unsigned 256-bit integer."""
    _check_int(value, 0, 2**256 - 1, "u256")
    return value if value <= _U64_MAX else _bignum(value)


def decode_u256(item: Any) -> int:
    """Decode an unsigned 256-bit integer."""
    return _decode_unsigned(item, "u256", 32)


def encode_u128(value: int) -> Any:
    """Encode an unsigned 128-bit integer."""
    _check_int(value, 0, 2**128 - 1, "u128")
    return value if value <= _U64_MAX else _bignum(value)


def decode_u128(item: Any) -> int:
    """Decode an unsigned 128-bit integer."""
    return _decode_unsigned(item, "u128", 16)


def encode_i128(value: int) -> Any:
    """Encode a signed 128-bit integer."""
    _check_int(value, -(2**127), 2**127 - 1, "i128")
    if abs(value) <= _I64_MAX:
        return value
    return _bignum(value & (2**128 - 1))


def decode_i128(item: Any) -> int:
    """Decode a signed 128-bit integer."""
    return _decode_signed(item, "i128", 16)


def encode_i256(value: int) -> Any:
    """Encode a signed 256-bit integer.

    Every value at or below the 32-bit maximum is written as a 32-bit
    integer, keeping only its low 32 bits.
    """
    _check_int(value, -(2**255), 2**255 - 1, "i256")
    if value <= _I32_MAX:
        return ((value + 2**31) % 2**32) - 2**31
    if value <= _I64_MAX:
        return value
    return _bignum(value)


def decode_i256(item: Any) -> int:
    """Decode a signed 256-bit integer."""
    return _decode_signed(item, "i256", 32)


def encode_nat(value: Optional[int]) -> Any:
    """Encode a natural number of any size; ``None`` encodes as null."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("nat must be an int")
    if value < 0:
        raise ValueError(f"{value} is not a natural number")
    return value if value <= _U64_MAX else _bignum(value)


def decode_nat(item: Any) -> Optional[int]:
    """Decode a natural number; null decodes as ``None``."""
    if item is None:
        return None
    return _decode_unsigned(item, "Nat", None)


def encode_principal(principal: Optional[Principal]) -> Optional[bytes]:
    """Encode a principal as a byte string; ``None`` encodes as null."""
    if principal is None:
        return None
    return principal.raw


def decode_principal(item: Any) -> Optional[Principal]:
    """Decode a principal from a byte string; null decodes as ``None``."""
    if item is None:
        return None
    if not isinstance(item, (bytes, bytearray)):
        raise CborDecodeError("failed to parse principal: expected a byte string")
    try:
        return Principal(bytes(item))
    except ValueError as exc:
        raise CborDecodeError(str(exc)) from exc


def dumps(item: Any) -> bytes:
    """Serialise a CBOR data item."""
    return cbor2.dumps(item)


def loads(data: bytes) -> Any:
    """Deserialise a CBOR data item."""
    try:
        return cbor2.loads(data)
    except cbor2.CBORDecodeError as exc:
        raise CborDecodeError(str(exc)) from exc