"""Keys and values for users' internal token balances."""

from __future__ import annotations

from dataclasses import dataclass

from appic_dex.cbor import (
    CborDecodeError,
    Principal,
    decode_principal,
    decode_u256,
    dumps,
    encode_principal,
    encode_u256,
    loads,
)


def _require_principal(item, what: str) -> Principal:
    principal = decode_principal(item)
    if principal is None:
        raise CborDecodeError(f"failed to parse {what}: missing principal")
    return principal


@dataclass(frozen=True, order=True)
class UserBalanceKey:
    """Identifies the balance of one token held by one user."""

    user: Principal
    token: Principal

    def encode(self) -> bytes:
        """Serialise the key to CBOR."""
        return dumps([encode_principal(self.user), encode_principal(self.token)])

    @classmethod
    def decode(cls, data: bytes) -> "UserBalanceKey":
        """Parse a key produced by ``encode``."""
        item = loads(data)
        if not isinstance(item, list) or len(item) < 2:
            raise CborDecodeError("failed to parse balance key: expected an array")
        return cls(
            _require_principal(item[0], "balance key"),
            _require_principal(item[1], "balance key"),
        )


@dataclass(frozen=True, order=True)
class UserBalance:
    """An amount of a token, as an unsigned 256-bit integer."""

    amount: int = 0

    def encode(self) -> bytes:
        """Serialise the balance to CBOR."""
        return dumps([encode_u256(self.amount)])

    @classmethod
    def decode(cls, data: bytes) -> "UserBalance":
        """Parse a balance produced by ``encode``."""
        item = loads(data)
        if not isinstance(item, list) or len(item) < 1:
            raise CborDecodeError("failed to parse balance: expected an array")
        return cls(decode_u256(item[0]))