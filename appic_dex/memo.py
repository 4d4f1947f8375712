"""Memos attached to ledger transfers into and out of the pool manager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

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


class DepositMemoKind(IntEnum):
    """Why funds were transferred to the pool manager."""

    MINT_POSITION = 0
    INCREASE_POSITION = 1
    SWAP_IN = 2
    DEPOSIT = 3


class WithdrawMemoKind(IntEnum):
    """Why funds were transferred out of the pool manager."""

    BURN_POSITION = 0
    DECREASE_POSITION = 1
    SWAP_OUT = 2
    WITHDRAW_BALANCE = 3
    REFUND = 4
    COLLECT_FEES = 5
    WITHDRAW = 6


def _encode_memo(kind: int, principal: Principal, amount: int) -> bytes:
    # Fields carry indices 0 and 2, so index 1 is an empty slot.
    return dumps([int(kind), [encode_principal(principal), None, encode_u256(amount)]])


def _decode_memo(data: bytes, kinds: type[IntEnum], what: str) -> tuple[Any, Principal, int]:
    item = loads(data)
    if (
        not isinstance(item, list)
        or len(item) != 2
        or not isinstance(item[1], list)
        or len(item[1]) < 3
    ):
        raise CborDecodeError(f"failed to parse {what}: unexpected structure")
    index, fields = item
    if isinstance(index, bool) or not isinstance(index, int):
        raise CborDecodeError(f"failed to parse {what}: variant index is not an integer")
    try:
        kind = kinds(index)
    except ValueError as exc:
        raise CborDecodeError(f"failed to parse {what}: unknown variant {index}") from exc
    principal = decode_principal(fields[0])
    if principal is None:
        raise CborDecodeError(f"failed to parse {what}: missing principal")
    return kind, principal, decode_u256(fields[2])


@dataclass
class DepositMemo:
    """Memo of a transfer from a user to the pool manager."""

    kind: DepositMemoKind
    sender: Principal
    amount: int

    def encode(self) -> bytes:
        """Serialise the memo to the bytes carried by the transfer."""
        return _encode_memo(self.kind, self.sender, self.amount)

    @classmethod
    def decode(cls, data: bytes) -> "DepositMemo":
        """Parse memo bytes produced by ``encode``."""
        kind, sender, amount = _decode_memo(data, DepositMemoKind, "deposit memo")
        return cls(kind=kind, sender=sender, amount=amount)


@dataclass
class WithdrawMemo:
    """Memo of a transfer from the pool manager to a user."""

    kind: WithdrawMemoKind
    receiver: Principal
    amount: int

    def encode(self) -> bytes:
        """Serialise the memo to the bytes carried by the transfer."""
        return _encode_memo(self.kind, self.receiver, self.amount)

    @classmethod
    def decode(cls, data: bytes) -> "WithdrawMemo":
        """Parse memo bytes produced by ``encode``."""
        kind, receiver, amount = _decode_memo(data, WithdrawMemoKind, "withdraw memo")
        return cls(kind=kind, receiver=receiver, amount=amount)