"""Ledger transfer failures and the user-facing errors derived from them.

A failed ledger call is described by a ``LedgerTransferError``. Withdrawals
and deposits turn those into ``WithdrawError`` and ``DepositError``. Some
ledger failures cannot happen when the pool manager works correctly, and
converting them raises ``RuntimeError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional

from appic_dex.cbor import Principal


class LedgerTransferError(Exception):
    """Base class for failed transfers on a token ledger."""


@dataclass(eq=True)
class LedgerTemporarilyUnavailable(LedgerTransferError):
    """The ledger could not be reached or asked to try again later."""

    message: str
    ledger: Principal

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass(eq=True)
class LedgerAmountTooLow(LedgerTransferError):
    """The amount was below the ledger's minimum."""

    minimum_amount: int
    failed_amount: int
    ledger: Principal

    def __post_init__(self) -> None:
        super().__init__(
            f"amount {self.failed_amount} on the {self.ledger} ledger is below "
            f"the minimum {self.minimum_amount}"
        )


@dataclass(eq=True)
class LedgerInsufficientFunds(LedgerTransferError):
    """The payer's balance did not cover the amount."""

    balance: int
    failed_amount: int
    ledger: Principal

    def __post_init__(self) -> None:
        super().__init__(
            f"balance {self.balance} on the {self.ledger} ledger does not cover "
            f"{self.failed_amount}"
        )


@dataclass(eq=True)
class LedgerInsufficientAllowance(LedgerTransferError):
    """The approved allowance did not cover the amount."""

    allowance: int
    failed_amount: int
    ledger: Principal

    def __post_init__(self) -> None:
        super().__init__(
            f"allowance {self.allowance} on the {self.ledger} ledger does not cover "
            f"{self.failed_amount}"
        )


@dataclass(eq=True)
class LedgerBadFee(LedgerTransferError):
    """The ledger expected a different transfer fee."""

    expected_fee: int

    def __post_init__(self) -> None:
        super().__init__(f"bad fee, expected fee: {self.expected_fee}")


@dataclass(eq=True)
class LedgerFeeUnknown(LedgerTransferError):
    """The ledger's transfer fee is not known."""

    def __post_init__(self) -> None:
        super().__init__("ledger fee unknown")


class WithdrawErrorKind(Enum):
    """Why a withdrawal failed."""

    LOCKED_PRINCIPAL = "LockedPrincipal"
    AMOUNT_TOO_LOW = "AmountTooLow"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    INSUFFICIENT_ALLOWANCE = "InsufficientAllowance"
    TEMPORARILY_UNAVAILABLE = "TemporarilyUnavailable"
    INVALID_DESTINATION = "InvalidDestination"
    FEE_UNKNOWN = "FeeUnknown"
    AMOUNT_OVERFLOW = "AmountOverflow"


class DepositErrorKind(Enum):
    """Why a deposit failed."""

    LOCKED_PRINCIPAL = "LockedPrincipal"
    AMOUNT_TOO_LOW = "AmountTooLow"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INSUFFICIENT_ALLOWANCE = "InsufficientAllowance"
    TEMPORARILY_UNAVAILABLE = "TemporarilyUnavailable"
    INVALID_DESTINATION = "InvalidDestination"
    AMOUNT_OVERFLOW = "AmountOverflow"


_DETAIL_FIELDS = ("min_withdrawal_amount", "balance", "allowance", "message")


class _KindedError(Exception):
    """An error of one kind, carrying the single detail that kind requires."""

    _kinds: ClassVar[type[Enum]]
    _required: ClassVar[dict[Any, str]]

    def __init__(
        self,
        kind: Any,
        *,
        min_withdrawal_amount: Optional[int] = None,
        balance: Optional[int] = None,
        allowance: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        self.kind = self._kinds(kind)
        self.min_withdrawal_amount = min_withdrawal_amount
        self.balance = balance
        self.allowance = allowance
        self.message = message
        required = self._required.get(self.kind)
        for name in _DETAIL_FIELDS:
            value = getattr(self, name)
            if name == required and value is None:
                raise ValueError(f"{self.kind.value} requires {name}")
            if name != required and value is not None:
                raise ValueError(f"{self.kind.value} does not take {name}")
        super().__init__(self._describe())

    @property
    def detail(self) -> Any:
        """The value carried by this kind of error, or ``None``."""
        required = self._required.get(self.kind)
        return getattr(self, required) if required else None

    def _describe(self) -> str:
        required = self._required.get(self.kind)
        if required is None:
            return self.kind.value
        return f"{self.kind.value}({required}={getattr(self, required)!r})"

    def _key(self) -> tuple:
        return (type(self), self.kind, self.detail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _KindedError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._describe()})"


class WithdrawError(_KindedError):
    """A failed withdrawal from the pool manager."""

    _kinds = WithdrawErrorKind
    _required = {
        WithdrawErrorKind.AMOUNT_TOO_LOW: "min_withdrawal_amount",
        WithdrawErrorKind.INSUFFICIENT_BALANCE: "balance",
        WithdrawErrorKind.INSUFFICIENT_ALLOWANCE: "allowance",
        WithdrawErrorKind.TEMPORARILY_UNAVAILABLE: "message",
        WithdrawErrorKind.INVALID_DESTINATION: "message",
    }


class DepositError(_KindedError):
    """A failed deposit into the pool manager."""

    _kinds = DepositErrorKind
    _required = {
        DepositErrorKind.AMOUNT_TOO_LOW: "min_withdrawal_amount",
        DepositErrorKind.INSUFFICIENT_FUNDS: "balance",
        DepositErrorKind.INSUFFICIENT_ALLOWANCE: "allowance",
        DepositErrorKind.TEMPORARILY_UNAVAILABLE: "message",
        DepositErrorKind.INVALID_DESTINATION: "message",
    }


def withdraw_error_from_ledger(error: LedgerTransferError) -> WithdrawError:
    """Turn a failed ledger transfer into the withdrawal error it means."""
    if isinstance(error, LedgerTemporarilyUnavailable):
        return WithdrawError(
            WithdrawErrorKind.TEMPORARILY_UNAVAILABLE, message=error.message
        )
    if isinstance(error, LedgerInsufficientFunds):
        raise RuntimeError("Bug: Canister should always hold enough for withdrawal")
    if isinstance(error, LedgerInsufficientAllowance):
        return WithdrawError(
            WithdrawErrorKind.INSUFFICIENT_ALLOWANCE, allowance=error.allowance
        )
    if isinstance(error, (LedgerBadFee, LedgerFeeUnknown)):
        return WithdrawError(WithdrawErrorKind.FEE_UNKNOWN)
    if isinstance(error, LedgerAmountTooLow):
        raise RuntimeError(
            f"BUG: withdrawal amount {error.failed_amount} on the {error.ledger} "
            f"should always be higher than the ledger transaction fee "
            f"{error.minimum_amount}"
        )
    raise TypeError(f"not a ledger transfer error: {error!r}")


def deposit_error_from_ledger(error: LedgerTransferError) -> DepositError:
    """Turn a failed ledger transfer into the deposit error it means."""
    if isinstance(error, LedgerTemporarilyUnavailable):
        return DepositError(
            DepositErrorKind.TEMPORARILY_UNAVAILABLE, message=error.message
        )
    if isinstance(error, LedgerInsufficientFunds):
        return DepositError(DepositErrorKind.INSUFFICIENT_FUNDS, balance=error.balance)
    if isinstance(error, LedgerInsufficientAllowance):
        return DepositError(
            DepositErrorKind.INSUFFICIENT_ALLOWANCE, allowance=error.allowance
        )
    if isinstance(error, (LedgerBadFee, LedgerFeeUnknown)):
        raise RuntimeError("Bug: Fee is not required for deposit")
    if isinstance(error, LedgerAmountTooLow):
        raise RuntimeError(
            f"BUG: deposit amount {error.failed_amount} on the {error.ledger} "
            f"should always be higher than the ledger transaction fee "
            f"{error.minimum_amount}"
        )
    raise TypeError(f"not a ledger transfer error: {error!r}")