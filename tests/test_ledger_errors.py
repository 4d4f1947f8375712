import pytest

from appic_dex.cbor import Principal
from appic_dex.ledger_errors import (
    DepositError,
    DepositErrorKind,
    LedgerAmountTooLow,
    LedgerBadFee,
    LedgerFeeUnknown,
    LedgerInsufficientAllowance,
    LedgerInsufficientFunds,
    LedgerTemporarilyUnavailable,
    LedgerTransferError,
    WithdrawError,
    WithdrawErrorKind,
    deposit_error_from_ledger,
    withdraw_error_from_ledger,
)

LEDGER = Principal(bytes([7]) * 29)


def test_withdraw_temporarily_unavailable_keeps_message():
    error = LedgerTemporarilyUnavailable(message="ledger down", ledger=LEDGER)
    result = withdraw_error_from_ledger(error)
    assert result.kind is WithdrawErrorKind.TEMPORARILY_UNAVAILABLE
    assert result.message == "ledger down"
    assert result == WithdrawError(
        WithdrawErrorKind.TEMPORARILY_UNAVAILABLE, message="ledger down"
    )


def test_withdraw_insufficient_funds_is_a_bug():
    error = LedgerInsufficientFunds(balance=5, failed_amount=10, ledger=LEDGER)
    with pytest.raises(RuntimeError, match="should always hold enough"):
        withdraw_error_from_ledger(error)


def test_withdraw_insufficient_allowance_keeps_allowance():
    error = LedgerInsufficientAllowance(allowance=42, failed_amount=100, ledger=LEDGER)
    result = withdraw_error_from_ledger(error)
    assert result == WithdrawError(WithdrawErrorKind.INSUFFICIENT_ALLOWANCE, allowance=42)
    assert result.detail == 42


@pytest.mark.parametrize("error", [LedgerBadFee(expected_fee=10), LedgerFeeUnknown()])
def test_withdraw_fee_problems_become_fee_unknown(error):
    result = withdraw_error_from_ledger(error)
    assert result == WithdrawError(WithdrawErrorKind.FEE_UNKNOWN)
    assert result.detail is None


def test_withdraw_amount_too_low_is_a_bug():
    error = LedgerAmountTooLow(minimum_amount=10, failed_amount=3, ledger=LEDGER)
    with pytest.raises(RuntimeError, match="withdrawal amount 3"):
        withdraw_error_from_ledger(error)


def test_deposit_temporarily_unavailable_keeps_message():
    error = LedgerTemporarilyUnavailable(message="try again", ledger=LEDGER)
    result = deposit_error_from_ledger(error)
    assert result == DepositError(
        DepositErrorKind.TEMPORARILY_UNAVAILABLE, message="try again"
    )


def test_deposit_insufficient_funds_keeps_balance():
    error = LedgerInsufficientFunds(balance=5, failed_amount=10, ledger=LEDGER)
    result = deposit_error_from_ledger(error)
    assert result.kind is DepositErrorKind.INSUFFICIENT_FUNDS
    assert result.balance == 5


def test_deposit_insufficient_allowance_keeps_allowance():
    error = LedgerInsufficientAllowance(allowance=9, failed_amount=100, ledger=LEDGER)
    result = deposit_error_from_ledger(error)
    assert result == DepositError(DepositErrorKind.INSUFFICIENT_ALLOWANCE, allowance=9)


@pytest.mark.parametrize("error", [LedgerBadFee(expected_fee=10), LedgerFeeUnknown()])
def test_deposit_fee_problems_are_bugs(error):
    with pytest.raises(RuntimeError, match="Fee is not required for deposit"):
        deposit_error_from_ledger(error)


def test_deposit_amount_too_low_is_a_bug():
    error = LedgerAmountTooLow(minimum_amount=10, failed_amount=3, ledger=LEDGER)
    with pytest.raises(RuntimeError, match="deposit amount 3"):
        deposit_error_from_ledger(error)


def test_ledger_errors_compare_by_value():
    assert LedgerBadFee(expected_fee=1) == LedgerBadFee(expected_fee=1)
    assert LedgerBadFee(expected_fee=1) != LedgerBadFee(expected_fee=2)
    assert LedgerFeeUnknown() == LedgerFeeUnknown()


def test_ledger_errors_can_be_raised_and_caught_as_base():
    with pytest.raises(LedgerTransferError) as info:
        raise LedgerTemporarilyUnavailable(message="down", ledger=LEDGER)
    assert info.value.ledger == LEDGER
    assert str(info.value) == "down"


def test_missing_detail_is_rejected():
    with pytest.raises(ValueError):
        WithdrawError(WithdrawErrorKind.INSUFFICIENT_BALANCE)
    with pytest.raises(ValueError):
        DepositError(DepositErrorKind.AMOUNT_TOO_LOW)


def test_unexpected_detail_is_rejected():
    with pytest.raises(ValueError):
        WithdrawError(WithdrawErrorKind.LOCKED_PRINCIPAL, balance=1)
    with pytest.raises(ValueError):
        DepositError(DepositErrorKind.AMOUNT_OVERFLOW, message="x")


def test_withdraw_and_deposit_errors_differ_by_type():
    withdraw = WithdrawError(WithdrawErrorKind.LOCKED_PRINCIPAL)
    deposit = DepositError(DepositErrorKind.LOCKED_PRINCIPAL)
    assert withdraw != deposit
    assert withdraw == WithdrawError("LockedPrincipal")
    assert hash(withdraw) == hash(WithdrawError(WithdrawErrorKind.LOCKED_PRINCIPAL))


def test_non_ledger_error_is_rejected():
    with pytest.raises(TypeError):
        withdraw_error_from_ledger(ValueError("nope"))
    with pytest.raises(TypeError):
        deposit_error_from_ledger(ValueError("nope"))