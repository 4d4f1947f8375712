# appic_dex

Building blocks of a concentrated-liquidity exchange, as a plain Python library.

## Modules

- `appic_dex.cbor` – CBOR data items for wide integers and principals.
  `encode_u128` / `decode_u128`, `encode_u256` / `decode_u256`,
  `encode_i128` / `decode_i128`, `encode_i256` / `decode_i256`,
  `encode_nat` / `decode_nat` and `encode_principal` / `decode_principal`
  turn values into items and back; `dumps` and `loads` serialise items.
  Values that fit in 64 bits become plain CBOR integers, larger ones become
  positive bignums (tag 2). `encode_nat` and `encode_principal` write `None`
  as null. `Principal` is an identifier of at most 29 bytes with
  `to_text` / `from_text` for its checksummed, dash-grouped text form.
  Decoding failures raise `CborDecodeError` (a `ValueError`).
  Note that `encode_i256` writes every value at or below the 32-bit maximum as
  a 32-bit integer, keeping only its low 32 bits.
- `appic_dex.guard` – `PrincipalGuard` stops one principal from running
  conflicting operations. `PrincipalGuard.new_swap_guard` may be taken many
  times side by side; each gets the next `swap_number`, starting at 0.
  `PrincipalGuard.new_general_guard` fails if any guard is held for the
  principal, and while it is held no other guard can be taken. Failures raise
  `PrincipalGuardError`. A guard is given up with `release()` or by leaving its
  `with` block; `clear_guards()` forgets every guard.
- `appic_dex.amount_delta` – token amounts between two Q64.96 square-root
  prices: `get_amount_0_delta`, `get_amount_1_delta`, their signed forms
  `get_amount_0_delta_signed` / `get_amount_1_delta_signed`, and `abs_diff`.
  A zero price raises `InvalidPriceError`; results that do not fit raise
  `AmountOverflowError`. Both derive from `AmountDeltaError`.
- `appic_dex.historical` – per-pool history in hourly, daily, monthly and
  yearly buckets (`TimeFrame`). `capture_bucket` records a `PoolSnapshot` into
  one frame of a `PoolHistory`, `capture_all` into every frame from a
  nanosecond timestamp. A frame keeps at most `max_buckets(timeframe)` buckets
  (48, 60, 24 and 10), dropping the oldest. `PoolHistory.encode` /
  `PoolHistory.decode` serialise a history to CBOR.
- `appic_dex.balances` – `UserBalanceKey` (user and token principals) and
  `UserBalance` (an unsigned 256-bit amount), each with `encode` / `decode`.
- `appic_dex.memo` – `DepositMemo` and `WithdrawMemo`, tagged with a
  `DepositMemoKind` or `WithdrawMemoKind`, encoded to and decoded from CBOR.
- `appic_dex.ledger_errors` – the `LedgerTransferError` family
  (`LedgerTemporarilyUnavailable`, `LedgerAmountTooLow`,
  `LedgerInsufficientFunds`, `LedgerInsufficientAllowance`, `LedgerBadFee`,
  `LedgerFeeUnknown`) and `withdraw_error_from_ledger` /
  `deposit_error_from_ledger`, which turn them into `WithdrawError` or
  `DepositError`. Failures that cannot occur in a correctly working pool
  manager raise `RuntimeError` instead.

## Installation

```
pip install .
```

With the test tools:

```
pip install ".[test]"
```

## Examples

```python
from appic_dex.amount_delta import get_amount_0_delta

sqrt_price_1_1 = 79228162514264337593543950336
sqrt_price_121_100 = 87150978765690771352898345369
amount = get_amount_0_delta(sqrt_price_1_1, sqrt_price_121_100, 10**18, True)
# 90909090909090910
```

```python
from appic_dex.cbor import Principal
from appic_dex.guard import PrincipalGuard, PrincipalGuardError

user = Principal(bytes([1] * 29))
with PrincipalGuard.new_swap_guard(user) as guard:
    print(guard.swap_number)  # 0
    try:
        PrincipalGuard.new_general_guard(user)
    except PrincipalGuardError:
        pass  # a swap is still running for this principal
```

```python
from appic_dex import cbor

data = cbor.dumps(cbor.encode_u256(2**200))
assert cbor.decode_u256(cbor.loads(data)) == 2**200
```

## What this package does not do

It holds no pool state and runs no swaps, mints or burns; it talks to no token
ledger, so the ledger errors here are only described and converted, never
produced by a transfer; and it stores nothing – histories, balances and memos
are encoded to bytes for the caller to keep. There is no command-line program
or server.

## Running the tests

```
pytest
```