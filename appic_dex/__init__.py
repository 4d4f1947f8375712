"""Building blocks of a concentrated-liquidity exchange: codecs, guards, amount deltas, history, memos and ledger errors."""

__version__ = "0.1.0"

__all__ = [
    "amount_delta",
    "balances",
    "cbor",
    "guard",
    "historical",
    "ledger_errors",
    "memo",
]