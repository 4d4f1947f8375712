"""Pre-aggregated pool history in hourly, daily, monthly and yearly buckets.

Each bucket records where the pool's cumulative counters stood when the
bucket opened, how far they moved while it was open, and the latest
reserves, price, liquidity and tick. Only a bounded number of the most
recent buckets is kept per timeframe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from appic_dex.cbor import (
    CborDecodeError,
    decode_u128,
    decode_u256,
    dumps,
    encode_u128,
    encode_u256,
    loads,
)

_U64_MAX = 2**64 - 1
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class TimeFrame(Enum):
    """Width of a history bucket."""

    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_DURATION_SECS = {
    TimeFrame.HOURLY: 60 * 60,
    TimeFrame.DAILY: 24 * 60 * 60,
    TimeFrame.MONTHLY: 30 * 24 * 60 * 60,
    TimeFrame.YEARLY: 365 * 24 * 60 * 60,
}

_MAX_BUCKETS = {
    TimeFrame.HOURLY: 48,
    TimeFrame.DAILY: 60,
    TimeFrame.MONTHLY: 24,
    TimeFrame.YEARLY: 10,
}


@dataclass(frozen=True)
class PoolSnapshot:
    """The part of a pool's state that history buckets record."""

    swap_volume0_all_time: int = 0
    swap_volume1_all_time: int = 0
    generated_swap_fee0: int = 0
    generated_swap_fee1: int = 0
    pool_reserve0: int = 0
    pool_reserve1: int = 0
    sqrt_price_x96: int = 0
    liquidity: int = 0
    tick: int = 0


def _decode_u64(item: Any) -> int:
    if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= _U64_MAX:
        raise CborDecodeError(f"failed to parse u64: {item!r}")
    return item


def _decode_i32(item: Any) -> int:
    if isinstance(item, bool) or not isinstance(item, int) or not _I32_MIN <= item <= _I32_MAX:
        raise CborDecodeError(f"failed to parse i32: {item!r}")
    return item


def _encode_i32(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("i32 must be an int")
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"{value} is out of range for i32")
    return value


def _encode_u64(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("u64 must be an int")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{value} is out of range for u64")
    return value


_Codec = tuple[str, Callable[[Any], Any], Callable[[Any], Any]]

_BUCKET_FIELDS: tuple[_Codec, ...] = (
    ("start_timestamp", _encode_u64, _decode_u64),
    ("end_timestamp", _encode_u64, _decode_u64),
    ("swap_volume_token0_start", encode_u256, decode_u256),
    ("swap_volume_token0_during_bucket", encode_u256, decode_u256),
    ("swap_volume_token1_start", encode_u256, decode_u256),
    ("swap_volume_token1_during_bucket", encode_u256, decode_u256),
    ("fee_generated_token0_start", encode_u256, decode_u256),
    ("fee_generated_token0_during_bucket", encode_u256, decode_u256),
    ("fee_generated_token1_start", encode_u256, decode_u256),
    ("fee_generated_token1_during_bucket", encode_u256, decode_u256),
    ("token0_reserves", encode_u256, decode_u256),
    ("token1_reserves", encode_u256, decode_u256),
    ("last_sqrtx96_price", encode_u256, decode_u256),
    ("inrange_liquidity", encode_u128, decode_u128),
    ("active_tick", _encode_i32, _decode_i32),
)


@dataclass(order=True)
class HistoryBucket:
    """History data for one bucket of one timeframe."""

    start_timestamp: int = 0
    end_timestamp: int = 0
    swap_volume_token0_start: int = 0
    swap_volume_token0_during_bucket: int = 0
    swap_volume_token1_start: int = 0
    swap_volume_token1_during_bucket: int = 0
    fee_generated_token0_start: int = 0
    fee_generated_token0_during_bucket: int = 0
    fee_generated_token1_start: int = 0
    fee_generated_token1_during_bucket: int = 0
    token0_reserves: int = 0
    token1_reserves: int = 0
    last_sqrtx96_price: int = 0
    inrange_liquidity: int = 0
    active_tick: int = 0

    def to_cbor(self) -> list:
        """Return the bucket as a CBOR array item, fields in index order."""
        return [encode(getattr(self, name)) for name, encode, _ in _BUCKET_FIELDS]

    @classmethod
    def from_cbor(cls, item: Any) -> "HistoryBucket":
        """Build a bucket from a decoded CBOR array item."""
        if not isinstance(item, list) or len(item) < len(_BUCKET_FIELDS):
            raise CborDecodeError("failed to parse history bucket: expected an array")
        return cls(
            **{
                name: decode(value)
                for (name, _, decode), value in zip(_BUCKET_FIELDS, item)
            }
        )


_FRAME_NAMES = {
    TimeFrame.HOURLY: "hourly_frame",
    TimeFrame.DAILY: "daily_frame",
    TimeFrame.MONTHLY: "monthly_frame",
    TimeFrame.YEARLY: "yearly_frame",
}


@dataclass
class PoolHistory:
    """History buckets of one pool for every timeframe, oldest first."""

    hourly_frame: list[HistoryBucket] = field(default_factory=list)
    daily_frame: list[HistoryBucket] = field(default_factory=list)
    monthly_frame: list[HistoryBucket] = field(default_factory=list)
    yearly_frame: list[HistoryBucket] = field(default_factory=list)

    def frame(self, timeframe: TimeFrame) -> list[HistoryBucket]:
        """Return the live bucket list for a timeframe."""
        return getattr(self, _FRAME_NAMES[timeframe])

    def encode(self) -> bytes:
        """Serialise the history to CBOR."""
        return dumps(
            [[bucket.to_cbor() for bucket in self.frame(tf)] for tf in _FRAME_NAMES]
        )

    @classmethod
    def decode(cls, data: bytes) -> "PoolHistory":
        """Parse a history produced by ``encode``."""
        item = loads(data)
        if not isinstance(item, list) or len(item) < len(_FRAME_NAMES):
            raise CborDecodeError("failed to parse pool history: expected an array")
        frames = {}
        for (timeframe, name), raw_frame in zip(_FRAME_NAMES.items(), item):
            if not isinstance(raw_frame, list):
                raise CborDecodeError(
                    f"failed to parse pool history: {timeframe.value} frame is not an array"
                )
            frames[name] = [HistoryBucket.from_cbor(bucket) for bucket in raw_frame]
        return cls(**frames)


def max_buckets(timeframe: TimeFrame) -> int:
    """Return how many buckets of a timeframe are kept."""
    return _MAX_BUCKETS.get(timeframe, 0)


def align_timestamp_to_bucket(timestamp: int, timeframe: TimeFrame) -> int:
    """Round a timestamp in seconds down to the start of its bucket."""
    return timestamp - timestamp % _DURATION_SECS[timeframe]


def bucket_bounds(timestamp: int, timeframe: TimeFrame) -> tuple[int, int]:
    """Return the start and end timestamps of the bucket holding ``timestamp``."""
    start = align_timestamp_to_bucket(timestamp, timeframe)
    return start, start + _DURATION_SECS[timeframe]


def nanos_to_seconds(epoch_nanos: int) -> int:
    """Convert an epoch time in nanoseconds to whole seconds."""
    return epoch_nanos // 1_000_000_000


def limit_length(items: list, max_len: int) -> None:
    """Drop items from the front until at most ``max_len`` remain."""
    excess = len(items) - max_len
    if excess > 0:
        del items[:excess]


def _create_bucket(start: int, end: int, snapshot: PoolSnapshot) -> HistoryBucket:
    return HistoryBucket(
        start_timestamp=start,
        end_timestamp=end,
        swap_volume_token0_start=snapshot.swap_volume0_all_time,
        swap_volume_token1_start=snapshot.swap_volume1_all_time,
        fee_generated_token0_start=snapshot.generated_swap_fee0,
        fee_generated_token1_start=snapshot.generated_swap_fee1,
        token0_reserves=snapshot.pool_reserve0,
        token1_reserves=snapshot.pool_reserve1,
        last_sqrtx96_price=snapshot.sqrt_price_x96,
        inrange_liquidity=snapshot.liquidity,
        active_tick=snapshot.tick,
    )


def _growth(current: int, start: int, what: str) -> int:
    if current < start:
        raise ValueError(f"{what} decreased from {start} to {current}")
    return current - start


def _update_bucket(bucket: HistoryBucket, snapshot: PoolSnapshot) -> None:
    bucket.swap_volume_token0_during_bucket = _growth(
        snapshot.swap_volume0_all_time, bucket.swap_volume_token0_start, "swap volume0"
    )
    bucket.swap_volume_token1_during_bucket = _growth(
        snapshot.swap_volume1_all_time, bucket.swap_volume_token1_start, "swap volume1"
    )
    bucket.fee_generated_token0_during_bucket = _growth(
        snapshot.generated_swap_fee0, bucket.fee_generated_token0_start, "swap fee0"
    )
    bucket.fee_generated_token1_during_bucket = _growth(
        snapshot.generated_swap_fee1, bucket.fee_generated_token1_start, "swap fee1"
    )
    bucket.token0_reserves = snapshot.pool_reserve0
    bucket.token1_reserves = snapshot.pool_reserve1
    bucket.last_sqrtx96_price = snapshot.sqrt_price_x96
    bucket.inrange_liquidity = snapshot.liquidity
    bucket.active_tick = snapshot.tick


def capture_bucket(
    pool_history: PoolHistory,
    snapshot: PoolSnapshot,
    timestamp: int,
    timeframe: TimeFrame,
) -> None:
    """Record a snapshot taken at ``timestamp`` seconds into one timeframe."""
    start, end = bucket_bounds(timestamp, timeframe)
    frame = pool_history.frame(timeframe)
    if frame and frame[-1].start_timestamp == start and frame[-1].end_timestamp == end:
        _update_bucket(frame[-1], snapshot)
    else:
        frame.append(_create_bucket(start, end, snapshot))
    limit_length(frame, max_buckets(timeframe))


def capture_all(
    pool_history: PoolHistory, snapshot: PoolSnapshot, timestamp_nanos: int
) -> None:
    """Record a snapshot taken at ``timestamp_nanos`` into every timeframe."""
    timestamp = nanos_to_seconds(timestamp_nanos)
    for timeframe in TimeFrame:
        capture_bucket(pool_history, snapshot, timestamp, timeframe)