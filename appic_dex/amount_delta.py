"""Token amounts between two square-root prices in Q64.96 fixed point.

Prices and unsigned amounts are 256-bit unsigned integers, liquidity is a
128-bit unsigned integer (or a signed 128-bit delta for the signed helpers),
and signed amounts are 256-bit signed integers.
"""

from __future__ import annotations

Q96 = 1 << 96
FIXED_POINT_96_RESOLUTION = 96

_U256_MOD = 1 << 256
_U256_MAX = _U256_MOD - 1
_U128_MAX = (1 << 128) - 1
_I128_MIN = -(1 << 127)
_I128_MAX = (1 << 127) - 1
_I256_MAX = (1 << 255) - 1


class AmountDeltaError(ArithmeticError):
    """Base class for failures while computing an amount delta."""


class InvalidPriceError(AmountDeltaError):
    """Raised when a square-root price of zero is given."""


class AmountOverflowError(AmountDeltaError):
    """Raised when an intermediate or final value does not fit its type."""


def _check_range(value: int, low: int, high: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int")
    if not low <= value <= high:
        raise ValueError(f"{value} is out of range for {what}")
    return value


def _mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator), failing if the result exceeds 256 bits."""
    if denominator == 0:
        raise AmountOverflowError("division by zero")
    result = (a * b) // denominator
    if result > _U256_MAX:
        raise AmountOverflowError("mul_div result exceeds 256 bits")
    return result


def _mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator), failing if the result exceeds 256 bits."""
    result = _mul_div(a, b, denominator)
    if (a * b) % denominator:
        if result == _U256_MAX:
            raise AmountOverflowError("mul_div rounding up exceeds 256 bits")
        result += 1
    return result


def _div_rounding_up(x: int, y: int) -> int:
    quotient, remainder = divmod(x, y)
    return quotient + (1 if remainder else 0)


def abs_diff(a: int, b: int) -> int:
    """Absolute difference of two 256-bit values, using the sign of the wrapped difference."""
    _check_range(a, 0, _U256_MAX, "sqrt price")
    _check_range(b, 0, _U256_MAX, "sqrt price")
    diff = (a - b) % _U256_MOD
    mask = _U256_MAX if diff >> 255 else 0
    return mask ^ ((diff + mask) % _U256_MOD)


def get_amount_0_delta(
    sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """Amount of token0 covering ``liquidity`` between the two prices.

    Computes liquidity * (upper - lower) / (upper * lower).
    """
    _check_range(sqrt_price_a_x96, 0, _U256_MAX, "sqrt price")
    _check_range(sqrt_price_b_x96, 0, _U256_MAX, "sqrt price")
    _check_range(liquidity, 0, _U128_MAX, "liquidity")

    sqrt_lower, sqrt_upper = sorted((sqrt_price_a_x96, sqrt_price_b_x96))
    if sqrt_lower == 0:
        raise InvalidPriceError("sqrt price must not be zero")

    numerator1 = liquidity << FIXED_POINT_96_RESOLUTION
    numerator2 = sqrt_upper - sqrt_lower

    if round_up:
        scaled = _mul_div_rounding_up(numerator1, numerator2, sqrt_upper)
        return _div_rounding_up(scaled, sqrt_lower)
    return _mul_div(numerator1, numerator2, sqrt_upper) // sqrt_lower


def get_amount_1_delta(
    sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """Amount of token1 covering ``liquidity`` between the two prices.

    Computes liquidity * |a - b| / 2**96.
    """
    _check_range(liquidity, 0, _U128_MAX, "liquidity")
    numerator = abs_diff(sqrt_price_a_x96, sqrt_price_b_x96)

    amount1 = _mul_div(liquidity, numerator, Q96)
    if round_up and (liquidity * numerator) % Q96:
        if amount1 == _U256_MAX:
            raise AmountOverflowError("amount1 exceeds 256 bits")
        amount1 += 1
    return amount1


def _signed(unsigned_delta, sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int) -> int:
    _check_range(liquidity, _I128_MIN, _I128_MAX, "liquidity delta")
    if liquidity < 0:
        if liquidity == _I128_MIN:
            raise AmountOverflowError("liquidity delta cannot be negated")
        amount = unsigned_delta(sqrt_price_a_x96, sqrt_price_b_x96, -liquidity, False)
        if amount > _I256_MAX:
            raise AmountOverflowError("amount does not fit a signed 256-bit integer")
        return amount
    amount = unsigned_delta(sqrt_price_a_x96, sqrt_price_b_x96, liquidity, True)
    if amount > _I256_MAX:
        raise AmountOverflowError("amount does not fit a signed 256-bit integer")
    return -amount


def get_amount_0_delta_signed(
    sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int
) -> int:
    """Signed token0 amount for a liquidity delta.

    Adding liquidity gives a negative amount rounded up in magnitude;
    removing it gives a positive amount rounded down.
    """
    return _signed(get_amount_0_delta, sqrt_price_a_x96, sqrt_price_b_x96, liquidity)


def get_amount_1_delta_signed(
    sqrt_price_a_x96: int, sqrt_price_b_x96: int, liquidity: int
) -> int:
    """Signed token1 amount for a liquidity delta.

    Adding liquidity gives a negative amount rounded up in magnitude;
    removing it gives a positive amount rounded down.
    """
    return _signed(get_amount_1_delta, sqrt_price_a_x96, sqrt_price_b_x96, liquidity)