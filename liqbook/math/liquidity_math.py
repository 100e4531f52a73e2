"""Token amounts <-> liquidity for a concentrated position.

Port of the periphery LiquidityAmounts library over unbounded Python ints:
every formula multiplies exactly and floors once, so results never exceed what
the pool would accept for the same inputs.

    L  = x * sqrtA * sqrtB / ((sqrtB - sqrtA) * Q96)    # token0 side
    L  = y * Q96 / (sqrtB - sqrtA)                      # token1 side
    x  = L * Q96 * (sqrtB - sqrtP) / (sqrtB * sqrtP)
    y  = L * (sqrtP - sqrtA) / Q96
"""

from __future__ import annotations

from typing import Tuple

from liqbook.common.constants import Q96
from liqbook.common.errors import InvalidInput, InvalidRange
from liqbook.common.metrics import record_error


def _sorted_bounds(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int) -> Tuple[int, int]:
    if sqrt_ratio_a_x96 <= 0 or sqrt_ratio_b_x96 <= 0:
        raise record_error(InvalidRange("sqrt ratios must be positive"))
    if sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        raise record_error(InvalidRange(f"zero-width range at sqrt ratio {sqrt_ratio_a_x96}"))
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        return sqrt_ratio_b_x96, sqrt_ratio_a_x96
    return sqrt_ratio_a_x96, sqrt_ratio_b_x96


def _check_quantity(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise record_error(InvalidInput(f"{name} must be an integer, got {value!r}"))
    if value < 0:
        raise record_error(InvalidInput(f"{name} must be non-negative, got {value}"))
    return value


def _check_current(sqrt_ratio_x96: int) -> int:
    if sqrt_ratio_x96 <= 0:
        raise record_error(InvalidRange("current sqrt ratio must be positive"))
    return sqrt_ratio_x96


def _div_rounding_up(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    """Liquidity bought by ``amount0`` of token0 across the whole range."""
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("amount0", amount0)
    return (amount0 * low * high) // ((high - low) * Q96)


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    """Liquidity bought by ``amount1`` of token1 across the whole range."""
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("amount1", amount1)
    return (amount1 * Q96) // (high - low)


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """Maximum liquidity mintable at the current price without exceeding either amount.

    Below the range only token0 counts, above it only token1; inside the range
    each token prices its own half and the smaller liquidity binds.
    """
    _check_current(sqrt_ratio_x96)
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("amount0", amount0)
    _check_quantity("amount1", amount1)

    if sqrt_ratio_x96 <= low:
        return get_liquidity_for_amount0(low, high, amount0)
    if sqrt_ratio_x96 < high:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, high, amount0)
        liquidity1 = get_liquidity_for_amount1(low, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(low, high, amount1)


def get_amount0_delta(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool = False) -> int:
    """token0 held by ``liquidity`` between two sqrt prices."""
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("liquidity", liquidity)
    numerator = liquidity * Q96 * (high - low)
    denominator = high * low
    if round_up:
        return _div_rounding_up(numerator, denominator)
    return numerator // denominator


def get_amount1_delta(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool = False) -> int:
    """token1 held by ``liquidity`` between two sqrt prices."""
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("liquidity", liquidity)
    numerator = liquidity * (high - low)
    if round_up:
        return _div_rounding_up(numerator, Q96)
    return numerator // Q96


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
) -> Tuple[int, int]:
    """(amount0, amount1) represented by ``liquidity`` at the current price, floored."""
    _check_current(sqrt_ratio_x96)
    low, high = _sorted_bounds(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _check_quantity("liquidity", liquidity)

    if sqrt_ratio_x96 <= low:
        return get_amount0_delta(low, high, liquidity), 0
    if sqrt_ratio_x96 < high:
        return (
            get_amount0_delta(sqrt_ratio_x96, high, liquidity),
            get_amount1_delta(low, sqrt_ratio_x96, liquidity),
        )
    return 0, get_amount1_delta(low, high, liquidity)


__all__ = [
    "get_liquidity_for_amount0",
    "get_liquidity_for_amount1",
    "get_liquidity_for_amounts",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amounts_for_liquidity",
]
