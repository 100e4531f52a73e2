"""Tick <-> price <-> sqrtPriceX96 conversions.

Integer paths (``get_sqrt_ratio_at_tick``, ``get_tick_at_sqrt_ratio``) follow
the pool contract's TickMath bit for bit and feed settlement math. The float
helpers (``price_from_tick``, ``tick_at_price``, ``sqrt_price_x96_to_price``)
exist for display and user input only and never feed an amount.
"""

from __future__ import annotations

import math
from decimal import Decimal, localcontext

from liqbook.common.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    Q192,
    TICK_BASE,
)
from liqbook.common.errors import InvalidInput, OutOfDomain
from liqbook.common.metrics import record_error

# sqrt(1.0001) ** -(2 ** i) as Q128.128, from the pool contract's TickMath
_RATIOS = [
    0xfffcb933bd6fad37aa2d162d1a594001,
    0xfff97272373d413259a46990580e213a,
    0xfff2e50f5f656932ef12357cf3c7fdcc,
    0xffe5caca7e10e4e61c3624eaa0941cd0,
    0xffcb9843d60f6159c9db58835c926644,
    0xff973b41fa98c081472e6896dfb254c0,
    0xff2ea16466c96a3843ec78b326b52861,
    0xfe5dee046a99a2a811c461f1969c3053,
    0xfcbe86c7900a88aedcffc83b479aa3a4,
    0xf987a7253ac413176f2b074cf7815e54,
    0xf3392b0822b70005940c7a398e4b70f3,
    0xe7159475a2c29b7443b29c7fa6e889d9,
    0xd097f3bdfd2022b8845ad8f792aa5825,
    0xa9f746462d870fdf8a65dc1f90e061e5,
    0x70d869a156d2a1b890bb3df62baf32f7,
    0x31be135f97d08fd981231505542fcfa6,
    0x9aa508b5b7a84e1c677de54f3e99bc9,
    0x5d6af8dedb81196699c329225ee604,
    0x2216e584f5fa1ea926041bedfe98,
    0x48a170391f7dc42444e8fa2,
]


def _check_tick(tick: int) -> int:
    if isinstance(tick, bool) or not isinstance(tick, int):
        raise record_error(InvalidInput(f"tick must be an integer, got {tick!r}"))
    if tick < MIN_TICK or tick > MAX_TICK:
        raise record_error(OutOfDomain(f"tick {tick} outside [{MIN_TICK}, {MAX_TICK}]"))
    return tick


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """sqrtPriceX96 for ``tick`` (port of TickMath.getSqrtRatioAtTick, integer exact).

    The Q128.128 intermediate is rounded up to Q64.96, as the pool does, so the
    result can sit one unit above floor(sqrt(1.0001**tick) * 2**96). Tick 0 maps
    to exactly ``2**96``. Ticks outside [MIN_TICK, MAX_TICK] raise OutOfDomain.
    """
    _check_tick(tick)
    abs_tick = tick if tick >= 0 else -tick
    ratio = 0x100000000000000000000000000000000
    for i, magic in enumerate(_RATIOS):
        if (abs_tick >> i) & 1:
            ratio = (ratio * magic) >> 128
    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio
    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt ratio is <= ``sqrt_price_x96`` (binary search, no floats)."""
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 > MAX_SQRT_RATIO:
        raise record_error(OutOfDomain(f"sqrt_price_x96 {sqrt_price_x96} out of bounds"))
    lo, hi = MIN_TICK, MAX_TICK
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_price_x96:
            lo = mid
        else:
            hi = mid - 1
    return lo


def tick_at_price(price: float) -> int:
    """floor(log(price) / log(1.0001)); the inverse of ``price_from_tick``."""
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise record_error(InvalidInput(f"price must be a number, got {price!r}")) from None
    if not math.isfinite(value) or value <= 0:
        raise record_error(InvalidInput(f"price must be positive and finite, got {price!r}"))
    return math.floor(math.log(value) / math.log(TICK_BASE))


def price_from_tick(tick: int) -> float:
    """1.0001 ** tick as a float (display only)."""
    _check_tick(tick)
    return TICK_BASE**tick


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int = 18, decimals1: int = 18) -> float:
    """Human price (token1 per token0) of a sqrtPriceX96, scaled by token decimals."""
    if sqrt_price_x96 <= 0:
        raise record_error(InvalidInput("sqrt_price_x96 must be positive"))
    with localcontext() as ctx:
        ctx.prec = 80
        raw = Decimal(sqrt_price_x96 * sqrt_price_x96) / Decimal(Q192)
        return float(raw * Decimal(10) ** (decimals0 - decimals1))


def sqrt_price_for_price(price: float) -> int:
    """sqrtPriceX96 used to initialise a pool at ``price`` (snapped down to a tick)."""
    return get_sqrt_ratio_at_tick(tick_at_price(price))


def min_usable_tick(tick_spacing: int) -> int:
    _check_spacing(tick_spacing)
    return -(-MIN_TICK // tick_spacing) * tick_spacing


def max_usable_tick(tick_spacing: int) -> int:
    _check_spacing(tick_spacing)
    return (MAX_TICK // tick_spacing) * tick_spacing


def nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """Round to the nearest multiple of ``tick_spacing`` (half up), kept inside the usable envelope."""
    _check_tick(tick)
    _check_spacing(tick_spacing)
    rounded = ((2 * tick + tick_spacing) // (2 * tick_spacing)) * tick_spacing
    return max(min_usable_tick(tick_spacing), min(rounded, max_usable_tick(tick_spacing)))


def _check_spacing(tick_spacing: int) -> None:
    if isinstance(tick_spacing, bool) or not isinstance(tick_spacing, int) or tick_spacing <= 0:
        raise record_error(InvalidInput(f"tick_spacing must be a positive integer, got {tick_spacing!r}"))


__all__ = [
    "Q96",
    "Q192",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    "tick_at_price",
    "price_from_tick",
    "sqrt_price_x96_to_price",
    "sqrt_price_for_price",
    "min_usable_tick",
    "max_usable_tick",
    "nearest_usable_tick",
]
