"""Position-level helpers built on tick and liquidity math.

Covers what a liquidity form needs before a mint or burn is sent to the
position manager: aligned tick ranges, the matching counterpart amount,
slippage-padded maximums, and partial-removal quotes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Tuple

from liqbook.common.errors import InvalidInput, InvalidRange
from liqbook.common.metrics import record_error
from liqbook.common.models import Position
from liqbook.math.liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_amounts_for_liquidity,
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
    get_liquidity_for_amounts,
)
from liqbook.math.tick_math import (
    get_sqrt_ratio_at_tick,
    max_usable_tick,
    min_usable_tick,
    tick_at_price,
)

log = logging.getLogger(__name__)

BPS = 10_000
DEFAULT_SLIPPAGE_BPS = 300
DEFAULT_LIQUIDITY_BUFFER_BPS = 50


@dataclass(frozen=True)
class TickRange:
    tick_lower: int
    tick_upper: int

    def __post_init__(self) -> None:
        if self.tick_lower >= self.tick_upper:
            raise record_error(InvalidRange(f"tick_lower {self.tick_lower} must be below tick_upper {self.tick_upper}"))

    def sqrt_ratios(self) -> Tuple[int, int]:
        return get_sqrt_ratio_at_tick(self.tick_lower), get_sqrt_ratio_at_tick(self.tick_upper)


@dataclass(frozen=True)
class RemovalQuote:
    """Liquidity to burn and the principal it releases, plus fees already owed."""

    liquidity: int
    amount0: int
    amount1: int
    owed0: int = 0
    owed1: int = 0

    @property
    def total0(self) -> int:
        return self.amount0 + self.owed0

    @property
    def total1(self) -> int:
        return self.amount1 + self.owed1


def full_range(tick_spacing: int) -> TickRange:
    return TickRange(min_usable_tick(tick_spacing), max_usable_tick(tick_spacing))


def align_tick_range(tick_a: int, tick_b: int, tick_spacing: int) -> TickRange:
    """Sort two ticks, floor both to the spacing, clamp to the usable envelope.

    A range that collapses after alignment is widened by one spacing on the
    upper side (or on the lower side when already pinned at the top).
    """
    lo_bound = min_usable_tick(tick_spacing)
    hi_bound = max_usable_tick(tick_spacing)
    lower, upper = min(tick_a, tick_b), max(tick_a, tick_b)
    lower = (lower // tick_spacing) * tick_spacing
    upper = (upper // tick_spacing) * tick_spacing
    lower = min(max(lower, lo_bound), hi_bound)
    upper = min(max(upper, lo_bound), hi_bound)
    if lower >= upper:
        upper = lower + tick_spacing
        if upper > hi_bound:
            upper = hi_bound
            lower = hi_bound - tick_spacing
    return TickRange(lower, upper)


def tick_range_for_prices(min_price: float, max_price: float, tick_spacing: int, full: bool = False) -> TickRange:
    """Tick range covering [min_price, max_price], aligned to ``tick_spacing``."""
    if full:
        return full_range(tick_spacing)
    return align_tick_range(tick_at_price(min_price), tick_at_price(max_price), tick_spacing)


def to_pool_coordinates(tick_range: TickRange, tokens_sorted: bool) -> TickRange:
    """Map a range quoted in the UI pair order onto the pool's token0/token1 order.

    Inverting the pair inverts the price, so ticks negate and swap ends.
    """
    if tokens_sorted:
        return tick_range
    return TickRange(-tick_range.tick_upper, -tick_range.tick_lower)


def counterpart_amount1(sqrt_ratio_x96: int, sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int | None:
    """token1 needed alongside ``amount0`` to deposit at the position's implied ratio.

    Returns 0 when the price is below the range (token0 only) and None when it
    is above the range, where token0 does not determine the deposit.
    """
    low, high = sorted((sqrt_ratio_a_x96, sqrt_ratio_b_x96))
    get_liquidity_for_amount0(low, high, amount0)  # rejects zero-width ranges and negative amounts
    if sqrt_ratio_x96 <= low:
        return 0
    if sqrt_ratio_x96 >= high:
        return None
    liquidity = get_liquidity_for_amount0(sqrt_ratio_x96, high, amount0)
    return get_amount1_delta(low, sqrt_ratio_x96, liquidity, round_up=True)


def counterpart_amount0(sqrt_ratio_x96: int, sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int | None:
    """token0 needed alongside ``amount1``; mirror of ``counterpart_amount1``."""
    low, high = sorted((sqrt_ratio_a_x96, sqrt_ratio_b_x96))
    get_liquidity_for_amount1(low, high, amount1)
    if sqrt_ratio_x96 >= high:
        return 0
    if sqrt_ratio_x96 <= low:
        return None
    liquidity = get_liquidity_for_amount1(low, sqrt_ratio_x96, amount1)
    return get_amount0_delta(sqrt_ratio_x96, high, liquidity, round_up=True)


def position_amounts(position: Position, sqrt_ratio_x96: int) -> Tuple[int, int]:
    """Principal (amount0, amount1) currently held by ``position``."""
    sqrt_a = get_sqrt_ratio_at_tick(position.tick_lower)
    sqrt_b = get_sqrt_ratio_at_tick(position.tick_upper)
    return get_amounts_for_liquidity(sqrt_ratio_x96, sqrt_a, sqrt_b, position.liquidity)


def is_in_range(position: Position, current_tick: int) -> bool:
    return position.tick_lower <= current_tick < position.tick_upper


def _percent_bps(percent) -> int:
    try:
        value = Decimal(str(percent))
    except InvalidOperation:
        raise record_error(InvalidInput(f"percent must be numeric, got {percent!r}")) from None
    if not value.is_finite() or value < 0 or value > 100:
        raise record_error(InvalidInput(f"percent must be within [0, 100], got {percent!r}"))
    return int((value * 100).to_integral_value(rounding=ROUND_FLOOR))


def liquidity_to_remove(liquidity: int, percent) -> int:
    """Share of ``liquidity`` for a percentage, truncated to a basis point."""
    if liquidity < 0:
        raise record_error(InvalidInput("liquidity must be non-negative"))
    return liquidity * _percent_bps(percent) // BPS


def removal_quote(position: Position, sqrt_ratio_x96: int, percent) -> RemovalQuote:
    """Quote a partial burn of ``position``; owed fees are reported in full."""
    burn = liquidity_to_remove(position.liquidity, percent)
    sqrt_a = get_sqrt_ratio_at_tick(position.tick_lower)
    sqrt_b = get_sqrt_ratio_at_tick(position.tick_upper)
    amount0, amount1 = get_amounts_for_liquidity(sqrt_ratio_x96, sqrt_a, sqrt_b, burn)
    return RemovalQuote(
        liquidity=burn,
        amount0=amount0,
        amount1=amount1,
        owed0=position.tokens_owed0,
        owed1=position.tokens_owed1,
    )


def apply_slippage(amount: int, bps: int = DEFAULT_SLIPPAGE_BPS, cap: int | None = None) -> int:
    """Maximum amount to approve/send for a mint, optionally capped at a balance."""
    if amount < 0 or bps < 0:
        raise record_error(InvalidInput("amount and bps must be non-negative"))
    padded = amount * (BPS + bps) // BPS
    if cap is not None and padded > cap:
        return cap
    return padded


def apply_liquidity_buffer(liquidity: int, bps: int = DEFAULT_LIQUIDITY_BUFFER_BPS) -> int:
    """Shave ``bps`` off a computed liquidity so the mint tolerates price drift."""
    if liquidity < 0 or not 0 <= bps <= BPS:
        raise record_error(InvalidInput("liquidity must be non-negative and bps within [0, 10000]"))
    return liquidity * (BPS - bps) // BPS


def mint_liquidity(
    sqrt_ratio_x96: int,
    tick_range: TickRange,
    amount0: int,
    amount1: int,
    buffer_bps: int = DEFAULT_LIQUIDITY_BUFFER_BPS,
) -> int:
    """Liquidity to request when minting ``tick_range`` with the given amounts."""
    if sqrt_ratio_x96 <= 0:
        raise record_error(InvalidInput("pool price missing (sqrt_ratio_x96 is zero)"))
    sqrt_a, sqrt_b = tick_range.sqrt_ratios()
    liquidity = apply_liquidity_buffer(
        get_liquidity_for_amounts(sqrt_ratio_x96, sqrt_a, sqrt_b, amount0, amount1),
        buffer_bps,
    )
    if liquidity == 0:
        raise record_error(InvalidInput("calculated liquidity is zero; amounts may be too small"))
    log.debug("mint [%d, %d) liquidity=%d", tick_range.tick_lower, tick_range.tick_upper, liquidity)
    return liquidity


__all__ = [
    "BPS",
    "DEFAULT_SLIPPAGE_BPS",
    "DEFAULT_LIQUIDITY_BUFFER_BPS",
    "TickRange",
    "RemovalQuote",
    "full_range",
    "align_tick_range",
    "tick_range_for_prices",
    "to_pool_coordinates",
    "counterpart_amount0",
    "counterpart_amount1",
    "position_amounts",
    "is_in_range",
    "liquidity_to_remove",
    "removal_quote",
    "apply_slippage",
    "apply_liquidity_buffer",
    "mint_liquidity",
]
