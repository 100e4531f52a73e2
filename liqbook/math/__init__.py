from liqbook.math.liquidity_math import get_amounts_for_liquidity, get_liquidity_for_amounts
from liqbook.math.position_math import TickRange, tick_range_for_prices
from liqbook.math.tick_math import get_sqrt_ratio_at_tick, price_from_tick, tick_at_price

__all__ = [
    "get_amounts_for_liquidity",
    "get_liquidity_for_amounts",
    "TickRange",
    "tick_range_for_prices",
    "get_sqrt_ratio_at_tick",
    "price_from_tick",
    "tick_at_price",
]
