"""Fixed-point and tick-domain constants of the concentrated-liquidity pool."""

from __future__ import annotations

# Fixed-point encoding
Q96: int = 2**96
Q192: int = 2**192

# Tick domain and the sqrt ratios at its ends
MIN_TICK: int = -887272
MAX_TICK: int = 887272
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# Price ratio between adjacent ticks (one basis point)
TICK_BASE: float = 1.0001
