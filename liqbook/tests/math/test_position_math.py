import pytest

from liqbook.common.errors import InvalidInput, InvalidRange
from liqbook.common.models import Position
from liqbook.math import position_math as pm
from liqbook.math.liquidity_math import (
    get_amounts_for_liquidity,
    get_liquidity_for_amount0,
    get_liquidity_for_amounts,
)
from liqbook.math.tick_math import get_sqrt_ratio_at_tick

Q96 = 2**96
ONE = 10**18


@pytest.mark.parametrize(
    "min_price,max_price,spacing,expected",
    [
        (1.0, 2.0, 60, (0, 6900)),
        (2.0, 1.0, 60, (0, 6900)),
        (1.0, 1.0, 60, (0, 60)),
        (0.5, 2.0, 10, (-6940, 6930)),
        (1e200, 1e300, 60, (887160, 887220)),
        (1e-300, 1e-200, 60, (-887220, -887160)),
    ],
)
def test_tick_range_for_prices(min_price, max_price, spacing, expected):
    tr = pm.tick_range_for_prices(min_price, max_price, spacing)
    assert (tr.tick_lower, tr.tick_upper) == expected
    assert tr.tick_lower % spacing == 0 and tr.tick_upper % spacing == 0


def test_full_range_uses_usable_envelope():
    tr = pm.tick_range_for_prices(1.0, 2.0, 60, full=True)
    assert (tr.tick_lower, tr.tick_upper) == (-887220, 887220)
    assert pm.full_range(200) == pm.TickRange(-887200, 887200)


def test_tick_range_rejects_bad_price():
    with pytest.raises(InvalidInput):
        pm.tick_range_for_prices(0, 2.0, 60)


def test_pool_coordinates_invert_when_unsorted():
    tr = pm.TickRange(-600, 1200)
    assert pm.to_pool_coordinates(tr, tokens_sorted=True) is tr
    assert pm.to_pool_coordinates(tr, tokens_sorted=False) == pm.TickRange(-1200, 600)


def test_tick_range_requires_ordered_ticks():
    with pytest.raises(InvalidRange):
        pm.TickRange(10, 10)
    with pytest.raises(InvalidRange):
        pm.TickRange(60, -60)


def test_counterpart_amount_mints_without_waste():
    sqrt_a = get_sqrt_ratio_at_tick(-600)
    sqrt_b = get_sqrt_ratio_at_tick(1200)
    amount1 = pm.counterpart_amount1(Q96, sqrt_a, sqrt_b, ONE)
    assert amount1 > 0
    liquidity = get_liquidity_for_amounts(Q96, sqrt_a, sqrt_b, ONE, amount1)
    # token0 binds: the counterpart is rounded up, never short
    assert liquidity == get_liquidity_for_amount0(Q96, sqrt_b, ONE)

    amount0 = pm.counterpart_amount0(Q96, sqrt_a, sqrt_b, amount1)
    assert amount0 >= ONE - 1


def test_counterpart_outside_range():
    sqrt_a = get_sqrt_ratio_at_tick(600)
    sqrt_b = get_sqrt_ratio_at_tick(1200)
    assert pm.counterpart_amount1(Q96, sqrt_a, sqrt_b, ONE) == 0
    assert pm.counterpart_amount0(Q96, sqrt_a, sqrt_b, ONE) is None
    above = get_sqrt_ratio_at_tick(1800)
    assert pm.counterpart_amount1(above, sqrt_a, sqrt_b, ONE) is None
    assert pm.counterpart_amount0(above, sqrt_a, sqrt_b, ONE) == 0


def test_counterpart_rejects_zero_width():
    sqrt_a = get_sqrt_ratio_at_tick(600)
    with pytest.raises(InvalidRange):
        pm.counterpart_amount1(Q96, sqrt_a, sqrt_a, ONE)


def test_position_amounts_matches_liquidity_math():
    position = Position(tick_lower=-600, tick_upper=600, liquidity=ONE)
    expected = get_amounts_for_liquidity(
        Q96, get_sqrt_ratio_at_tick(-600), get_sqrt_ratio_at_tick(600), ONE
    )
    assert pm.position_amounts(position, Q96) == expected


@pytest.mark.parametrize("tick,expected", [(-61, False), (-60, True), (0, True), (59, True), (60, False)])
def test_in_range_is_half_open(tick, expected):
    position = Position(tick_lower=-60, tick_upper=60, liquidity=1)
    assert pm.is_in_range(position, tick) is expected


@pytest.mark.parametrize(
    "liquidity,percent,expected",
    [(10000, 25, 2500), (10000, 100, 10000), (10000, 0, 0), (1000, 33.333, 333), (1000, "12.345", 123), (7, 50, 3)],
)
def test_liquidity_to_remove(liquidity, percent, expected):
    assert pm.liquidity_to_remove(liquidity, percent) == expected


@pytest.mark.parametrize("percent", [-1, 100.01, 150, "abc", float("nan")])
def test_liquidity_to_remove_rejects_bad_percent(percent):
    with pytest.raises(InvalidInput):
        pm.liquidity_to_remove(1000, percent)


def test_removal_quote_includes_owed_fees():
    position = Position(tick_lower=-600, tick_upper=600, liquidity=ONE, tokens_owed0=5, tokens_owed1=7)
    quote = pm.removal_quote(position, Q96, 50)
    assert quote.liquidity == ONE // 2
    amount0, amount1 = get_amounts_for_liquidity(
        Q96, get_sqrt_ratio_at_tick(-600), get_sqrt_ratio_at_tick(600), ONE // 2
    )
    assert (quote.amount0, quote.amount1) == (amount0, amount1)
    assert quote.total0 == amount0 + 5
    assert quote.total1 == amount1 + 7


def test_removal_quote_closed_position_still_collects():
    position = Position(tick_lower=-600, tick_upper=600, liquidity=0, tokens_owed0=3)
    quote = pm.removal_quote(position, Q96, 100)
    assert quote.liquidity == 0
    assert (quote.total0, quote.total1) == (3, 0)


def test_apply_slippage():
    assert pm.apply_slippage(1000) == 1030
    assert pm.apply_slippage(1000, bps=0) == 1000
    assert pm.apply_slippage(1000, cap=1010) == 1010
    assert pm.apply_slippage(1000, cap=5000) == 1030
    with pytest.raises(InvalidInput):
        pm.apply_slippage(-1)


def test_apply_liquidity_buffer():
    assert pm.apply_liquidity_buffer(1000) == 995
    assert pm.apply_liquidity_buffer(1000, bps=0) == 1000
    with pytest.raises(InvalidInput):
        pm.apply_liquidity_buffer(1000, bps=10001)


def test_mint_liquidity():
    tr = pm.TickRange(-600, 600)
    sqrt_a, sqrt_b = tr.sqrt_ratios()
    raw = get_liquidity_for_amounts(Q96, sqrt_a, sqrt_b, ONE, ONE)
    assert pm.mint_liquidity(Q96, tr, ONE, ONE) == raw * 9950 // 10000
    assert pm.mint_liquidity(Q96, tr, ONE, ONE, buffer_bps=0) == raw


def test_mint_liquidity_errors():
    tr = pm.TickRange(-600, 600)
    with pytest.raises(InvalidInput):
        pm.mint_liquidity(0, tr, ONE, ONE)
    with pytest.raises(InvalidInput):
        pm.mint_liquidity(Q96, tr, 0, 0)
