"""Depth aggregation of active limit orders into price levels."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Union

from liqbook.common import metrics
from liqbook.common.errors import InvalidInput
from liqbook.common.metrics import record_error
from liqbook.common.models import OrderSide

log = logging.getLogger(__name__)

# Ledger prices and amounts are ints; Decimal/Fraction/float are accepted for
# off-chain callers and normalised to Fraction so levels sum and compare exactly.
Quantity = Union[int, Fraction]
_NUMERIC = (int, Decimal, Fraction, float)
_INF = float("inf")


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, _NUMERIC):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return value == value and value not in (_INF, -_INF)


def _exact(value) -> Quantity:
    return value if isinstance(value, int) else Fraction(value)


@dataclass(frozen=True)
class RawOrder:
    """One active order: limit price, unfilled amount and side."""

    price: Quantity
    remaining_amount: Quantity
    side: OrderSide

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "side", OrderSide.parse(self.side))
        except ValueError as exc:
            raise record_error(InvalidInput(str(exc))) from None
        for name in ("price", "remaining_amount"):
            value = getattr(self, name)
            if not _is_finite_number(value):
                raise record_error(InvalidInput(f"{name} must be a number, got {value!r}"))
            object.__setattr__(self, name, _exact(value))
        if self.price <= 0:
            raise record_error(InvalidInput(f"price must be positive, got {self.price}"))
        if self.remaining_amount < 0:
            raise record_error(InvalidInput(f"remaining_amount must be non-negative, got {self.remaining_amount}"))


@dataclass
class PriceLevel:
    price: Quantity
    amount: Quantity
    cumulative_amount: Quantity
    order_count: int


@dataclass
class OrderBookSnapshot:
    buy_levels: List[PriceLevel] = field(default_factory=list)
    sell_levels: List[PriceLevel] = field(default_factory=list)
    best_bid: Optional[Quantity] = None
    best_ask: Optional[Quantity] = None
    spread: Optional[Quantity] = None
    spread_percent: Optional[float] = None

    @property
    def is_crossed(self) -> bool:
        """True when the best bid is above the best ask (stale or crossed book)."""
        return self.spread is not None and self.spread < 0

    @property
    def mid_price(self) -> Optional[float]:
        if self.best_bid is None or self.best_ask is None:
            return None
        return float((Fraction(self.best_bid) + Fraction(self.best_ask)) / 2)

    def to_dict(self) -> dict:
        return asdict(self)


def _levels(orders: Iterable[RawOrder], descending: bool) -> List[PriceLevel]:
    grouped: Dict[Quantity, List] = {}
    for order in orders:
        slot = grouped.setdefault(order.price, [0, 0])
        slot[0] += order.remaining_amount
        slot[1] += 1
    ordered = sorted(grouped.items(), key=lambda item: item[0], reverse=descending)
    levels: List[PriceLevel] = []
    cumulative = 0
    for price, (amount, count) in ordered:
        cumulative += amount
        levels.append(PriceLevel(price=price, amount=amount, cumulative_amount=cumulative, order_count=count))
    return levels


def aggregate(orders: Iterable[RawOrder], depth: int | None = None) -> OrderBookSnapshot:
    """Group orders by exact price into cumulative levels and derive the top of book.

    Bids are sorted highest first and asks lowest first; cumulative amounts
    run along that order. A negative spread is returned unchanged so callers
    can detect a crossed book. ``depth`` trims each side after the cumulative
    walk.
    """
    if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth <= 0):
        raise record_error(InvalidInput(f"depth must be a positive integer, got {depth!r}"))

    buys: List[RawOrder] = []
    sells: List[RawOrder] = []
    for order in orders:
        if not isinstance(order, RawOrder):
            raise record_error(InvalidInput(f"expected RawOrder, got {type(order).__name__}"))
        (buys if order.side is OrderSide.BUY else sells).append(order)

    buy_levels = _levels(buys, descending=True)
    sell_levels = _levels(sells, descending=False)
    if depth is not None:
        buy_levels = buy_levels[:depth]
        sell_levels = sell_levels[:depth]

    best_bid = buy_levels[0].price if buy_levels else None
    best_ask = sell_levels[0].price if sell_levels else None
    spread = None
    spread_percent = None
    if best_bid is not None and best_ask is not None:
        spread = best_ask - best_bid
        spread_percent = float(Fraction(spread) * 100 / Fraction(best_bid))
        if spread < 0:
            log.warning("Crossed book: best_bid=%s best_ask=%s", best_bid, best_ask)

    metrics.update_book_metrics(len(buy_levels), len(sell_levels), spread)
    log.debug(
        "Aggregated %d buy / %d sell orders into %d / %d levels",
        len(buys), len(sells), len(buy_levels), len(sell_levels),
    )
    return OrderBookSnapshot(
        buy_levels=buy_levels,
        sell_levels=sell_levels,
        best_bid=best_bid,
        best_ask=best_ask,
        spread=spread,
        spread_percent=spread_percent,
    )


__all__ = ["RawOrder", "PriceLevel", "OrderBookSnapshot", "aggregate"]
