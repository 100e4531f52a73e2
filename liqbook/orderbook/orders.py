"""Classify ledger order records and turn the live ones into RawOrders."""

from __future__ import annotations

import time
from enum import Enum
from typing import Iterable, List

from liqbook.common.models import OrderRecord
from liqbook.orderbook.aggregator import OrderBookSnapshot, RawOrder, aggregate


class OrderStatus(str, Enum):
    ACTIVE = "active"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


def classify(record: OrderRecord, now: int | None = None) -> OrderStatus:
    """Display status of an order; the first matching rule wins.

    A partially filled order stays PARTIALLY_FILLED after its expiry passes.
    """
    now = int(time.time()) if now is None else now
    if record.cancelled:
        return OrderStatus.CANCELLED
    if record.filled_amount >= record.total_amount:
        return OrderStatus.FILLED
    if record.filled_amount > 0:
        return OrderStatus.PARTIALLY_FILLED
    if record.expiry < now:
        return OrderStatus.EXPIRED
    return OrderStatus.ACTIVE


def is_live(record: OrderRecord) -> bool:
    """Exists, not cancelled and not fully filled. Expiry is settled by the ledger, not here."""
    return record.exists and not record.cancelled and record.filled_amount < record.total_amount


def active_raw_orders(records: Iterable[OrderRecord]) -> List[RawOrder]:
    return [
        RawOrder(price=r.limit_price, remaining_amount=r.remaining_amount, side=r.side)
        for r in records
        if is_live(r)
    ]


def build_order_book(records: Iterable[OrderRecord], depth: int | None = None) -> OrderBookSnapshot:
    """Aggregate the live subset of ``records`` into a book snapshot."""
    return aggregate(active_raw_orders(records), depth=depth)


def sort_by_expiry(records: Iterable[OrderRecord]) -> List[OrderRecord]:
    """Newest first, using expiry as a proxy for creation time."""
    return sorted(records, key=lambda r: r.expiry, reverse=True)


__all__ = [
    "OrderStatus",
    "classify",
    "is_live",
    "active_raw_orders",
    "build_order_book",
    "sort_by_expiry",
]
