from liqbook.orderbook.aggregator import OrderBookSnapshot, PriceLevel, RawOrder, aggregate
from liqbook.orderbook.orders import OrderStatus, active_raw_orders, build_order_book, classify

__all__ = [
    "OrderBookSnapshot",
    "PriceLevel",
    "RawOrder",
    "aggregate",
    "OrderStatus",
    "active_raw_orders",
    "build_order_book",
    "classify",
]
