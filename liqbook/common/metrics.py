"""Prometheus metrics helpers for liqbook."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge

from liqbook.common.errors import LiqbookError

log = logging.getLogger(__name__)

# Counters
AGGREGATIONS = Counter("liqbook_aggregations_total", "Order book aggregations performed")
CROSSED_BOOKS = Counter("liqbook_crossed_books_total", "Aggregations that produced a negative spread")
MATH_ERRORS = Counter("liqbook_math_errors_total", "Rejected inputs by error kind", ["kind"])

# Gauges
BOOK_LEVELS = Gauge("liqbook_book_levels", "Price levels in the last aggregated book", ["side"])
BOOK_SPREAD = Gauge("liqbook_book_spread", "Spread of the last aggregated book (ask - bid)")


def record_error(exc: LiqbookError) -> LiqbookError:
    """Count a rejected input and hand the exception back for raising."""
    MATH_ERRORS.labels(kind=exc.kind).inc()
    log.debug("rejected input (%s): %s", exc.kind, exc)
    return exc


def update_book_metrics(buy_levels: int, sell_levels: int, spread: int | None) -> None:
    """Set all per-book gauges in one call."""
    AGGREGATIONS.inc()
    BOOK_LEVELS.labels(side="buy").set(buy_levels)
    BOOK_LEVELS.labels(side="sell").set(sell_levels)
    if spread is not None:
        BOOK_SPREAD.set(spread)
        if spread < 0:
            CROSSED_BOOKS.inc()


__all__ = [
    "AGGREGATIONS",
    "CROSSED_BOOKS",
    "MATH_ERRORS",
    "BOOK_LEVELS",
    "BOOK_SPREAD",
    "record_error",
    "update_book_metrics",
]
