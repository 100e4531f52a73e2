"""Offline entry point: JSON in, JSON out over the math and order book cores."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from liqbook.common.config import Settings, load_validated_manifest
from liqbook.common.models import OrderRecord, Position
from liqbook.math.position_math import (
    TickRange,
    apply_slippage,
    is_in_range,
    mint_liquidity,
    position_amounts,
    tick_range_for_prices,
    to_pool_coordinates,
)
from liqbook.math.tick_math import get_tick_at_sqrt_ratio, price_from_tick
from liqbook.orderbook.orders import build_order_book

log = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _emit(payload: dict) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def cmd_book(args: argparse.Namespace, settings: Settings) -> dict:
    rows = load_validated_manifest(args.orders, "orders.schema.json")
    records = [OrderRecord(**row) for row in rows]
    depth = args.depth if args.depth is not None else settings.book_depth
    snapshot = build_order_book(records, depth=depth)
    log.info("Book from %d records: bid=%s ask=%s", len(records), snapshot.best_bid, snapshot.best_ask)
    return snapshot.to_dict()


def cmd_range(args: argparse.Namespace, settings: Settings) -> dict:
    spacing = settings.load_fee_tiers().tick_spacing(args.fee)
    tick_range = tick_range_for_prices(args.min_price, args.max_price, spacing, full=args.full_range)
    pool_range = to_pool_coordinates(tick_range, tokens_sorted=not args.inverted)
    return {
        "tick_spacing": spacing,
        "tick_lower": pool_range.tick_lower,
        "tick_upper": pool_range.tick_upper,
        "price_lower": price_from_tick(pool_range.tick_lower),
        "price_upper": price_from_tick(pool_range.tick_upper),
    }


def cmd_position(args: argparse.Namespace, settings: Settings) -> dict:
    position = Position(tick_lower=args.tick_lower, tick_upper=args.tick_upper, liquidity=args.liquidity)
    amount0, amount1 = position_amounts(position, args.sqrt_price)
    tick = get_tick_at_sqrt_ratio(args.sqrt_price)
    return {"amount0": amount0, "amount1": amount1, "tick": tick, "in_range": is_in_range(position, tick)}


def cmd_mint(args: argparse.Namespace, settings: Settings) -> dict:
    tick_range = TickRange(args.tick_lower, args.tick_upper)
    liquidity = mint_liquidity(args.sqrt_price, tick_range, args.amount0, args.amount1, settings.liquidity_buffer_bps)
    return {
        "liquidity": liquidity,
        "amount0_max": apply_slippage(args.amount0, settings.slippage_bps),
        "amount1_max": apply_slippage(args.amount1, settings.slippage_bps),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="liqbook", description="Concentrated-liquidity math and order book aggregation")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    book = sub.add_parser("book", help="Aggregate order records from a JSON file")
    book.add_argument("orders", help="Path to a JSON list of order records")
    book.add_argument("--depth", type=int, default=None)
    book.set_defaults(func=cmd_book)

    rng = sub.add_parser("range", help="Tick range for a price interval and fee tier")
    rng.add_argument("--min-price", type=float, required=True)
    rng.add_argument("--max-price", type=float, required=True)
    rng.add_argument("--fee", type=int, default=3000)
    rng.add_argument("--full-range", action="store_true")
    rng.add_argument("--inverted", action="store_true", help="Prices are quoted token0 per token1")
    rng.set_defaults(func=cmd_range)

    pos = sub.add_parser("position", help="Token amounts held by a position")
    pos.add_argument("--tick-lower", type=int, required=True)
    pos.add_argument("--tick-upper", type=int, required=True)
    pos.add_argument("--liquidity", type=int, required=True)
    pos.add_argument("--sqrt-price", type=int, required=True)
    pos.set_defaults(func=cmd_position)

    mint = sub.add_parser("mint", help="Liquidity and max amounts for a mint")
    mint.add_argument("--tick-lower", type=int, required=True)
    mint.add_argument("--tick-upper", type=int, required=True)
    mint.add_argument("--sqrt-price", type=int, required=True)
    mint.add_argument("--amount0", type=int, required=True)
    mint.add_argument("--amount1", type=int, required=True)
    mint.set_defaults(func=cmd_mint)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
        _configure_logging(args.log_level or settings.log_level)
        payload = args.func(args, settings)
    except (ValueError, OSError) as exc:  # LiqbookError and pydantic ValidationError included
        _configure_logging(args.log_level or "INFO")
        log.error("%s failed: %s", args.command, exc)
        return 2
    _emit(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
