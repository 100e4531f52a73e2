"""Validated data models for records supplied by the external ledger.

These Pydantic models define the contracts between the ledger readers (outside
this package) and the numeric cores. Validation is strict and fails fast so
bad data never reaches the math or the order book.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from liqbook.common.constants import MAX_TICK, MIN_TICK


def _is_hex_address(value: str) -> bool:
    """Return True if the string looks like a 20-byte hex address."""
    if not isinstance(value, str):
        return False
    if not value.startswith("0x") or len(value) != 42:
        return False
    try:
        int(value[2:], 16)
    except ValueError:
        return False
    return True


class OrderSide(IntEnum):
    """Order side as encoded by the order book contract (uint8)."""

    BUY = 0
    SELL = 1

    @classmethod
    def parse(cls, value: "OrderSide | int | str") -> "OrderSide":
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown order side {value!r}") from None
        return cls(value)


class Token(BaseModel):
    """Canonical token metadata."""

    address: str = Field(..., description="EVM address, 0x-prefixed 40 hex chars")
    symbol: str = Field(..., description="Uppercase token symbol, e.g. WETH")
    decimals: int = Field(18, ge=0, le=36, description="Token decimals")

    @field_validator("address")
    @classmethod
    def _valid_address(cls, v: str) -> str:
        if not _is_hex_address(v):
            raise ValueError("address must be 0x-prefixed 40 hex chars")
        return v.lower()

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, v: str) -> str:
        if not v or not v.isascii():
            raise ValueError("symbol required and must be ASCII")
        return v.upper()

    def sorts_before(self, other: "Token") -> bool:
        """True when this token is token0 of a pool with ``other``."""
        return self.address < other.address

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"Token(symbol={self.symbol}, addr={self.address})"


class FeeTier(BaseModel):
    """One pool fee tier and the tick spacing the factory binds to it."""

    model_config = ConfigDict(frozen=True)

    fee: int = Field(..., ge=0, description="Fee in hundredths of a bip, e.g. 3000 = 0.3%")
    tick_spacing: int = Field(..., gt=0)
    label: str | None = None

    @property
    def percent(self) -> float:
        return self.fee / 10_000

    def __repr__(self) -> str:  # pragma: no cover
        return f"FeeTier(fee={self.fee}, spacing={self.tick_spacing})"


class Position(BaseModel):
    """A liquidity position as reported by the position manager."""

    token_id: int | None = Field(None, ge=0)
    tick_lower: int = Field(..., ge=MIN_TICK, le=MAX_TICK)
    tick_upper: int = Field(..., ge=MIN_TICK, le=MAX_TICK)
    liquidity: int = Field(0, ge=0)
    tokens_owed0: int = Field(0, ge=0, description="Uncollected token0 fees")
    tokens_owed1: int = Field(0, ge=0, description="Uncollected token1 fees")

    @model_validator(mode="after")
    def _ordered_ticks(self) -> "Position":
        if self.tick_lower >= self.tick_upper:
            raise ValueError("tick_lower must be below tick_upper")
        return self

    @property
    def is_closed(self) -> bool:
        """Zero liquidity; owed fees may still be collectable."""
        return self.liquidity == 0

    @property
    def has_owed_fees(self) -> bool:
        return self.tokens_owed0 > 0 or self.tokens_owed1 > 0

    def __repr__(self) -> str:  # pragma: no cover
        return f"Position([{self.tick_lower}, {self.tick_upper}) L={self.liquidity})"


class OrderRecord(BaseModel):
    """Per-order status as returned by the order book contract."""

    order_hash: str | None = None
    maker: str | None = None
    side: OrderSide
    total_amount: int = Field(..., ge=0)
    filled_amount: int = Field(0, ge=0)
    limit_price: int = Field(..., ge=0)
    expiry: int = Field(0, ge=0, description="Unix seconds")
    cancelled: bool = False
    exists: bool = True
    allow_partial_fill: bool = True

    @field_validator("side", mode="before")
    @classmethod
    def _parse_side(cls, v):
        return OrderSide.parse(v)

    @field_validator("maker")
    @classmethod
    def _maker_addr(cls, v: str | None) -> str | None:
        if v is not None and not _is_hex_address(v):
            raise ValueError("maker must be valid address")
        return v.lower() if v else v

    @property
    def remaining_amount(self) -> int:
        return max(self.total_amount - self.filled_amount, 0)

    def __repr__(self) -> str:  # pragma: no cover
        return f"OrderRecord({self.side.name} {self.remaining_amount}@{self.limit_price})"


__all__ = ["OrderSide", "Token", "FeeTier", "Position", "OrderRecord"]
