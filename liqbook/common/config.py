"""Configuration loading and manifest validation utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from jsonschema import Draft7Validator
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from liqbook.common.models import FeeTier

log = logging.getLogger(__name__)

DEFAULT_FEE_TIERS: List[Dict[str, Any]] = [
    {"fee": 100, "tick_spacing": 2, "label": "0.01%"},
    {"fee": 500, "tick_spacing": 10, "label": "0.05%"},
    {"fee": 3000, "tick_spacing": 60, "label": "0.3%"},
    {"fee": 10000, "tick_spacing": 200, "label": "1%"},
]


def _load_json(path: str | Path) -> Any:
    with Path(path).expanduser().open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _load_schema(name: str) -> Dict[str, Any]:
    here = Path(__file__).resolve().parent / "schemas"
    return _load_json(here / name)


def validate_json_manifest(payload: Any, schema_name: str) -> None:
    """Validate a manifest against a bundled JSON schema."""
    schema = _load_schema(schema_name)
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.path))
    if errors:
        msgs = "; ".join(f"{'/'.join(map(str, e.path))}: {e.message}" for e in errors)
        raise ValueError(f"Manifest validation failed: {msgs}")


def load_validated_manifest(path: str | Path, schema_name: str) -> Any:
    """Load JSON file and validate it; returns the parsed object."""
    payload = _load_json(path)
    validate_json_manifest(payload, schema_name)
    return payload


class FeeTierTable:
    """Fee tier -> tick spacing mapping handed explicitly to range helpers."""

    def __init__(self, tiers: Iterable[FeeTier]) -> None:
        self._tiers: Dict[int, FeeTier] = {}
        for tier in tiers:
            if tier.fee in self._tiers:
                raise ValueError(f"duplicate fee tier {tier.fee}")
            self._tiers[tier.fee] = tier

    def tick_spacing(self, fee: int) -> int:
        try:
            return self._tiers[fee].tick_spacing
        except KeyError:
            raise ValueError(f"unsupported fee tier {fee}; known: {sorted(self._tiers)}") from None

    def fees(self) -> List[int]:
        return sorted(self._tiers)

    def __contains__(self, fee: object) -> bool:
        return fee in self._tiers

    def __iter__(self):
        return iter(self._tiers[fee] for fee in self.fees())

    def __len__(self) -> int:
        return len(self._tiers)

    @classmethod
    def from_manifest(cls, payload: Dict[str, Any]) -> "FeeTierTable":
        validate_json_manifest(payload, "fee_tiers.schema.json")
        return cls(FeeTier(**row) for row in payload["fee_tiers"])


def default_fee_tiers() -> FeeTierTable:
    return FeeTierTable(FeeTier(**row) for row in DEFAULT_FEE_TIERS)


def load_fee_tiers(path: str | Path) -> FeeTierTable:
    table = FeeTierTable.from_manifest(_load_json(path))
    log.info("Loaded %d fee tiers from %s", len(table), path)
    return table


class Settings(BaseSettings):
    """Environment-driven configuration for liqbook."""

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    fee_tier_manifest_path: str | None = Field(None, alias="FEE_TIER_MANIFEST_PATH")
    slippage_bps: int = Field(300, ge=0, alias="SLIPPAGE_BPS")
    liquidity_buffer_bps: int = Field(50, ge=0, le=10_000, alias="LIQUIDITY_BUFFER_BPS")
    book_depth: int | None = Field(None, gt=0, alias="BOOK_DEPTH")

    # Load environment from a dot-env file if present; ignore unrelated keys
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    def load_fee_tiers(self) -> FeeTierTable:
        """Manifest tiers when a path is configured, otherwise the factory defaults."""
        if self.fee_tier_manifest_path:
            return load_fee_tiers(self.fee_tier_manifest_path)
        return default_fee_tiers()


__all__ = [
    "DEFAULT_FEE_TIERS",
    "FeeTierTable",
    "Settings",
    "default_fee_tiers",
    "load_fee_tiers",
    "load_validated_manifest",
    "validate_json_manifest",
]
