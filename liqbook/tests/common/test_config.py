import json

import pytest

from liqbook.common.config import (
    FeeTierTable,
    Settings,
    default_fee_tiers,
    load_fee_tiers,
    load_validated_manifest,
    validate_json_manifest,
)
from liqbook.common.models import FeeTier


def test_default_fee_tiers():
    table = default_fee_tiers()
    assert table.fees() == [100, 500, 3000, 10000]
    assert [table.tick_spacing(f) for f in table.fees()] == [2, 10, 60, 200]
    assert 3000 in table and 42 not in table
    assert len(table) == 4
    assert [tier.fee for tier in table] == [100, 500, 3000, 10000]


def test_unknown_fee_tier():
    with pytest.raises(ValueError, match="unsupported fee tier"):
        default_fee_tiers().tick_spacing(2500)


def test_duplicate_fee_tier_rejected():
    with pytest.raises(ValueError, match="duplicate"):
        FeeTierTable([FeeTier(fee=500, tick_spacing=10), FeeTier(fee=500, tick_spacing=20)])


def test_load_fee_tiers_from_manifest(tmp_path):
    path = tmp_path / "tiers.json"
    path.write_text(json.dumps({"fee_tiers": [{"fee": 2500, "tick_spacing": 50, "label": "0.25%"}]}))
    table = load_fee_tiers(path)
    assert table.fees() == [2500]
    assert table.tick_spacing(2500) == 50


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"fee_tiers": []},
        {"fee_tiers": [{"fee": 500}]},
        {"fee_tiers": [{"fee": 500, "tick_spacing": 0}]},
        {"fee_tiers": [{"fee": 500, "tick_spacing": 10, "extra": 1}]},
    ],
)
def test_invalid_fee_manifest(payload):
    with pytest.raises(ValueError, match="Manifest validation failed"):
        FeeTierTable.from_manifest(payload)


def test_orders_manifest(tmp_path):
    rows = [{"side": "buy", "limit_price": 100, "total_amount": 5}]
    path = tmp_path / "orders.json"
    path.write_text(json.dumps(rows))
    assert load_validated_manifest(path, "orders.schema.json") == rows
    with pytest.raises(ValueError):
        validate_json_manifest([{"side": "hold", "limit_price": 1, "total_amount": 1}], "orders.schema.json")


def test_settings_defaults(monkeypatch):
    for key in ("LOG_LEVEL", "FEE_TIER_MANIFEST_PATH", "SLIPPAGE_BPS", "LIQUIDITY_BUFFER_BPS", "BOOK_DEPTH"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.slippage_bps == 300
    assert settings.liquidity_buffer_bps == 50
    assert settings.book_depth is None
    assert settings.load_fee_tiers().tick_spacing(3000) == 60


def test_settings_from_env(monkeypatch, tmp_path):
    path = tmp_path / "tiers.json"
    path.write_text(json.dumps({"fee_tiers": [{"fee": 3000, "tick_spacing": 30}]}))
    monkeypatch.setenv("SLIPPAGE_BPS", "100")
    monkeypatch.setenv("BOOK_DEPTH", "5")
    monkeypatch.setenv("FEE_TIER_MANIFEST_PATH", str(path))
    settings = Settings(_env_file=None)
    assert settings.slippage_bps == 100
    assert settings.book_depth == 5
    assert settings.load_fee_tiers().tick_spacing(3000) == 30


def test_settings_reject_bad_buffer(monkeypatch):
    monkeypatch.setenv("LIQUIDITY_BUFFER_BPS", "20000")
    with pytest.raises(ValueError):
        Settings(_env_file=None)
