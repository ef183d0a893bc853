"""Tests for price_merger.py: base price resolution, clamping and apply."""

from types import MappingProxyType
from unittest.mock import MagicMock

import pytest

from conftest import FakePricing, make_tables
from mod_config import ModConfig
from price_merger import (
    PriceMerger,
    build_handbook_index,
    clamp_price,
    resolve_base_price,
)


def make_merger(fetched, tables, snapshot=None, mult=1.5, pricing=None):
    fetcher = MagicMock()
    fetcher.fetch_prices.return_value = fetched
    merger = PriceMerger(
        tables,
        MappingProxyType(dict(snapshot if snapshot is not None else tables.prices)),
        ModConfig(max_increase_mult=mult),
        fetcher,
        pricing,
    )
    return merger, fetcher


# ── Pure helpers ─────────────────────────────────────────

class TestClampPrice:
    def test_under_max_passes_through(self):
        assert clamp_price(120, 100, 1.5) == (120, False)

    def test_equal_to_max_passes_through(self):
        assert clamp_price(150, 100, 1.5) == (150, False)

    def test_over_max_clamps(self):
        price, clamped = clamp_price(200, 100, 1.5)
        assert price == pytest.approx(150)
        assert clamped

    def test_zero_base_clamps_to_zero(self):
        assert clamp_price(50, 0, 1.5) == (0, True)


class TestResolveBasePrice:
    def test_snapshot_first(self):
        assert resolve_base_price("a", {"a": 100}, {"a": 999}) == 100

    def test_handbook_second(self):
        assert resolve_base_price("a", {}, {"a": 80}) == 80

    def test_zero_snapshot_falls_through_to_handbook(self):
        assert resolve_base_price("a", {"a": 0}, {"a": 80}) == 80

    def test_zero_last(self):
        assert resolve_base_price("a", {}, {}) == 0

    def test_handbook_without_price(self):
        assert resolve_base_price("a", {}, {"a": None}) == 0


def test_handbook_index_first_entry_wins():
    handbook = {"Items": [
        {"Id": "a", "Price": 10},
        {"Id": "b", "Price": 20},
        {"Id": "a", "Price": 30},
    ]}
    assert build_handbook_index(handbook) == {"a": 10, "b": 20}


def test_handbook_index_empty():
    assert build_handbook_index({}) == {}


# ── apply_prices ─────────────────────────────────────────

class TestApplyPrices:
    def test_example_scenario(self):
        """base 100 x1.5: 200 clamps to 150, 120 passes, unknown base clamps to 0."""
        tables = make_tables(
            prices={"high": 100, "ok": 100},
            items=["high", "ok", "mystery"],
        )
        merger, _ = make_merger({"high": 200, "ok": 120, "mystery": 50}, tables)

        assert merger.apply_prices() is True
        assert tables.prices["high"] == pytest.approx(150)
        assert tables.prices["ok"] == 120
        assert tables.prices["mystery"] == 0

    def test_unknown_items_never_written(self):
        tables = make_tables(prices={"known": 10}, items=["known"])
        merger, _ = make_merger({"known": 12, "removed": 5}, tables)
        merger.apply_prices()
        assert "removed" not in tables.prices
        assert tables.prices == {"known": 12}

    def test_handbook_fallback(self):
        tables = make_tables(
            items=["hb"],
            handbook_items=[{"Id": "hb", "Price": 40}],
        )
        merger, _ = make_merger({"hb": 100}, tables, mult=2.0)
        merger.apply_prices()
        assert tables.prices["hb"] == pytest.approx(80)

    def test_baseline_is_snapshot_not_live_table(self):
        # Live table already raised by an earlier cycle; clamp uses the snapshot
        tables = make_tables(prices={"a": 140}, items=["a"])
        merger, _ = make_merger({"a": 200}, tables, snapshot={"a": 100})
        merger.apply_prices()
        assert tables.prices["a"] == pytest.approx(150)

    def test_items_missing_from_fetch_untouched(self):
        tables = make_tables(prices={"a": 100, "b": 7}, items=["a", "b"])
        merger, _ = make_merger({"a": 110}, tables)
        merger.apply_prices()
        assert tables.prices["b"] == 7

    def test_regenerates_dynamic_prices(self):
        pricing = FakePricing()
        tables = make_tables(prices={"a": 100}, items=["a"])
        merger, _ = make_merger({"a": 110}, tables, pricing=pricing)
        merger.apply_prices()
        assert pricing.calls == 1

    def test_force_passed_to_fetcher(self):
        tables = make_tables()
        merger, fetcher = make_merger({}, tables)
        merger.apply_prices(False)
        fetcher.fetch_prices.assert_called_once_with(False)
        merger.apply_prices()
        fetcher.fetch_prices.assert_called_with(True)

    def test_fetch_error_propagates(self):
        from price_fetcher import FetchError

        pricing = FakePricing()
        tables = make_tables(prices={"a": 100}, items=["a"])
        merger, fetcher = make_merger({}, tables, pricing=pricing)
        fetcher.fetch_prices.side_effect = FetchError("boom")

        with pytest.raises(FetchError):
            merger.apply_prices()
        assert tables.prices == {"a": 100}
        assert pricing.calls == 0

    def test_logs_clamps_at_debug(self, caplog):
        tables = make_tables(prices={"a": 100}, items=["a"])
        merger, _ = make_merger({"a": 200}, tables)
        with caplog.at_level("DEBUG", logger="price_merger"):
            merger.apply_prices()
        assert any("Setting a to 150.0 instead of 200 due to over inflation" in r.getMessage()
                   for r in caplog.records)
        assert caplog.records[-1].getMessage() == "[LFP] Flea Prices Updated!"

    def test_non_numeric_cached_values_skipped(self):
        """A bad entry in an old prices.json must not abort the whole merge."""
        pricing = FakePricing()
        tables = make_tables(prices={"a": 100, "b": 100, "c": 100}, items=["a", "b", "c"])
        merger, _ = make_merger({"a": 120, "b": None, "c": "90"}, tables, pricing=pricing)

        assert merger.apply_prices() is True
        assert tables.prices == {"a": 120, "b": 100, "c": 100}
        assert pricing.calls == 1
