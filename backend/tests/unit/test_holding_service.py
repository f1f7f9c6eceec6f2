"""Tests for lot -> holding aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from services.holding_service import HoldingFilter, LotRecord, aggregate_holdings
from utils.asset_types import AssetType


def _lot(
    symbol="AAPL",
    quantity="10",
    price="150",
    currency="USD",
    asset_type=AssetType.STOCK,
    platform="Broker",
    name=None,
    lot_id=None,
) -> LotRecord:
    return LotRecord(
        lot_id=lot_id or f"{symbol}-{quantity}-{price}-{currency}",
        symbol=symbol,
        name=name or symbol,
        asset_type=asset_type,
        precision=6 if asset_type == AssetType.CRYPTO else 2,
        quantity=Decimal(quantity),
        purchase_price=Decimal(price),
        purchase_currency=currency,
        purchase_date=date(2024, 1, 1),
        platform=platform,
    )


class TestAggregateHoldings:
    def test_weighted_average_cost(self):
        """(10*150 + 5*180) / 15 = 160."""
        holdings = aggregate_holdings([_lot(quantity="10", price="150"), _lot(quantity="5", price="180")])

        assert len(holdings) == 1
        h = holdings[0]
        assert h.total_quantity == Decimal("15")
        assert h.total_cost == Decimal("2400")
        assert h.average_cost == Decimal("160")
        assert not h.is_mixed_currency
        assert h.primary_currency == "USD"

    def test_sorted_by_symbol(self):
        holdings = aggregate_holdings(
            [_lot("MSFT"), _lot("BTC", asset_type=AssetType.CRYPTO), _lot("AAPL")]
        )
        assert [h.symbol for h in holdings] == ["AAPL", "BTC", "MSFT"]

    def test_total_quantity_equals_sum_of_lots(self):
        lots = [
            _lot("BTC", quantity="0.123456", price="40000", asset_type=AssetType.CRYPTO),
            _lot("BTC", quantity="0.5", price="30000", asset_type=AssetType.CRYPTO),
            _lot("BTC", quantity="1.000001", price="20000", asset_type=AssetType.CRYPTO),
        ]
        (h,) = aggregate_holdings(lots)
        assert h.total_quantity == sum(l.quantity for l in lots)
        assert len(h.lots) == 3

    def test_mixed_currency_detection(self):
        (h,) = aggregate_holdings(
            [
                _lot(currency="EUR", quantity="1"),
                _lot(currency="USD", quantity="2"),
                _lot(currency="USD", quantity="3"),
            ]
        )
        assert h.is_mixed_currency
        assert h.primary_currency == "USD"
        assert h.cost_by_currency == {"EUR": Decimal("150"), "USD": Decimal("750")}
        assert h.average_cost_by_currency == {"EUR": Decimal("150"), "USD": Decimal("150")}

    def test_primary_currency_tie_goes_to_first_seen(self):
        (h,) = aggregate_holdings([_lot(currency="EUR"), _lot(currency="USD", price="1")])
        assert h.primary_currency == "EUR"

    def test_empty_input(self):
        assert aggregate_holdings([]) == []

    def test_zero_quantity_is_internal_error(self):
        with pytest.raises(ValueError, match="non-positive"):
            aggregate_holdings([_lot(quantity="0")])

    def test_platforms_in_first_seen_order(self):
        (h,) = aggregate_holdings([_lot(platform="B"), _lot(platform="A", price="1"), _lot(platform="B", price="2")])
        assert h.platforms == ["B", "A"]


class TestHoldingFilter:
    @pytest.fixture
    def lots(self):
        return [
            _lot("AAPL", name="Apple Inc.", platform="Schwab"),
            _lot("BTC", asset_type=AssetType.CRYPTO, name="Bitcoin", platform="Binance"),
            _lot("SPY", asset_type=AssetType.ETF, name="SPDR S&P 500 ETF", platform="Schwab"),
        ]

    def test_by_symbol(self, lots):
        assert [h.symbol for h in aggregate_holdings(lots, HoldingFilter(symbol="btc"))] == ["BTC"]

    def test_by_asset_type(self, lots):
        result = aggregate_holdings(lots, HoldingFilter(asset_type=AssetType.ETF))
        assert [h.symbol for h in result] == ["SPY"]

    def test_by_platform_case_insensitive(self, lots):
        result = aggregate_holdings(lots, HoldingFilter(platform="schwab"))
        assert [h.symbol for h in result] == ["AAPL", "SPY"]

    def test_search_matches_name(self, lots):
        result = aggregate_holdings(lots, HoldingFilter(search="bit"))
        assert [h.symbol for h in result] == ["BTC"]

    def test_empty_filter_matches_all(self, lots):
        assert len(aggregate_holdings(lots, HoldingFilter())) == 3
