"""Tests for the valuation calculator."""

from datetime import date, datetime, timezone
from decimal import Decimal

from integrations.market_data_protocol import PriceQuote
from services.currency_service import RateTable
from services.holding_service import LotRecord, aggregate_holdings
from services.price_resolver import Unavailable
from services.valuation_service import gain_loss_percent, value_holding, value_portfolio
from utils.asset_types import AssetType

FETCHED_AT = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


def _lot(symbol, quantity, price, currency="USD", asset_type=AssetType.STOCK, lot_id=None):
    return LotRecord(
        lot_id=lot_id or f"{symbol}-{quantity}-{price}-{currency}",
        symbol=symbol,
        name=symbol,
        asset_type=asset_type,
        precision=6 if asset_type == AssetType.CRYPTO else 2,
        quantity=Decimal(quantity),
        purchase_price=Decimal(price),
        purchase_currency=currency,
        purchase_date=date(2024, 6, 1),
        platform="Broker",
    )


def _quote(symbol, price, source="yahoo"):
    return PriceQuote(
        symbol=symbol,
        price=Decimal(price),
        change_24h=Decimal("1.2"),
        source=source,
        fetched_at=FETCHED_AT,
    )


class TestGainLossPercent:
    def test_zero_cost_basis_is_zero(self):
        assert gain_loss_percent(Decimal("50"), Decimal("0")) == Decimal("0")

    def test_negative(self):
        assert gain_loss_percent(Decimal("-25"), Decimal("100")) == Decimal("-25")


class TestValueHolding:
    def test_two_usd_lots_of_aapl(self):
        """10 @ 150 + 5 @ 180, price 200 -> value 3000, cost 2400, +600 (+25%)."""
        holding = aggregate_holdings([_lot("AAPL", "10", "150"), _lot("AAPL", "5", "180")])[0]

        hv = value_holding(holding, _quote("AAPL", "200"), RateTable(), "USD", "USD")

        assert holding.average_cost == Decimal("160")
        assert hv.cost_basis == Decimal("2400")
        assert hv.current_value == Decimal("3000")
        assert hv.gain_loss == Decimal("600")
        assert hv.gain_loss_percent == Decimal("25")
        assert hv.current_price == Decimal("200")
        assert hv.price_source == "yahoo"

    def test_eur_lot_displayed_in_usd(self):
        """0.5 BTC @ EUR 40,000 at EUR->USD 1.08 -> cost 21,600, value 30,000, +8,400."""
        holding = aggregate_holdings(
            [_lot("BTC", "0.5", "40000", currency="EUR", asset_type=AssetType.CRYPTO)]
        )[0]
        rates = RateTable({("EUR", "USD"): Decimal("1.08"), ("USD", "EUR"): Decimal("0.925925925926")})

        hv = value_holding(holding, _quote("BTC", "60000", source="binance"), rates, "USD", "USD")

        assert hv.cost_basis == Decimal("21600")
        assert hv.current_value == Decimal("30000")
        assert hv.gain_loss == Decimal("8400")
        assert round(hv.gain_loss_percent, 2) == Decimal("38.89")
        assert rates.missing_pairs == []

    def test_mixed_currency_converts_each_lot(self):
        """Cost basis is the sum of per-lot conversions, not a converted pre-summed total."""
        holding = aggregate_holdings(
            [
                _lot("SAP", "10", "100", currency="EUR"),
                _lot("SAP", "10", "100", currency="GBP"),
            ]
        )[0]
        rates = RateTable({("EUR", "USD"): Decimal("1.10"), ("GBP", "USD"): Decimal("1.25")})

        hv = value_holding(holding, _quote("SAP", "120"), rates, "USD", "USD")

        assert holding.is_mixed_currency
        assert hv.cost_basis == Decimal("1100") + Decimal("1250")
        # Converting the summed 2000 at either single rate gives a different answer
        assert hv.cost_basis not in (Decimal("2200"), Decimal("2500"))
        assert hv.original is None

    def test_unpriced_holding_leaves_values_unknown(self):
        holding = aggregate_holdings([_lot("AAPL", "10", "150")])[0]

        hv = value_holding(holding, None, RateTable(), "USD", "USD")

        assert hv.cost_basis == Decimal("1500")
        assert hv.current_value is None
        assert hv.gain_loss is None
        assert hv.gain_loss_percent is None
        assert hv.current_price is None
        assert not hv.has_price

    def test_zero_price_is_a_known_value(self):
        holding = aggregate_holdings([_lot("DEAD", "10", "5")])[0]

        hv = value_holding(holding, _quote("DEAD", "0"), RateTable(), "USD", "USD")

        assert hv.current_value == Decimal("0")
        assert hv.gain_loss == Decimal("-50")
        assert hv.gain_loss_percent == Decimal("-100")

    def test_original_currency_view(self):
        holding = aggregate_holdings([_lot("SAP", "10", "100", currency="EUR")])[0]
        rates = RateTable({("EUR", "USD"): Decimal("1.10"), ("USD", "EUR"): Decimal("0.9")})

        hv = value_holding(holding, _quote("SAP", "120"), rates, "USD", "USD")

        assert hv.original is not None
        assert hv.original.currency == "EUR"
        assert hv.original.cost_basis == Decimal("1000")
        assert hv.original.current_price == Decimal("108.0")
        assert hv.original.current_value == Decimal("1080.0")
        assert hv.original.gain_loss == Decimal("80.0")

    def test_missing_rate_uses_unconverted_amount(self, caplog):
        holding = aggregate_holdings([_lot("SAP", "10", "100", currency="CHF")])[0]
        rates = RateTable()

        with caplog.at_level("WARNING"):
            hv = value_holding(holding, _quote("SAP", "120"), rates, "USD", "USD")

        assert hv.cost_basis == Decimal("1000")
        assert ("CHF", "USD") in rates.missing_pairs
        assert "No exchange rate for CHF->USD" in caplog.text


class TestValuePortfolio:
    def test_totals_and_allocation(self):
        holdings = aggregate_holdings(
            [
                _lot("AAPL", "10", "150"),
                _lot("BTC", "0.5", "40000", asset_type=AssetType.CRYPTO),
            ]
        )
        prices = {"AAPL": _quote("AAPL", "200"), "BTC": _quote("BTC", "60000", "binance")}

        valuation = value_portfolio(holdings, prices, RateTable(), "USD")

        assert valuation.total_value == Decimal("32000")
        assert valuation.total_cost_basis == Decimal("21500")
        assert valuation.total_gain_loss == Decimal("10500")
        assert [s.asset_type for s in valuation.allocation] == [AssetType.CRYPTO, AssetType.STOCK]
        assert valuation.value_by_type(AssetType.CRYPTO) == Decimal("30000")
        assert valuation.value_by_type(AssetType.ETF) == Decimal("0")
        assert sum(s.percent for s in valuation.allocation) == Decimal("100")

    def test_unpriced_holdings_excluded_from_value_but_not_cost(self):
        holdings = aggregate_holdings(
            [_lot("AAPL", "10", "150"), _lot("MYSTERY", "1", "500", asset_type=AssetType.CUSTOM)]
        )
        prices = {"AAPL": _quote("AAPL", "200"), "MYSTERY": Unavailable("MYSTERY")}

        valuation = value_portfolio(holdings, prices, RateTable(), "USD")

        assert valuation.unpriced_symbols == ["MYSTERY"]
        assert valuation.total_value == Decimal("2000")
        assert valuation.total_cost_basis == Decimal("2000")
        assert valuation.priced_cost_basis == Decimal("1500")
        assert valuation.total_gain_loss == Decimal("500")
        assert valuation.get("MYSTERY").current_value is None

    def test_missing_price_key_is_unpriced(self):
        holdings = aggregate_holdings([_lot("AAPL", "10", "150")])

        valuation = value_portfolio(holdings, {}, RateTable(), "USD")

        assert valuation.unpriced_symbols == ["AAPL"]
        assert valuation.total_value == Decimal("0")
        assert valuation.total_gain_loss_percent == Decimal("0")
        assert valuation.allocation == []

    def test_display_currency_conversion(self):
        holdings = aggregate_holdings([_lot("AAPL", "10", "150")])
        rates = RateTable({("USD", "EUR"): Decimal("0.9")})

        valuation = value_portfolio(holdings, {"AAPL": _quote("AAPL", "200")}, rates, "EUR")

        assert valuation.display_currency == "EUR"
        assert valuation.total_value == Decimal("1800.0")
        assert valuation.total_cost_basis == Decimal("1350.0")
        assert valuation.missing_rates == []

    def test_missing_rates_reported(self):
        holdings = aggregate_holdings([_lot("AAPL", "10", "150")])

        valuation = value_portfolio(holdings, {"AAPL": _quote("AAPL", "200")}, RateTable(), "JPY")

        assert valuation.missing_rates == [("USD", "JPY")]
        assert valuation.total_value == Decimal("2000")

    def test_empty_portfolio(self):
        valuation = value_portfolio([], {}, RateTable(), "USD")

        assert valuation.holdings == []
        assert valuation.total_value == Decimal("0")
        assert valuation.total_cost_basis == Decimal("0")
