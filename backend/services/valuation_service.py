"""Valuation calculator - prices holdings and totals them in a display currency.

Pure computation over aggregated holdings, resolved prices, and a rate
table. ``None`` on any value field means "unknown" (no price), which is
different from a known value of zero and must be rendered differently.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from integrations.market_data_protocol import PriceQuote
from services.currency_service import RateTable, convert
from services.holding_service import Holding
from services.price_resolver import PriceResult
from utils.asset_types import AssetType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def gain_loss_percent(gain_loss: Decimal, cost_basis: Decimal) -> Decimal:
    """Gain/loss as a percent of cost basis; 0 when cost basis is 0."""
    if cost_basis == 0:
        return ZERO
    return gain_loss / cost_basis * HUNDRED


@dataclass
class OriginalCurrencyView:
    """Holding figures in the currency the lots were bought in (no conversion of cost)."""

    currency: str
    average_cost: Decimal
    cost_basis: Decimal
    current_price: Decimal | None
    current_value: Decimal | None
    gain_loss: Decimal | None
    gain_loss_percent: Decimal | None


@dataclass
class HoldingValuation:
    """One holding priced and converted into the display currency."""

    holding: Holding
    cost_basis: Decimal
    quote: PriceQuote | None = None
    current_value: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None
    original: OriginalCurrencyView | None = None

    @property
    def symbol(self) -> str:
        return self.holding.symbol

    @property
    def asset_type(self) -> AssetType:
        return self.holding.asset_type

    @property
    def average_cost(self) -> Decimal:
        """Weighted-average cost per unit in the display currency, from the lot-by-lot cost basis."""
        return self.cost_basis / self.holding.total_quantity

    @property
    def has_price(self) -> bool:
        return self.quote is not None

    @property
    def current_price(self) -> Decimal | None:
        """Price in the base currency, as quoted."""
        return self.quote.price if self.quote else None

    @property
    def price_source(self) -> str | None:
        return self.quote.source if self.quote else None

    @property
    def price_fetched_at(self) -> datetime | None:
        return self.quote.fetched_at if self.quote else None

    @property
    def change_24h(self) -> Decimal | None:
        return self.quote.change_24h if self.quote else None


@dataclass
class AllocationSlice:
    asset_type: AssetType
    value: Decimal
    percent: Decimal


@dataclass
class PortfolioValuation:
    """Per-holding and portfolio-level figures in ``display_currency``.

    ``total_value`` and ``total_gain_loss`` cover only holdings with a
    known price. ``total_cost_basis`` covers every holding;
    ``priced_cost_basis`` is the part that backs ``total_value``.
    """

    display_currency: str
    base_currency: str
    holdings: list[HoldingValuation] = field(default_factory=list)
    total_value: Decimal = ZERO
    total_cost_basis: Decimal = ZERO
    priced_cost_basis: Decimal = ZERO
    total_gain_loss: Decimal = ZERO
    total_gain_loss_percent: Decimal = ZERO
    allocation: list[AllocationSlice] = field(default_factory=list)
    unpriced_symbols: list[str] = field(default_factory=list)
    missing_rates: list[tuple[str, str]] = field(default_factory=list)

    def value_by_type(self, asset_type: AssetType) -> Decimal:
        for slice_ in self.allocation:
            if slice_.asset_type == asset_type:
                return slice_.value
        return ZERO

    def get(self, symbol: str) -> HoldingValuation | None:
        for hv in self.holdings:
            if hv.symbol == symbol:
                return hv
        return None


def _original_view(
    holding: Holding, quote: PriceQuote | None, base_currency: str, rates: RateTable
) -> OriginalCurrencyView | None:
    if holding.is_mixed_currency:
        return None
    currency = holding.primary_currency
    cost_basis = holding.total_cost
    view = OriginalCurrencyView(
        currency=currency,
        average_cost=holding.average_cost,
        cost_basis=cost_basis,
        current_price=None,
        current_value=None,
        gain_loss=None,
        gain_loss_percent=None,
    )
    if quote is not None:
        view.current_price = convert(quote.price, base_currency, currency, rates)
        view.current_value = convert(holding.total_quantity * quote.price, base_currency, currency, rates)
        view.gain_loss = view.current_value - cost_basis
        view.gain_loss_percent = gain_loss_percent(view.gain_loss, cost_basis)
    return view


def value_holding(
    holding: Holding,
    quote: PriceQuote | None,
    rates: RateTable,
    display_currency: str,
    base_currency: str,
) -> HoldingValuation:
    """Value one holding.

    Cost basis converts each lot into the display currency before summing,
    so lots bought in different currencies each use their own rate.
    """
    cost_basis = ZERO
    for lot in holding.lots:
        cost_basis += convert(lot.cost, lot.purchase_currency, display_currency, rates)

    hv = HoldingValuation(holding=holding, cost_basis=cost_basis, quote=quote)
    if quote is not None:
        hv.current_value = convert(
            holding.total_quantity * quote.price, base_currency, display_currency, rates
        )
        hv.gain_loss = hv.current_value - cost_basis
        hv.gain_loss_percent = gain_loss_percent(hv.gain_loss, cost_basis)
    hv.original = _original_view(holding, quote, base_currency, rates)
    return hv


def value_portfolio(
    holdings: list[Holding],
    prices: Mapping[str, PriceResult],
    rates: RateTable,
    display_currency: str,
    base_currency: str = "USD",
) -> PortfolioValuation:
    """Combine holdings, resolved prices, and rates into a :class:`PortfolioValuation`.

    Args:
        holdings: Aggregated holdings for one user.
        prices: Resolver output; anything that is not a :class:`PriceQuote`
            (including a missing key) leaves the holding unpriced.
        rates: Directed rate table. Pairs it lacks are reported in
            ``missing_rates`` and the amount is used unconverted.
        display_currency: Currency for all converted figures.
        base_currency: Currency quotes are denominated in.
    """
    valuation = PortfolioValuation(display_currency=display_currency, base_currency=base_currency)
    value_by_type: dict[AssetType, Decimal] = {}

    for holding in holdings:
        result = prices.get(holding.symbol)
        quote = result if isinstance(result, PriceQuote) else None
        hv = value_holding(holding, quote, rates, display_currency, base_currency)
        valuation.holdings.append(hv)
        valuation.total_cost_basis += hv.cost_basis

        if hv.current_value is None:
            valuation.unpriced_symbols.append(holding.symbol)
            continue
        valuation.total_value += hv.current_value
        valuation.priced_cost_basis += hv.cost_basis
        value_by_type[holding.asset_type] = (
            value_by_type.get(holding.asset_type, ZERO) + hv.current_value
        )

    valuation.total_gain_loss = valuation.total_value - valuation.priced_cost_basis
    valuation.total_gain_loss_percent = gain_loss_percent(
        valuation.total_gain_loss, valuation.priced_cost_basis
    )

    for asset_type in AssetType:
        if asset_type not in value_by_type:
            continue
        value = value_by_type[asset_type]
        percent = value / valuation.total_value * HUNDRED if valuation.total_value > 0 else ZERO
        valuation.allocation.append(AllocationSlice(asset_type=asset_type, value=value, percent=percent))

    valuation.missing_rates = rates.missing_pairs
    if valuation.unpriced_symbols:
        logger.info(
            "Valuation excludes %d unpriced holdings: %s",
            len(valuation.unpriced_symbols),
            ", ".join(valuation.unpriced_symbols),
        )
    return valuation
