"""Portfolio service - loads a user's lots and runs the valuation pipeline.

lots -> holdings -> prices + rates -> :class:`PortfolioValuation`
"""

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy.orm import Session

from config import settings
from integrations.market_data_protocol import QuoteProvider
from services.asset_catalog_service import DatabaseAssetCatalog
from services.exchange_rate_service import ExchangeRateService
from services.holding_service import HoldingFilter, aggregate_holdings
from services.lot_service import LotService
from services.manual_price_service import DatabaseManualPriceSource
from services.preference_service import PreferenceService
from services.price_cache import PriceCache
from services.price_resolver import PriceResolver, ResolutionResult, default_provider_chains
from services.valuation_service import PortfolioValuation, value_portfolio
from utils.asset_types import AssetType
from utils.currency import normalize_currency

logger = logging.getLogger(__name__)

# Quotes are shared across users; one cache per process
_price_cache = PriceCache()


def get_price_cache() -> PriceCache:
    return _price_cache


class PortfolioService:
    """Builds valuations for a user from stored lots, prices, and rates.

    Args:
        chains: Provider chains per asset type. Defaults to the live
            provider clients.
        cache: Quote cache. Defaults to the process-wide cache.
    """

    def __init__(
        self,
        chains: Mapping[AssetType, list[QuoteProvider]] | None = None,
        cache: PriceCache | None = None,
    ):
        self._chains = chains
        self._cache = cache if cache is not None else get_price_cache()

    def price_resolver(self, db: Session, user_id: str) -> PriceResolver:
        """A resolver bound to ``db`` for manual prices and to the assets ``user_id`` can see."""
        chains = self._chains if self._chains is not None else default_provider_chains()
        return PriceResolver(
            cache=self._cache,
            chains=chains,
            manual_prices=DatabaseManualPriceSource(db),
            catalog=DatabaseAssetCatalog(db, user_id),
        )

    def resolve_prices(
        self, db: Session, user_id: str, symbols: Iterable[str], force_refresh: bool = False
    ) -> ResolutionResult:
        """Resolve prices for catalog symbols visible to ``user_id``."""
        return self.price_resolver(db, user_id).resolve_detailed(symbols, force_refresh=force_refresh)

    def get_valuation(
        self,
        db: Session,
        user_id: str,
        display_currency: str | None = None,
        filters: HoldingFilter | None = None,
        force_refresh: bool = False,
    ) -> PortfolioValuation:
        """Value a user's portfolio.

        Args:
            db: Database session.
            user_id: Owner of the lots.
            display_currency: Overrides the user's saved display currency.
            filters: Optional lot filter applied before aggregation.
            force_refresh: Bypass fresh cache entries for every held symbol.
        """
        currency = (
            normalize_currency(display_currency)
            if display_currency
            else PreferenceService.get_display_currency(db, user_id)
        )
        holdings = aggregate_holdings(LotService.get_lot_records(db, user_id), filters)
        asset_types = {h.symbol: h.asset_type for h in holdings}

        prices = {}
        if holdings:
            prices = self.price_resolver(db, user_id).resolve(
                asset_types.keys(), force_refresh=force_refresh, asset_types=asset_types
            )

        valuation = value_portfolio(
            holdings,
            prices,
            ExchangeRateService.get_rate_table(db),
            display_currency=currency,
            base_currency=settings.BASE_CURRENCY,
        )
        logger.info(
            "Valued %d holdings for user %s: %s %s",
            len(valuation.holdings),
            user_id,
            valuation.total_value,
            currency,
        )
        return valuation
