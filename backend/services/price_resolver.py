"""Price resolution waterfall.

For a batch of symbols, :class:`PriceResolver` walks each symbol down an
ordered chain of sources until one yields a price:

1. fresh cache entry (skipped on ``force_refresh``)
2. primary provider for the asset type
3. secondary provider for the asset type
4. expired cache entry, re-tagged ``"<source> (cached)"``
5. latest manual price (the only tier custom assets use)
6. :class:`Unavailable`

Provider calls are batched: one call per (provider, asset type) per tier,
fanned out on a small thread pool with a per-call timeout and an overall
deadline. A provider that errors or times out fails every symbol it was
asked for, and only those symbols fall through to the next tier.
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Protocol

from config import settings
from integrations.alpha_vantage_client import AlphaVantageClient
from integrations.binance_client import BinanceClient
from integrations.coingecko_client import CoinGeckoClient
from integrations.exceptions import ProviderError
from integrations.market_data_protocol import PriceQuote, QuoteProvider
from integrations.yahoo_finance_client import YahooFinanceClient
from services.price_cache import PriceCache
from utils.asset_types import AssetType
from utils.ticker import mark_stale, normalize_symbol

logger = logging.getLogger(__name__)


class PriceTier(str, Enum):
    """Which waterfall step produced a symbol's result."""

    CACHED = "cached"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    CACHED_STALE = "cached_stale"
    MANUAL = "manual"
    UNAVAILABLE = "unavailable"


# Provider tiers beyond the second (if a chain is extended) report as SECONDARY
_PROVIDER_TIERS = (PriceTier.PRIMARY, PriceTier.SECONDARY)


@dataclass(frozen=True)
class Unavailable:
    """No price could be found for ``symbol``. Render as "no price", never as zero."""

    symbol: str
    reason: str = "no price available"


PriceResult = PriceQuote | Unavailable


class AssetTypeLookup(Protocol):
    """Anything that can map a symbol to its asset type."""

    def asset_type_for(self, symbol: str) -> AssetType | None:
        ...


class ManualPriceSource(Protocol):
    """Source of user-entered prices, already shaped as ``manual`` quotes."""

    def latest_quote(self, symbol: str) -> PriceQuote | None:
        ...


@dataclass
class ResolutionResult:
    """Per-symbol outcome of one :meth:`PriceResolver.resolve_detailed` call."""

    prices: dict[str, PriceResult] = field(default_factory=dict)
    tiers: dict[str, PriceTier] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def record(self, symbol: str, result: PriceResult, tier: PriceTier) -> None:
        self.prices[symbol] = result
        self.tiers[symbol] = tier


def default_ttls() -> dict[AssetType, timedelta]:
    """Freshness windows per asset type from settings."""
    equity = timedelta(seconds=settings.EQUITY_PRICE_TTL_SECONDS)
    return {
        AssetType.CRYPTO: timedelta(seconds=settings.CRYPTO_PRICE_TTL_SECONDS),
        AssetType.STOCK: equity,
        AssetType.ETF: equity,
    }


@lru_cache
def default_provider_chains() -> dict[AssetType, list[QuoteProvider]]:
    """Build the process-wide provider chains (cached; clients hold connection pools)."""
    timeout = settings.PRICE_PROVIDER_TIMEOUT_SECONDS
    yahoo = YahooFinanceClient()
    alpha_vantage = AlphaVantageClient(
        api_key=settings.ALPHA_VANTAGE_API_KEY or None, timeout=timeout
    )
    return {
        AssetType.CRYPTO: [
            BinanceClient(timeout=timeout),
            CoinGeckoClient(api_key=settings.COINGECKO_API_KEY or None, timeout=timeout),
        ],
        AssetType.STOCK: [yahoo, alpha_vantage],
        AssetType.ETF: [yahoo, alpha_vantage],
    }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceResolver:
    """Resolves current prices for symbols through the provider waterfall.

    Args:
        cache: Shared quote cache. Written on every provider success.
        chains: Ordered providers per asset type. Asset types without a
            chain (custom assets) skip straight to manual prices.
        ttls: Freshness window per asset type. Missing types never hit
            the fresh-cache tier.
        manual_prices: Optional source of user-entered prices.
        catalog: Optional symbol -> asset type lookup used when the
            caller does not pass ``asset_types``.
        provider_timeout: Seconds allowed for each tier's provider calls.
        deadline: Default overall seconds for one resolve call.
        max_workers: Upper bound on concurrent provider calls.
        clock: Returns the current UTC time (injectable for tests).
    """

    def __init__(
        self,
        cache: PriceCache,
        chains: Mapping[AssetType, list[QuoteProvider]],
        ttls: Mapping[AssetType, timedelta] | None = None,
        manual_prices: ManualPriceSource | None = None,
        catalog: AssetTypeLookup | None = None,
        provider_timeout: float | None = None,
        deadline: float | None = None,
        max_workers: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._cache = cache
        self._chains = {AssetType(k): list(v) for k, v in chains.items()}
        self._ttls = dict(ttls) if ttls is not None else default_ttls()
        self._manual_prices = manual_prices
        self._catalog = catalog
        self._provider_timeout = (
            provider_timeout
            if provider_timeout is not None
            else settings.PRICE_PROVIDER_TIMEOUT_SECONDS
        )
        self._deadline = (
            deadline if deadline is not None else settings.PRICE_RESOLUTION_DEADLINE_SECONDS
        )
        self._max_workers = max_workers or settings.PRICE_MAX_WORKERS
        self._clock = clock

    def resolve(
        self,
        symbols: Iterable[str],
        force_refresh: bool = False,
        asset_types: Mapping[str, AssetType] | None = None,
        deadline: float | None = None,
    ) -> dict[str, PriceResult]:
        """Resolve a price (or :class:`Unavailable`) for every symbol."""
        return self.resolve_detailed(
            symbols, force_refresh=force_refresh, asset_types=asset_types, deadline=deadline
        ).prices

    def resolve_detailed(
        self,
        symbols: Iterable[str],
        force_refresh: bool = False,
        asset_types: Mapping[str, AssetType] | None = None,
        deadline: float | None = None,
    ) -> ResolutionResult:
        """Resolve prices and report which tier served each symbol.

        Args:
            symbols: Symbols to price; normalized to upper case.
            force_refresh: Skip the fresh-cache tier and drop cached
                entries for these symbols before querying providers.
            asset_types: Known asset types by symbol. Symbols missing
                here are looked up in the catalog.
            deadline: Overall seconds for this call; defaults to the
                resolver's configured deadline.
        """
        started_at = self._clock()
        expires_at = time.monotonic() + (deadline if deadline is not None else self._deadline)
        known_types = {normalize_symbol(s): AssetType(t) for s, t in (asset_types or {}).items()}
        requested = sorted({normalize_symbol(s) for s in symbols})
        result = ResolutionResult()

        if force_refresh:
            removed = self._cache.invalidate(requested)
            logger.info("Force refresh: dropped %d cached quotes", removed)

        pending: dict[AssetType, list[str]] = {}
        provider_backed: set[str] = set()
        for symbol in requested:
            asset_type = known_types.get(symbol) or self._lookup_type(symbol)
            if asset_type is None:
                result.record(symbol, Unavailable(symbol, "unknown symbol"), PriceTier.UNAVAILABLE)
                continue
            if not self._chains.get(asset_type):
                continue  # no providers; handled by the manual tier below
            provider_backed.add(symbol)
            if not force_refresh:
                ttl = self._ttls.get(asset_type)
                cached = self._cache.get_fresh(symbol, ttl, started_at) if ttl else None
                if cached is not None:
                    result.record(symbol, cached, PriceTier.CACHED)
                    continue
            pending.setdefault(asset_type, []).append(symbol)

        self._run_provider_tiers(pending, expires_at, result)

        for symbol in requested:
            if symbol in result.prices:
                continue
            self._resolve_fallback(
                symbol, force_refresh and symbol in provider_backed, started_at, result
            )

        unavailable = [s for s, t in result.tiers.items() if t == PriceTier.UNAVAILABLE]
        if unavailable:
            logger.warning("No price for %d symbols: %s", len(unavailable), ", ".join(unavailable))
        return result

    def _lookup_type(self, symbol: str) -> AssetType | None:
        if self._catalog is None:
            return None
        return self._catalog.asset_type_for(symbol)

    def _run_provider_tiers(
        self,
        pending: dict[AssetType, list[str]],
        expires_at: float,
        result: ResolutionResult,
    ) -> None:
        """Query providers tier by tier, narrowing ``pending`` to what is still unpriced."""
        depth = max((len(self._chains[t]) for t in pending), default=0)
        for index in range(depth):
            groups = {
                asset_type: (self._chains[asset_type][index], symbols)
                for asset_type, symbols in pending.items()
                if symbols and index < len(self._chains[asset_type])
            }
            if not groups:
                return
            if time.monotonic() >= expires_at:
                result.errors.append("Resolution deadline reached before all providers were tried")
                logger.warning("Price resolution deadline reached at provider tier %d", index + 1)
                return

            fetched, deadline_hit = self._fetch_groups(groups, expires_at, result)
            tier = _PROVIDER_TIERS[min(index, len(_PROVIDER_TIERS) - 1)]
            for asset_type, (_, symbols) in groups.items():
                quotes = fetched.get(asset_type, {})
                remaining = []
                for symbol in symbols:
                    quote = quotes.get(symbol)
                    if quote is None:
                        remaining.append(symbol)
                        continue
                    self._cache.put(quote)
                    result.record(symbol, quote, tier)
                pending[asset_type] = remaining

            if deadline_hit:
                result.errors.append("Resolution deadline reached before all providers were tried")
                logger.warning("Price resolution deadline reached at provider tier %d", index + 1)
                return

    def _fetch_groups(
        self,
        groups: dict[AssetType, tuple[QuoteProvider, list[str]]],
        expires_at: float,
        result: ResolutionResult,
    ) -> tuple[dict[AssetType, dict[str, PriceQuote]], bool]:
        """Call each group's provider concurrently and collect what came back in time.

        Returns the quotes per group, and whether the overall deadline (rather
        than the per-call timeout) cut the wait short with calls still pending.
        """
        fetched: dict[AssetType, dict[str, PriceQuote]] = {}
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(groups)),
            thread_name_prefix="price-provider",
        )
        try:
            futures = {
                executor.submit(provider.get_quotes, list(symbols)): asset_type
                for asset_type, (provider, symbols) in groups.items()
            }
            remaining = expires_at - time.monotonic()
            timeout = max(0.0, min(self._provider_timeout, remaining))
            done, not_done = wait(futures, timeout=timeout)
            deadline_hit = bool(not_done) and remaining <= self._provider_timeout

            for future in done:
                asset_type = futures[future]
                provider, symbols = groups[asset_type]
                try:
                    quotes = future.result()
                except ProviderError as e:
                    msg = f"{provider.provider_name} failed for {asset_type.value} ({e.describe()})"
                    logger.warning("Price provider %s", msg)
                    result.errors.append(msg)
                    continue
                except Exception as e:
                    # Client bug or an exception the client did not wrap
                    msg = f"{provider.provider_name} failed for {asset_type.value}: {e!r}"
                    logger.exception("Price provider %s", msg)
                    result.errors.append(msg)
                    continue
                wanted = set(symbols)
                fetched[asset_type] = {s: q for s, q in quotes.items() if s in wanted}
                logger.info(
                    "%s priced %d/%d %s symbols",
                    provider.provider_name,
                    len(fetched[asset_type]),
                    len(symbols),
                    asset_type.value,
                )

            for future in not_done:
                future.cancel()
                provider, symbols = groups[futures[future]]
                msg = f"{provider.provider_name} timed out after {timeout:.1f}s"
                logger.warning("Price provider %s (%d symbols)", msg, len(symbols))
                result.errors.append(msg)
        finally:
            # Abandon calls still in flight; their results are never read
            executor.shutdown(wait=False, cancel_futures=True)
        return fetched, deadline_hit

    def _resolve_fallback(
        self,
        symbol: str,
        force_refresh: bool,
        started_at: datetime,
        result: ResolutionResult,
    ) -> None:
        """Stale cache, then manual price, then Unavailable.

        ``force_refresh`` is only set for provider-backed symbols: neither
        a cached nor a manual quote older than ``started_at`` is returned
        for them. Custom assets always fall through to their manual price.
        """
        cached = self._cache.get(symbol)
        if cached is not None and not (force_refresh and cached.fetched_at < started_at):
            logger.info("Serving stale %s quote for %s", cached.source, symbol)
            result.record(
                symbol, replace(cached, source=mark_stale(cached.source)), PriceTier.CACHED_STALE
            )
            return

        if self._manual_prices is not None:
            manual = self._manual_prices.latest_quote(symbol)
            if manual is not None and not (force_refresh and manual.fetched_at < started_at):
                result.record(symbol, manual, PriceTier.MANUAL)
                return

        result.record(symbol, Unavailable(symbol), PriceTier.UNAVAILABLE)
