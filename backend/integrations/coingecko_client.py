"""CoinGecko market data provider for cryptocurrency quotes."""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from integrations.exceptions import ProviderDataError, ProviderError
from integrations.http_utils import parse_json, request_with_retry
from integrations.market_data_protocol import PriceQuote

logger = logging.getLogger(__name__)

# Hardcoded mapping for the most common crypto symbols.
# Covers the vast majority of real portfolios without an API call.
_KNOWN_COIN_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "SOL": "solana",
    "ADA": "cardano",
    "XRP": "ripple",
    "DOT": "polkadot",
    "DOGE": "dogecoin",
    "LINK": "chainlink",
    "MATIC": "matic-network",
    "POL": "matic-network",
    "AVAX": "avalanche-2",
    "LTC": "litecoin",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "XLM": "stellar",
    "SHIB": "shiba-inu",
}


class CoinGeckoClient:
    """Quote provider using the CoinGecko ``/coins/markets`` endpoint."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        """Initialize with optional API key.

        Args:
            api_key: CoinGecko demo API key. If provided, uses the
                     x-cg-demo-api-key header for higher rate limits.
                     If None, uses the keyless public API.
            timeout: Per-request timeout in seconds.
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = httpx.Client(
            base_url="https://api.coingecko.com/api/v3",
            headers=headers,
            timeout=timeout,
        )
        self._resolved_ids: dict[str, str] = dict(_KNOWN_COIN_IDS)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "coingecko"

    def _resolve_coin_id(self, symbol: str) -> Optional[str]:
        """Resolve a ticker symbol to a CoinGecko coin ID.

        Checks the cached mapping first, then falls back to the
        /search endpoint for unknown symbols.
        """
        upper = symbol.upper()
        if upper in self._resolved_ids:
            return self._resolved_ids[upper]

        try:
            response = request_with_retry(
                self._client, "GET", "/search", self.provider_name,
                params={"query": symbol},
            )
            coins = parse_json(response, self.provider_name).get("coins", [])
        except ProviderError:
            logger.warning("CoinGecko: failed to resolve symbol %s", symbol, exc_info=True)
            return None

        # Pick the exact symbol match with the best (lowest) market_cap_rank
        best = None
        for coin in coins:
            if coin.get("symbol", "").upper() != upper:
                continue
            rank = coin.get("market_cap_rank")
            if best is None:
                best = coin
            elif rank is not None and rank < (best.get("market_cap_rank") or float("inf")):
                best = coin

        if best is None:
            logger.warning("CoinGecko: no matching coin for symbol %s", symbol)
            return None

        coin_id = best["id"]
        self._resolved_ids[upper] = coin_id
        logger.info("CoinGecko: resolved %s -> %s", symbol, coin_id)
        return coin_id

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """Fetch current USD prices and 24h change for crypto symbols.

        Returns:
            Dict mapping each priced symbol to its quote.
        """
        if not symbols:
            return {}

        id_to_symbols: dict[str, list[str]] = {}
        for symbol in symbols:
            coin_id = self._resolve_coin_id(symbol)
            if coin_id is not None:
                id_to_symbols.setdefault(coin_id, []).append(symbol.upper())

        if not id_to_symbols:
            logger.warning("CoinGecko: no coin IDs for requested symbols %s", symbols)
            return {}

        logger.info("CoinGecko: fetching quotes for %d coins", len(id_to_symbols))
        response = request_with_retry(
            self._client,
            "GET",
            "/coins/markets",
            self.provider_name,
            params={
                "vs_currency": "usd",
                "ids": ",".join(id_to_symbols),
                "price_change_percentage": "24h",
            },
        )
        data = parse_json(response, self.provider_name)
        if not isinstance(data, list):
            raise ProviderDataError(
                "CoinGecko: expected a list of markets", provider_name=self.provider_name
            )

        now = datetime.now(timezone.utc)
        result: dict[str, PriceQuote] = {}
        for coin in data:
            price = coin.get("current_price")
            if price is None:
                continue
            change = coin.get("price_change_percentage_24h")
            try:
                for symbol in id_to_symbols.get(coin.get("id"), []):
                    result[symbol] = PriceQuote(
                        symbol=symbol,
                        price=Decimal(str(price)),
                        change_24h=Decimal(str(change)) if change is not None else None,
                        source=self.provider_name,
                        fetched_at=now,
                    )
            except (InvalidOperation, ValueError):
                logger.warning("CoinGecko: unparseable market for %s", coin.get("id"), exc_info=True)

        return result
