"""Binance market data provider for cryptocurrency quotes."""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import httpx

from integrations.exceptions import ProviderDataError
from integrations.http_utils import parse_json, request_with_retry
from integrations.market_data_protocol import PriceQuote

logger = logging.getLogger(__name__)

# Quote asset every symbol is paired against; USDT tracks the USD base currency
_QUOTE_ASSET = "USDT"


def to_pair(symbol: str) -> str:
    """Map a crypto symbol to its Binance USDT trading pair (BTC -> BTCUSDT)."""
    return f"{symbol.upper()}{_QUOTE_ASSET}"


class BinanceClient:
    """Quote provider using the Binance public 24h ticker endpoint.

    One request prices the whole batch. Binance rejects the entire
    request if any pair is unknown, which surfaces as a ProviderAPIError
    and sends every symbol in the batch to the next provider.
    """

    def __init__(self, timeout: float = 10.0):
        self._client = httpx.Client(
            base_url="https://api.binance.com/api/v3",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "binance"

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """Fetch 24h ticker stats for the given crypto symbols.

        Returns:
            Dict mapping each priced symbol to its quote.
        """
        if not symbols:
            return {}

        pair_to_symbol = {to_pair(s): s.upper() for s in symbols}
        logger.info("Binance: fetching quotes for %d symbols", len(symbols))

        response = request_with_retry(
            self._client,
            "GET",
            "/ticker/24hr",
            self.provider_name,
            params={"symbols": json.dumps(list(pair_to_symbol), separators=(",", ":"))},
        )
        data = parse_json(response, self.provider_name)
        if not isinstance(data, list):
            raise ProviderDataError(
                "Binance: expected a list of tickers", provider_name=self.provider_name
            )

        now = datetime.now(timezone.utc)
        result: dict[str, PriceQuote] = {}
        for ticker in data:
            symbol = pair_to_symbol.get(ticker.get("symbol", ""))
            if symbol is None:
                continue
            try:
                price = Decimal(str(ticker["lastPrice"]))
                change = ticker.get("priceChangePercent")
                result[symbol] = PriceQuote(
                    symbol=symbol,
                    price=price,
                    change_24h=Decimal(str(change)) if change is not None else None,
                    source=self.provider_name,
                    fetched_at=now,
                )
            except (KeyError, InvalidOperation, ValueError):
                logger.warning("Binance: unparseable ticker for %s", symbol, exc_info=True)

        return result
