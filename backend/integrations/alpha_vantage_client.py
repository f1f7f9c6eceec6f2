"""Alpha Vantage market data provider for stock/ETF quotes."""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from integrations.exceptions import ProviderAPIError, ProviderError
from integrations.http_utils import parse_json, request_with_retry
from integrations.market_data_protocol import PriceQuote

logger = logging.getLogger(__name__)


class AlphaVantageClient:
    """Quote provider using the Alpha Vantage ``GLOBAL_QUOTE`` function.

    The free tier allows 25 requests/day and has no batch endpoint, so
    symbols are requested one at a time and the loop stops as soon as the
    API reports a usage limit.
    """

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        self._api_key = api_key or "demo"
        self._client = httpx.Client(
            base_url="https://www.alphavantage.co",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "alphavantage"

    def _fetch_one(self, symbol: str) -> Optional[dict]:
        """Return the raw ``Global Quote`` dict for a symbol, or None.

        Raises:
            ProviderError: On transport/HTTP failure.
        """
        response = request_with_retry(
            self._client,
            "GET",
            "/query",
            self.provider_name,
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key},
        )
        data = parse_json(response, self.provider_name)
        if "Note" in data or "Information" in data:
            raise ProviderAPIError(
                f"Alpha Vantage usage limit reached: {data.get('Note') or data.get('Information')}",
                provider_name=self.provider_name,
                status_code=429,
            )
        quote = data.get("Global Quote") or {}
        if not quote.get("05. price"):
            logger.warning("Alpha Vantage: no data returned for %s", symbol)
            return None
        return quote

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """Fetch quotes one symbol at a time.

        Returns:
            Dict mapping each priced symbol to its quote.

        Raises:
            ProviderError: Only when no symbol could be priced and at
                least one request failed.
        """
        if not symbols:
            return {}

        result: dict[str, PriceQuote] = {}
        last_error: Optional[ProviderError] = None

        for symbol in symbols:
            upper = symbol.upper()
            try:
                quote = self._fetch_one(upper)
            except ProviderError as exc:
                last_error = exc
                logger.warning("Alpha Vantage: request failed for %s: %s", upper, exc)
                if isinstance(exc, ProviderAPIError) and exc.status_code == 429:
                    break
                continue
            if quote is None:
                continue
            try:
                change_raw = quote.get("10. change percent", "").replace("%", "").strip()
                try:
                    change = Decimal(change_raw) if change_raw else None
                except InvalidOperation:
                    change = None
                result[upper] = PriceQuote(
                    symbol=upper,
                    price=Decimal(quote["05. price"]),
                    change_24h=change,
                    source=self.provider_name,
                    fetched_at=datetime.now(timezone.utc),
                )
            except (InvalidOperation, ValueError):
                logger.warning("Alpha Vantage: unparseable quote for %s", upper, exc_info=True)

        if not result and last_error is not None:
            raise last_error

        if result:
            logger.info("Alpha Vantage: fetched %d quotes", len(result))
        return result
