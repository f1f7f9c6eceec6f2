"""Yahoo Finance market data provider implementation."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

import yfinance as yf

from integrations.exceptions import ProviderConnectionError
from integrations.market_data_protocol import PriceQuote

logger = logging.getLogger(__name__)


def _to_decimal(value) -> Decimal:
    return Decimal(str(round(float(value), 6)))


class YahooFinanceClient:
    """Quote provider using Yahoo Finance (yfinance library).

    Handles stocks and ETFs. The latest daily close stands in for the
    current price; the 24h change is measured against the prior close.
    """

    @property
    def provider_name(self) -> str:
        return "yahoo"

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """Fetch latest prices for stock/ETF symbols in one download.

        Uses a 5-day window so weekends and holidays still yield a
        previous close to compare against.

        Returns:
            Dict mapping each priced symbol to its quote.
        """
        if not symbols:
            return {}

        logger.info("Yahoo Finance: fetching quotes for %d symbols", len(symbols))

        try:
            df = yf.download(
                tickers=symbols,
                period="5d",
                interval="1d",
                auto_adjust=True,
                progress=False,
                threads=False,
            )
        except Exception as exc:
            raise ProviderConnectionError(
                f"yfinance download failed: {exc}", provider_name=self.provider_name
            ) from exc

        result: dict[str, PriceQuote] = {}
        if df is None or df.empty:
            return result

        multi_index = df.columns.nlevels > 1
        now = datetime.now(timezone.utc)

        for symbol in symbols:
            try:
                if multi_index:
                    if ("Close", symbol) not in df.columns:
                        continue
                    closes = df[("Close", symbol)].dropna()
                else:
                    # Flat columns only happen for a single-symbol download
                    if len(symbols) > 1 or "Close" not in df.columns:
                        continue
                    closes = df["Close"].dropna()

                if closes.empty:
                    continue

                last = _to_decimal(closes.iloc[-1])
                change = None
                if len(closes) > 1:
                    previous = _to_decimal(closes.iloc[-2])
                    if previous != 0:
                        change = ((last - previous) / previous * Decimal("100")).quantize(
                            Decimal("0.0001")
                        )

                result[symbol.upper()] = PriceQuote(
                    symbol=symbol.upper(),
                    price=last,
                    change_24h=change,
                    source=self.provider_name,
                    fetched_at=now,
                )
            except Exception:
                logger.warning("Failed to parse quote for %s", symbol, exc_info=True)

        return result
