"""External API integrations.

This package contains:
- Quote protocol: Common interface for market price providers
- Binance / CoinGecko clients: Crypto prices
- Yahoo Finance / Alpha Vantage clients: Stock and ETF prices
- Exchange rate protocol plus exchangerate.host and Open Exchange Rates clients
"""

from integrations.exchange_rate_protocol import ExchangeRateProvider, RateSnapshot
from integrations.market_data_protocol import PriceQuote, QuoteProvider

__all__ = [
    "ExchangeRateProvider",
    "PriceQuote",
    "QuoteProvider",
    "RateSnapshot",
]
