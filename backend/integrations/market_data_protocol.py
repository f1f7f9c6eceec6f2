"""Market data provider protocol definitions.

Defines the interface for current-price providers (quote feeds). Each
provider accepts a batch of symbols and returns whatever it could price;
symbols it does not know are simply absent from the result.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from utils.ticker import is_stale_source


@dataclass(frozen=True)
class PriceQuote:
    """A current price observation for one symbol, in the base currency."""

    symbol: str
    price: Decimal
    change_24h: Decimal | None  # Percent change over the last 24h / session
    source: str  # e.g., "binance", "yahoo", "manual", "binance (cached)"
    fetched_at: datetime

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Quote price for {self.symbol} must be >= 0, got {self.price}")

    @property
    def is_stale(self) -> bool:
        """True when this quote was replayed from an expired cache entry."""
        return is_stale_source(self.source)


class QuoteProvider(Protocol):
    """Protocol for current-price providers.

    Implementations fetch latest prices from external sources and
    normalize them into :class:`PriceQuote`.
    """

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'binance')."""
        ...

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """Fetch the latest quotes for the given symbols in one batch.

        Args:
            symbols: Upper-case symbols to price.

        Returns:
            Dict mapping each priced symbol to its quote. Symbols the
            provider could not price are omitted.

        Raises:
            ProviderError: When the whole batch failed (network, auth,
                rate limit, malformed response).
        """
        ...
