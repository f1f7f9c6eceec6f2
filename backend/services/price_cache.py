"""Process-local cache of the last quote seen for each symbol.

Entries are immutable :class:`PriceQuote` objects, so a write replaces
the whole entry under the lock and readers never observe a price from
one fetch paired with a timestamp from another.
"""

import threading
from collections.abc import Iterable
from datetime import datetime, timedelta

from integrations.market_data_protocol import PriceQuote


class PriceCache:
    """Thread-safe symbol -> :class:`PriceQuote` map with age checks."""

    def __init__(self):
        self._entries: dict[str, PriceQuote] = {}
        self._lock = threading.Lock()

    def get(self, symbol: str) -> PriceQuote | None:
        """Return the cached quote regardless of age."""
        with self._lock:
            return self._entries.get(symbol)

    def get_fresh(self, symbol: str, ttl: timedelta, now: datetime) -> PriceQuote | None:
        """Return the cached quote only if it is younger than ``ttl``."""
        quote = self.get(symbol)
        if quote is None or now - quote.fetched_at >= ttl:
            return None
        return quote

    def put(self, quote: PriceQuote) -> None:
        """Store a freshly fetched quote, replacing any previous entry.

        Stale replays are never written back.
        """
        if quote.is_stale:
            raise ValueError(f"Refusing to cache stale quote for {quote.symbol}")
        with self._lock:
            self._entries[quote.symbol] = quote

    def invalidate(self, symbols: Iterable[str]) -> int:
        """Drop entries for ``symbols``. Returns how many were removed."""
        removed = 0
        with self._lock:
            for symbol in symbols:
                if self._entries.pop(symbol, None) is not None:
                    removed += 1
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
