"""Mock implementations for external services."""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from integrations.exceptions import ProviderConnectionError
from integrations.exchange_rate_protocol import RateSnapshot
from integrations.market_data_protocol import PriceQuote


class FakeClock:
    """Settable UTC clock for TTL tests."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MockQuoteProvider:
    """Quote provider returning canned prices.

    Args:
        name: Provider name used as the quote source.
        prices: Symbol -> price (as str or Decimal). Symbols not listed
            are omitted from results.
        should_fail: Raise ProviderConnectionError on every call.
        block: Optional event the call waits on, to simulate a hung provider.
        clock: Optional callable supplying ``fetched_at``.
    """

    def __init__(
        self,
        name: str,
        prices: dict[str, str | Decimal] | None = None,
        should_fail: bool = False,
        block: threading.Event | None = None,
        clock=None,
    ):
        self._name = name
        self.prices = {k: Decimal(str(v)) for k, v in (prices or {}).items()}
        self.should_fail = should_fail
        self._block = block
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.calls: list[list[str]] = []

    @property
    def provider_name(self) -> str:
        return self._name

    def get_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        self.calls.append(list(symbols))
        if self._block is not None:
            self._block.wait(timeout=5)
        if self.should_fail:
            raise ProviderConnectionError(f"{self._name} unavailable", provider_name=self._name)
        now = self._clock()
        return {
            symbol: PriceQuote(
                symbol=symbol,
                price=self.prices[symbol],
                change_24h=Decimal("1.5"),
                source=self._name,
                fetched_at=now,
            )
            for symbol in symbols
            if symbol in self.prices
        }


class MockRateProvider:
    """Exchange rate provider returning canned rates against the base."""

    def __init__(
        self,
        name: str = "mock-rates",
        rates: dict[str, str] | None = None,
        should_fail: bool = False,
    ):
        self._name = name
        self.rates = {k: Decimal(v) for k, v in (rates or {}).items()}
        self.should_fail = should_fail
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return self._name

    def get_latest_rates(self, base_currency: str, currencies: list[str]) -> RateSnapshot:
        self.calls += 1
        if self.should_fail:
            raise ProviderConnectionError(f"{self._name} unavailable", provider_name=self._name)
        return RateSnapshot(
            base_currency=base_currency,
            rates={c: r for c, r in self.rates.items() if c in currencies},
            source=self._name,
            fetched_at=datetime.now(timezone.utc),
        )
