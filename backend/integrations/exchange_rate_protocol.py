"""Exchange rate provider protocol definitions."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol


@dataclass
class RateSnapshot:
    """Latest rates quoted against one base currency.

    ``rates[c]`` is how many units of ``c`` one unit of ``base_currency`` buys.
    """

    base_currency: str
    rates: dict[str, Decimal]
    source: str
    fetched_at: datetime


class ExchangeRateProvider(Protocol):
    """Protocol for exchange rate providers."""

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'exchangerate.host')."""
        ...

    def get_latest_rates(self, base_currency: str, currencies: list[str]) -> RateSnapshot:
        """Fetch the latest rates from ``base_currency`` to each of ``currencies``.

        Raises:
            ProviderError: When the provider could not deliver rates.
        """
        ...
