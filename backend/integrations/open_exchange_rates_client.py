"""Open Exchange Rates provider for currency exchange rates (fallback)."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import httpx

from integrations.exceptions import ProviderAuthError, ProviderDataError
from integrations.exchange_rate_protocol import RateSnapshot
from integrations.http_utils import parse_json, request_with_retry

logger = logging.getLogger(__name__)


class OpenExchangeRatesClient:
    """Exchange rate provider backed by openexchangerates.org.

    The free tier only quotes against USD, so other bases are derived
    by dividing through the base currency's USD rate.
    """

    def __init__(self, app_id: Optional[str] = None, timeout: float = 10.0):
        self._app_id = app_id
        self._client = httpx.Client(
            base_url="https://openexchangerates.org/api",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "openexchangerates"

    def is_configured(self) -> bool:
        return bool(self._app_id)

    def get_latest_rates(self, base_currency: str, currencies: list[str]) -> RateSnapshot:
        if not self._app_id:
            raise ProviderAuthError(
                "Open Exchange Rates: no API key configured (OPEN_EXCHANGE_RATES_API_KEY)",
                provider_name=self.provider_name,
            )

        response = request_with_retry(
            self._client,
            "GET",
            "/latest.json",
            self.provider_name,
            params={"app_id": self._app_id},
        )
        usd_rates = {
            code: Decimal(str(value))
            for code, value in parse_json(response, self.provider_name).get("rates", {}).items()
            if value
        }

        if base_currency == "USD":
            rates = usd_rates
        else:
            base_rate = usd_rates.get(base_currency)
            if base_rate is None:
                raise ProviderDataError(
                    f"Open Exchange Rates: base currency {base_currency} not in response",
                    provider_name=self.provider_name,
                )
            rates = {code: rate / base_rate for code, rate in usd_rates.items()}

        filtered = {code: rates[code] for code in currencies if code in rates}
        logger.info(
            "Open Exchange Rates: fetched %d rates for base %s", len(filtered), base_currency
        )
        return RateSnapshot(
            base_currency=base_currency,
            rates=filtered,
            source=self.provider_name,
            fetched_at=datetime.now(timezone.utc),
        )
