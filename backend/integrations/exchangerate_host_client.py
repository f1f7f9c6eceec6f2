"""exchangerate.host provider for currency exchange rates."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

import httpx

from integrations.exceptions import ProviderDataError
from integrations.exchange_rate_protocol import RateSnapshot
from integrations.http_utils import parse_json, request_with_retry

logger = logging.getLogger(__name__)


class ExchangeRateHostClient:
    """Keyless exchange rate provider (primary)."""

    def __init__(self, timeout: float = 10.0):
        self._client = httpx.Client(
            base_url="https://api.exchangerate.host",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "exchangerate.host"

    def get_latest_rates(self, base_currency: str, currencies: list[str]) -> RateSnapshot:
        response = request_with_retry(
            self._client,
            "GET",
            "/latest",
            self.provider_name,
            params={"base": base_currency, "symbols": ",".join(currencies)},
        )
        data = parse_json(response, self.provider_name)
        if not data.get("success", True) or not data.get("rates"):
            raise ProviderDataError(
                "exchangerate.host returned no rates", provider_name=self.provider_name
            )

        rates = {
            code: Decimal(str(value))
            for code, value in data["rates"].items()
            if code in currencies and value
        }
        logger.info(
            "exchangerate.host: fetched %d rates for base %s", len(rates), base_currency
        )
        return RateSnapshot(
            base_currency=data.get("base", base_currency),
            rates=rates,
            source=self.provider_name,
            fetched_at=datetime.now(timezone.utc),
        )
