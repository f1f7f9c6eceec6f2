"""Exchange rate service - refreshes and stores directed currency pairs.

Providers quote every currency against one base. Refresh expands that
into a directed row for every ordered pair of supported currencies, so
conversions never have to infer an inverse at lookup time. Rows entered
with source ``manual`` are pinned and left alone by refresh.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.orm import Session

from config import settings
from integrations.exceptions import ProviderError
from integrations.exchange_rate_protocol import ExchangeRateProvider, RateSnapshot
from integrations.exchangerate_host_client import ExchangeRateHostClient
from integrations.open_exchange_rates_client import OpenExchangeRatesClient
from models import ExchangeRate
from models.utils import utcnow
from services.currency_service import RateTable
from utils.currency import SUPPORTED_CURRENCIES, normalize_currency
from utils.ticker import MANUAL_SOURCE

logger = logging.getLogger(__name__)

RATE_QUANTUM = Decimal("0.0000000001")


@dataclass
class RateRefreshResult:
    """Outcome of a refresh attempt."""

    source: str | None = None
    pairs_written: int = 0
    pairs_pinned: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.source is not None


def default_rate_providers() -> list[ExchangeRateProvider]:
    """Primary keyless provider, plus Open Exchange Rates when a key is configured."""
    timeout = settings.PRICE_PROVIDER_TIMEOUT_SECONDS
    providers: list[ExchangeRateProvider] = [ExchangeRateHostClient(timeout=timeout)]
    oxr = OpenExchangeRatesClient(app_id=settings.OPEN_EXCHANGE_RATES_API_KEY or None, timeout=timeout)
    if oxr.is_configured():
        providers.append(oxr)
    return providers


def expand_pairs(snapshot: RateSnapshot) -> dict[tuple[str, str], Decimal]:
    """Derive every directed pair among the snapshot's currencies.

    With ``r[c]`` units of ``c`` per unit of base, ``a -> b`` is ``r[b] / r[a]``.
    """
    per_base = {snapshot.base_currency: Decimal("1")}
    per_base.update({code: rate for code, rate in snapshot.rates.items() if rate > 0})
    pairs: dict[tuple[str, str], Decimal] = {}
    for from_currency, from_rate in per_base.items():
        for to_currency, to_rate in per_base.items():
            if from_currency == to_currency:
                continue
            pairs[(from_currency, to_currency)] = (to_rate / from_rate).quantize(RATE_QUANTUM)
    return pairs


class ExchangeRateService:
    """Stores directed exchange rates and builds rate tables for valuation."""

    def __init__(self, providers: list[ExchangeRateProvider] | None = None):
        self._providers = providers

    @property
    def providers(self) -> list[ExchangeRateProvider]:
        if self._providers is None:
            self._providers = default_rate_providers()
        return self._providers

    def refresh_rates(self, db: Session) -> RateRefreshResult:
        """Fetch latest rates from the first provider that answers and store all pairs."""
        result = RateRefreshResult()
        base = settings.BASE_CURRENCY
        snapshot = None
        for provider in self.providers:
            try:
                snapshot = provider.get_latest_rates(base, list(SUPPORTED_CURRENCIES))
                break
            except ProviderError as e:
                msg = f"{provider.provider_name}: {e.describe()}"
                logger.warning("Exchange rate provider failed: %s", msg)
                result.errors.append(msg)

        if snapshot is None:
            logger.error("All exchange rate providers failed; keeping stored rates")
            return result

        existing = {(r.from_currency, r.to_currency): r for r in db.query(ExchangeRate).all()}
        for (from_currency, to_currency), rate in expand_pairs(snapshot).items():
            row = existing.get((from_currency, to_currency))
            if row is None:
                db.add(
                    ExchangeRate(
                        from_currency=from_currency,
                        to_currency=to_currency,
                        rate=rate,
                        source=snapshot.source,
                        fetched_at=snapshot.fetched_at,
                    )
                )
            elif row.source == MANUAL_SOURCE:
                result.pairs_pinned += 1
                continue
            else:
                row.rate = rate
                row.source = snapshot.source
                row.fetched_at = snapshot.fetched_at
            result.pairs_written += 1

        db.flush()
        result.source = snapshot.source
        logger.info(
            "Stored %d exchange rate pairs from %s (%d manual pairs kept)",
            result.pairs_written,
            snapshot.source,
            result.pairs_pinned,
        )
        return result

    @staticmethod
    def set_manual_rate(
        db: Session, from_currency: str, to_currency: str, rate: Decimal
    ) -> ExchangeRate:
        """Pin a directed rate. Only this direction is set; the inverse is untouched."""
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if from_currency == to_currency:
            raise ValueError("Cannot set a rate from a currency to itself")
        if rate <= 0:
            raise ValueError("Exchange rate must be greater than zero")

        row = (
            db.query(ExchangeRate)
            .filter(
                ExchangeRate.from_currency == from_currency,
                ExchangeRate.to_currency == to_currency,
            )
            .first()
        )
        if row is None:
            row = ExchangeRate(from_currency=from_currency, to_currency=to_currency)
            db.add(row)
        row.rate = rate
        row.source = MANUAL_SOURCE
        row.fetched_at = utcnow()
        db.flush()
        logger.info("Manual exchange rate %s->%s set to %s", from_currency, to_currency, rate)
        return row

    @staticmethod
    def delete_rate(db: Session, from_currency: str, to_currency: str) -> bool:
        row = (
            db.query(ExchangeRate)
            .filter(
                ExchangeRate.from_currency == from_currency.upper(),
                ExchangeRate.to_currency == to_currency.upper(),
            )
            .first()
        )
        if row is None:
            return False
        db.delete(row)
        db.flush()
        logger.info("Deleted exchange rate %s->%s", row.from_currency, row.to_currency)
        return True

    @staticmethod
    def list_rates(db: Session) -> list[ExchangeRate]:
        return (
            db.query(ExchangeRate)
            .order_by(ExchangeRate.from_currency, ExchangeRate.to_currency)
            .all()
        )

    @staticmethod
    def get_rate_table(db: Session) -> RateTable:
        """Load all stored pairs into a fresh :class:`RateTable`."""
        return RateTable.from_rows(ExchangeRateService.list_rates(db))

