"""Currency conversion over a table of directed exchange rates.

Rates are keyed by ``(from_currency, to_currency)``. A table only answers
for the exact direction it was given: ``EUR->USD`` does not imply
``USD->EUR``. When a pair is missing, :func:`convert` returns the amount
unchanged, logs a warning, and records the pair on the table so callers
can surface the gap instead of silently mixing currencies.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

logger = logging.getLogger(__name__)


def rate_key(from_currency: str, to_currency: str) -> str:
    """Return the storage key for a directed pair, e.g. ``"EUR_USD"``."""
    return f"{from_currency.upper()}_{to_currency.upper()}"


class RateTable:
    """Directed exchange-rate lookup with missing-pair bookkeeping."""

    def __init__(self, rates: Mapping[tuple[str, str], Decimal] | None = None):
        self._rates: dict[tuple[str, str], Decimal] = {}
        self._missing: list[tuple[str, str]] = []
        for (from_currency, to_currency), rate in (rates or {}).items():
            self.set(from_currency, to_currency, rate)

    @classmethod
    def from_rows(cls, rows: Iterable) -> "RateTable":
        """Build a table from objects with ``from_currency``/``to_currency``/``rate``."""
        table = cls()
        for row in rows:
            table.set(row.from_currency, row.to_currency, Decimal(str(row.rate)))
        return table

    def set(self, from_currency: str, to_currency: str, rate: Decimal) -> None:
        if rate <= 0:
            raise ValueError(
                f"Exchange rate {from_currency}->{to_currency} must be positive, got {rate}"
            )
        self._rates[(from_currency.upper(), to_currency.upper())] = rate

    def get(self, from_currency: str, to_currency: str) -> Decimal | None:
        return self._rates.get((from_currency.upper(), to_currency.upper()))

    def record_missing(self, from_currency: str, to_currency: str) -> bool:
        """Remember a pair that was needed but absent.

        Returns True the first time a pair is recorded.
        """
        pair = (from_currency.upper(), to_currency.upper())
        if pair in self._missing:
            return False
        self._missing.append(pair)
        return True

    @property
    def missing_pairs(self) -> list[tuple[str, str]]:
        """Pairs requested through :func:`convert` that had no rate, in request order."""
        return list(self._missing)

    def pairs(self) -> dict[tuple[str, str], Decimal]:
        return dict(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __contains__(self, pair: tuple[str, str]) -> bool:
        return (pair[0].upper(), pair[1].upper()) in self._rates


def convert(
    amount: Decimal, from_currency: str, to_currency: str, rates: RateTable
) -> Decimal:
    """Convert ``amount`` from one currency to another.

    Same-currency conversion returns ``amount`` exactly, with no rate
    lookup. A missing directed pair returns ``amount`` unconverted.
    """
    if from_currency.upper() == to_currency.upper():
        return amount

    rate = rates.get(from_currency, to_currency)
    if rate is None:
        if rates.record_missing(from_currency, to_currency):
            logger.warning(
                "No exchange rate for %s->%s; using unconverted amount",
                from_currency.upper(),
                to_currency.upper(),
            )
        return amount

    return amount * rate
