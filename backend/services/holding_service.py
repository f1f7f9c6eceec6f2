"""Holding aggregation - collapses a user's lots into per-symbol positions.

Pure functions over :class:`LotRecord` values. Nothing here touches the
database; :class:`services.lot_service.LotService` loads the records.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from utils.asset_types import AssetType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotRecord:
    """Read-only view of one purchase lot together with its asset metadata."""

    lot_id: str
    symbol: str
    name: str
    asset_type: AssetType
    precision: int
    quantity: Decimal
    purchase_price: Decimal
    purchase_currency: str
    purchase_date: date
    platform: str

    @property
    def cost(self) -> Decimal:
        """Cost of the lot in its own purchase currency."""
        return self.quantity * self.purchase_price


@dataclass
class HoldingFilter:
    """Optional constraints applied to lots before aggregation.

    Unset fields match everything. ``search`` is a case-insensitive
    substring match on symbol or asset name.
    """

    symbol: str | None = None
    asset_type: AssetType | None = None
    platform: str | None = None
    search: str | None = None

    def matches(self, lot: LotRecord) -> bool:
        if self.symbol and lot.symbol != self.symbol.strip().upper():
            return False
        if self.asset_type and lot.asset_type != self.asset_type:
            return False
        if self.platform and lot.platform.lower() != self.platform.strip().lower():
            return False
        if self.search:
            needle = self.search.strip().lower()
            if needle not in lot.symbol.lower() and needle not in lot.name.lower():
                return False
        return True


@dataclass
class Holding:
    """Aggregate position in one symbol across all of a user's lots.

    Cost figures are kept per purchase currency. ``average_cost`` and
    ``total_cost`` sum across currencies and are only meaningful in
    ``primary_currency`` when :attr:`is_mixed_currency` is False.
    """

    symbol: str
    name: str
    asset_type: AssetType
    precision: int
    lots: list[LotRecord] = field(default_factory=list)
    total_quantity: Decimal = Decimal("0")
    cost_by_currency: dict[str, Decimal] = field(default_factory=dict)
    quantity_by_currency: dict[str, Decimal] = field(default_factory=dict)
    primary_currency: str = ""

    @property
    def is_mixed_currency(self) -> bool:
        return len(self.cost_by_currency) > 1

    @property
    def total_cost(self) -> Decimal:
        return sum(self.cost_by_currency.values(), Decimal("0"))

    @property
    def average_cost(self) -> Decimal:
        return self.total_cost / self.total_quantity

    @property
    def average_cost_by_currency(self) -> dict[str, Decimal]:
        """Weighted-average purchase price evaluated within each currency."""
        return {
            currency: cost / self.quantity_by_currency[currency]
            for currency, cost in self.cost_by_currency.items()
        }

    @property
    def platforms(self) -> list[str]:
        seen: list[str] = []
        for lot in self.lots:
            if lot.platform not in seen:
                seen.append(lot.platform)
        return seen


def _primary_currency(lots: list[LotRecord]) -> str:
    """Most common purchase currency by lot count; ties go to the first seen."""
    counts: dict[str, int] = {}
    for lot in lots:
        counts[lot.purchase_currency] = counts.get(lot.purchase_currency, 0) + 1
    best = lots[0].purchase_currency
    for currency, count in counts.items():
        if count > counts[best]:
            best = currency
    return best


def aggregate_holdings(
    lots: list[LotRecord], filters: HoldingFilter | None = None
) -> list[Holding]:
    """Group lots by symbol into holdings, ordered by symbol.

    Args:
        lots: Lots belonging to a single user.
        filters: Optional lot-level filter applied before grouping.

    Returns:
        One :class:`Holding` per symbol that has at least one matching lot.
    """
    grouped: dict[str, list[LotRecord]] = {}
    for lot in lots:
        if filters is not None and not filters.matches(lot):
            continue
        grouped.setdefault(lot.symbol, []).append(lot)

    holdings: list[Holding] = []
    for symbol in sorted(grouped):
        symbol_lots = grouped[symbol]
        first = symbol_lots[0]
        holding = Holding(
            symbol=symbol,
            name=first.name,
            asset_type=first.asset_type,
            precision=first.precision,
            lots=symbol_lots,
        )
        for lot in symbol_lots:
            holding.total_quantity += lot.quantity
            currency = lot.purchase_currency
            holding.cost_by_currency[currency] = (
                holding.cost_by_currency.get(currency, Decimal("0")) + lot.cost
            )
            holding.quantity_by_currency[currency] = (
                holding.quantity_by_currency.get(currency, Decimal("0")) + lot.quantity
            )

        if holding.total_quantity <= 0:
            # Lots are validated positive on write, so this means corrupt rows
            logger.error(
                "Holding %s aggregated to non-positive quantity %s from %d lots",
                symbol,
                holding.total_quantity,
                len(symbol_lots),
            )
            raise ValueError(f"Holding {symbol} has non-positive total quantity")

        holding.primary_currency = _primary_currency(symbol_lots)
        holdings.append(holding)

    return holdings
