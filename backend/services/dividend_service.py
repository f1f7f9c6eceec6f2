"""Dividend service - dividend records, income summaries, and trailing yield.

Yield for a symbol is trailing-window dividend income divided by the
holding's current value. It is ``None`` (not zero) when the symbol has no
dividend history at all or its current value is unknown or zero.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from config import settings
from models import Dividend, Lot
from schemas.dividend import DividendCreate
from services.currency_service import RateTable, convert
from services.valuation_service import PortfolioValuation

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class DividendRecord:
    symbol: str
    amount: Decimal
    currency: str
    payment_date: date


@dataclass
class DividendYield:
    symbol: str
    currency: str
    trailing_income: Decimal | None
    current_value: Decimal | None
    yield_percent: Decimal | None


@dataclass
class DividendSummary:
    currency: str
    ytd_total: Decimal
    this_month_total: Decimal
    last_year_total: Decimal
    by_symbol: dict[str, Decimal]


def trailing_income(
    records: Iterable[DividendRecord],
    symbol: str,
    as_of: date,
    rates: RateTable,
    currency: str,
    days: int = 365,
) -> Decimal | None:
    """Sum of ``symbol``'s dividends paid in ``(as_of - days, as_of]``, in ``currency``.

    Returns None if the symbol has no dividend records at all, and zero if
    it has records but none inside the window.
    """
    window_start = as_of - timedelta(days=days)
    total = ZERO
    seen = False
    for record in records:
        if record.symbol != symbol:
            continue
        seen = True
        if window_start < record.payment_date <= as_of:
            total += convert(record.amount, record.currency, currency, rates)
    return total if seen else None


def dividend_yield(trailing: Decimal | None, current_value: Decimal | None) -> Decimal | None:
    """Trailing income as a percent of current value, or None when undefined."""
    if trailing is None or current_value is None or current_value == 0:
        return None
    return trailing / current_value * Decimal("100")


def _to_record(dividend: Dividend) -> DividendRecord:
    return DividendRecord(
        symbol=dividend.symbol,
        amount=Decimal(str(dividend.amount)),
        currency=dividend.currency,
        payment_date=dividend.payment_date,
    )


class DividendService:
    """Manages dividend records for a user."""

    @staticmethod
    def record_dividend(db: Session, user_id: str, data: DividendCreate) -> Dividend:
        """Record a dividend against one of the user's lots.

        Raises:
            ValueError: If the lot does not exist or belongs to someone else.
        """
        lot = (
            db.query(Lot)
            .options(joinedload(Lot.asset))
            .filter(Lot.id == data.lot_id, Lot.user_id == user_id)
            .first()
        )
        if lot is None:
            raise ValueError(f"Lot not found: {data.lot_id}")

        dividend = Dividend(
            user_id=user_id,
            lot_id=lot.id,
            symbol=lot.asset.symbol,
            amount=data.amount,
            currency=data.currency or lot.purchase_currency,
            payment_date=data.payment_date,
            dividend_type=data.dividend_type.value,
            notes=data.notes,
        )
        db.add(dividend)
        db.flush()
        logger.info(
            "Recorded %s dividend of %s %s on %s for user %s",
            dividend.dividend_type,
            dividend.amount,
            dividend.currency,
            dividend.symbol,
            user_id,
        )
        return dividend

    @staticmethod
    def list_dividends(
        db: Session,
        user_id: str,
        symbol: str | None = None,
        lot_id: str | None = None,
    ) -> list[Dividend]:
        """List a user's dividends, most recent payment first."""
        q = db.query(Dividend).filter(Dividend.user_id == user_id)
        if symbol:
            q = q.filter(Dividend.symbol == symbol.strip().upper())
        if lot_id:
            q = q.filter(Dividend.lot_id == lot_id)
        return q.order_by(Dividend.payment_date.desc(), Dividend.created_at.desc()).all()

    @staticmethod
    def delete_dividend(db: Session, user_id: str, dividend_id: str) -> bool:
        dividend = (
            db.query(Dividend)
            .filter(Dividend.id == dividend_id, Dividend.user_id == user_id)
            .first()
        )
        if dividend is None:
            return False
        db.delete(dividend)
        db.flush()
        logger.info("Deleted dividend %s", dividend_id)
        return True

    @staticmethod
    def get_records(db: Session, user_id: str) -> list[DividendRecord]:
        return [_to_record(d) for d in DividendService.list_dividends(db, user_id)]

    @staticmethod
    def get_summary(
        db: Session, user_id: str, currency: str, rates: RateTable, today: date
    ) -> DividendSummary:
        """Year-to-date, this-month, and last-year income plus all-time totals per symbol."""
        summary = DividendSummary(
            currency=currency,
            ytd_total=ZERO,
            this_month_total=ZERO,
            last_year_total=ZERO,
            by_symbol={},
        )
        for record in DividendService.get_records(db, user_id):
            amount = convert(record.amount, record.currency, currency, rates)
            paid = record.payment_date
            if paid.year == today.year and paid <= today:
                summary.ytd_total += amount
                if paid.month == today.month:
                    summary.this_month_total += amount
            elif paid.year == today.year - 1:
                summary.last_year_total += amount
            summary.by_symbol[record.symbol] = summary.by_symbol.get(record.symbol, ZERO) + amount
        return summary

    @staticmethod
    def get_yields(
        db: Session,
        user_id: str,
        valuation: PortfolioValuation,
        rates: RateTable,
        as_of: date,
    ) -> list[DividendYield]:
        """Trailing yield for every holding in ``valuation``, in its display currency."""
        records = DividendService.get_records(db, user_id)
        currency = valuation.display_currency
        yields = []
        for hv in valuation.holdings:
            trailing = trailing_income(
                records,
                hv.symbol,
                as_of,
                rates,
                currency,
                days=settings.DIVIDEND_TRAILING_DAYS,
            )
            yields.append(
                DividendYield(
                    symbol=hv.symbol,
                    currency=currency,
                    trailing_income=trailing,
                    current_value=hv.current_value,
                    yield_percent=dividend_yield(trailing, hv.current_value),
                )
            )
        return yields
