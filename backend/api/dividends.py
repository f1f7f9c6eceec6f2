"""Dividend API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id
from database import get_db
from schemas.dividend import DividendCreate, DividendResponse, DividendSummaryResponse
from services.dividend_service import DividendService
from services.exchange_rate_service import ExchangeRateService
from services.preference_service import PreferenceService
from utils.currency import normalize_currency

router = APIRouter(prefix="/api/dividends", tags=["dividends"])


@router.get("", response_model=list[DividendResponse])
def list_dividends(
    symbol: str | None = Query(default=None),
    lot_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's dividends, most recent payment first."""
    return DividendService.list_dividends(db, user_id, symbol=symbol, lot_id=lot_id)


@router.post("", response_model=DividendResponse, status_code=201)
def record_dividend(
    data: DividendCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record a dividend payment against one of the user's lots."""
    try:
        dividend = DividendService.record_dividend(db, user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    db.refresh(dividend)
    return dividend


@router.get("/summary", response_model=DividendSummaryResponse)
def get_dividend_summary(
    currency: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Dividend income for this year, this month, and last year."""
    try:
        display = (
            normalize_currency(currency)
            if currency
            else PreferenceService.get_display_currency(db, user_id)
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    summary = DividendService.get_summary(
        db, user_id, display, ExchangeRateService.get_rate_table(db), date.today()
    )
    return {
        "currency": summary.currency,
        "ytd_total": summary.ytd_total,
        "this_month_total": summary.this_month_total,
        "last_year_total": summary.last_year_total,
        "by_symbol": summary.by_symbol,
    }


@router.delete("/{dividend_id}", status_code=204)
def delete_dividend(
    dividend_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a dividend record."""
    if not DividendService.delete_dividend(db, user_id, dividend_id):
        raise HTTPException(status_code=404, detail="Dividend not found")
    db.commit()
