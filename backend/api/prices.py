"""Price resolution and manual price API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id
from api.portfolio import get_portfolio_service
from database import get_db
from integrations.market_data_protocol import PriceQuote
from schemas.price import ManualPriceResponse, ManualPriceSet, PriceListResponse
from services.manual_price_service import ManualPriceService
from services.portfolio_service import PortfolioService
from utils.query_params import parse_symbols

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prices", tags=["prices"])


@router.get("", response_model=PriceListResponse)
def get_prices(
    symbols: str = Query(..., description="Comma-separated symbols"),
    refresh: bool = Query(default=False, description="Drop cached quotes and re-query providers"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Resolve current prices for catalog symbols.

    Every requested symbol appears in the response. Symbols with no price
    have a null ``price`` and tier ``unavailable``. Another user's custom
    asset resolves as an unknown symbol.
    """
    requested = parse_symbols(symbols)
    if not requested:
        raise HTTPException(status_code=422, detail="At least one symbol is required")

    result = service.resolve_prices(db, user_id, requested, force_refresh=refresh)
    prices = []
    for symbol in requested:
        outcome = result.prices[symbol]
        tier = result.tiers[symbol].value
        if isinstance(outcome, PriceQuote):
            prices.append(
                {
                    "symbol": symbol,
                    "price": outcome.price,
                    "change_24h": outcome.change_24h,
                    "source": outcome.source,
                    "fetched_at": outcome.fetched_at,
                    "tier": tier,
                    "is_stale": outcome.is_stale,
                }
            )
        else:
            prices.append({"symbol": symbol, "tier": tier, "unavailable_reason": outcome.reason})
    return {"prices": prices, "errors": result.errors}


@router.put("/{symbol}/manual", response_model=ManualPriceResponse)
def set_manual_price(
    symbol: str,
    body: ManualPriceSet,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Enter a manual price for an asset (base currency)."""
    try:
        entry = ManualPriceService.set_price(db, user_id, symbol, body.price)
        db.commit()
        db.refresh(entry)
        return entry
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{symbol}/manual", response_model=list[ManualPriceResponse])
def get_manual_price_history(
    symbol: str,
    limit: int = Query(default=50, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Manual price entries for a symbol, newest first."""
    try:
        return ManualPriceService.get_history(db, user_id, symbol, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
