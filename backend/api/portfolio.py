"""Portfolio valuation API endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id, valuation_response_dict
from database import get_db
from schemas.dividend import DividendYieldResponse
from schemas.portfolio import PortfolioValuationResponse
from services.dividend_service import DividendService
from services.exchange_rate_service import ExchangeRateService
from services.holding_service import HoldingFilter
from services.portfolio_service import PortfolioService
from utils.asset_types import AssetType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])

# Dependency injection for testing
_portfolio_service_override: Optional[PortfolioService] = None


def get_portfolio_service() -> PortfolioService:
    """Get PortfolioService instance, allowing for test overrides."""
    if _portfolio_service_override is not None:
        return _portfolio_service_override
    return PortfolioService()


def set_portfolio_service_override(service: Optional[PortfolioService]) -> None:
    """Set a PortfolioService override for testing."""
    global _portfolio_service_override
    _portfolio_service_override = service


@router.get("/valuation", response_model=PortfolioValuationResponse)
def get_valuation(
    currency: str | None = Query(default=None, description="Display currency override"),
    symbol: str | None = Query(default=None),
    asset_type: AssetType | None = Query(default=None),
    platform: str | None = Query(default=None),
    search: str | None = Query(default=None),
    refresh: bool = Query(default=False, description="Bypass fresh cached prices"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Value the user's holdings in the display currency.

    Holdings without a price have null value fields and are listed in
    ``unpriced_symbols``. Currency pairs that had no rate are listed in
    ``missing_rates``; amounts needing them were used unconverted.
    """
    filters = HoldingFilter(symbol=symbol, asset_type=asset_type, platform=platform, search=search)
    try:
        valuation = service.get_valuation(
            db, user_id, display_currency=currency, filters=filters, force_refresh=refresh
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return valuation_response_dict(valuation)


@router.get("/dividend-yields", response_model=list[DividendYieldResponse])
def get_dividend_yields(
    currency: str | None = Query(default=None, description="Display currency override"),
    as_of: date | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Trailing dividend yield per held symbol.

    ``yield_percent`` is null for symbols with no dividend history or no price.
    """
    try:
        valuation = service.get_valuation(db, user_id, display_currency=currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    yields = DividendService.get_yields(
        db,
        user_id,
        valuation,
        ExchangeRateService.get_rate_table(db),
        as_of or date.today(),
    )
    return [
        {
            "symbol": y.symbol,
            "currency": y.currency,
            "trailing_income": y.trailing_income,
            "current_value": y.current_value,
            "yield_percent": y.yield_percent,
        }
        for y in yields
    ]
