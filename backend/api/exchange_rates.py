"""Exchange rate API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas.exchange_rate import ExchangeRateResponse, ExchangeRateSet, RateRefreshResponse
from services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/exchange-rates", tags=["exchange-rates"])

# Dependency injection for testing
_exchange_rate_service_override: Optional[ExchangeRateService] = None


def get_exchange_rate_service() -> ExchangeRateService:
    """Get ExchangeRateService instance, allowing for test overrides."""
    if _exchange_rate_service_override is not None:
        return _exchange_rate_service_override
    return ExchangeRateService()


def set_exchange_rate_service_override(service: Optional[ExchangeRateService]) -> None:
    """Set an ExchangeRateService override for testing."""
    global _exchange_rate_service_override
    _exchange_rate_service_override = service


@router.get("", response_model=list[ExchangeRateResponse])
def list_rates(db: Session = Depends(get_db)):
    """All stored directed rates."""
    return ExchangeRateService.list_rates(db)


@router.post("/refresh", response_model=RateRefreshResponse)
def refresh_rates(
    db: Session = Depends(get_db),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """Fetch the latest rates and store every directed pair.

    Always returns 200; ``success`` is false when every provider failed
    and stored rates were left as they were.
    """
    result = service.refresh_rates(db)
    db.commit()
    return {
        "success": result.success,
        "source": result.source,
        "pairs_written": result.pairs_written,
        "pairs_pinned": result.pairs_pinned,
        "errors": result.errors,
    }


@router.put("", response_model=ExchangeRateResponse)
def set_manual_rate(body: ExchangeRateSet, db: Session = Depends(get_db)):
    """Pin a manual rate for one direction. Refresh leaves it alone."""
    try:
        rate = ExchangeRateService.set_manual_rate(
            db, body.from_currency, body.to_currency, body.rate
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(rate)
    return rate


@router.delete("/{from_currency}/{to_currency}", status_code=204)
def delete_rate(from_currency: str, to_currency: str, db: Session = Depends(get_db)):
    """Remove a stored rate (unpins a manual rate)."""
    if not ExchangeRateService.delete_rate(db, from_currency, to_currency):
        raise HTTPException(status_code=404, detail="Exchange rate not found")
    db.commit()
