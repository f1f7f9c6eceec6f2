"""Shared API helpers for route handlers.

Acting-user resolution and response builders used across
multiple route files.
"""

from fastapi import Header, HTTPException

from models import Lot
from services.currency_service import rate_key
from services.valuation_service import HoldingValuation, PortfolioValuation

_USER_ID_MAX_LENGTH = 36


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Resolve the acting user from the ``X-User-Id`` header.

    Authentication happens upstream; this only checks the header is present.

    Raises:
        HTTPException: 401 if the header is missing or blank, 422 if too long.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    user_id = x_user_id.strip()
    if len(user_id) > _USER_ID_MAX_LENGTH:
        raise HTTPException(
            status_code=422,
            detail=f"X-User-Id must be at most {_USER_ID_MAX_LENGTH} characters",
        )
    return user_id


def lot_response_dict(lot: Lot) -> dict:
    """Build a LotResponse-compatible dict from a Lot.

    Args:
        lot: A Lot instance with its asset relationship loaded.
    """
    return {
        "id": lot.id,
        "symbol": lot.asset.symbol,
        "asset_name": lot.asset.name,
        "asset_type": lot.asset.asset_type,
        "precision": lot.asset.precision,
        "quantity": lot.quantity,
        "purchase_price": lot.purchase_price,
        "purchase_currency": lot.purchase_currency,
        "purchase_date": lot.purchase_date,
        "platform": lot.platform,
        "notes": lot.notes,
        "created_at": lot.created_at,
        "updated_at": lot.updated_at,
        "total_cost": lot.quantity * lot.purchase_price,
    }


def holding_valuation_dict(hv: HoldingValuation) -> dict:
    """Build a HoldingValuationResponse-compatible dict."""
    holding = hv.holding
    original = None
    if hv.original is not None:
        original = {
            "currency": hv.original.currency,
            "average_cost": hv.original.average_cost,
            "cost_basis": hv.original.cost_basis,
            "current_price": hv.original.current_price,
            "current_value": hv.original.current_value,
            "gain_loss": hv.original.gain_loss,
            "gain_loss_percent": hv.original.gain_loss_percent,
        }
    return {
        "symbol": hv.symbol,
        "name": holding.name,
        "asset_type": hv.asset_type.value,
        "precision": holding.precision,
        "quantity": holding.total_quantity,
        "lot_count": len(holding.lots),
        "platforms": holding.platforms,
        "average_cost": hv.average_cost,
        "primary_currency": holding.primary_currency,
        "is_mixed_currency": holding.is_mixed_currency,
        "average_cost_by_currency": holding.average_cost_by_currency,
        "cost_basis": hv.cost_basis,
        "current_price": hv.current_price,
        "price_source": hv.price_source,
        "price_fetched_at": hv.price_fetched_at,
        "price_is_stale": hv.quote.is_stale if hv.quote else False,
        "change_24h": hv.change_24h,
        "current_value": hv.current_value,
        "gain_loss": hv.gain_loss,
        "gain_loss_percent": hv.gain_loss_percent,
        "original_currency": original,
    }


def valuation_response_dict(valuation: PortfolioValuation) -> dict:
    """Build a PortfolioValuationResponse-compatible dict."""
    return {
        "display_currency": valuation.display_currency,
        "base_currency": valuation.base_currency,
        "total_value": valuation.total_value,
        "total_cost_basis": valuation.total_cost_basis,
        "priced_cost_basis": valuation.priced_cost_basis,
        "total_gain_loss": valuation.total_gain_loss,
        "total_gain_loss_percent": valuation.total_gain_loss_percent,
        "allocation": [
            {"asset_type": s.asset_type.value, "value": s.value, "percent": s.percent}
            for s in valuation.allocation
        ],
        "holdings": [holding_valuation_dict(hv) for hv in valuation.holdings],
        "unpriced_symbols": valuation.unpriced_symbols,
        "missing_rates": [rate_key(a, b) for a, b in valuation.missing_rates],
    }
