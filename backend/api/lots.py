"""Lot management API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id, lot_response_dict
from database import get_db
from schemas.lot import LotCreate, LotResponse, LotUpdate
from services.lot_service import LotService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lots", tags=["lots"])


@router.get("", response_model=list[LotResponse])
def list_lots(
    symbol: str | None = Query(default=None),
    platform: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's lots, newest purchase first."""
    lots = LotService.list_lots(db, user_id, symbol=symbol, platform=platform)
    return [lot_response_dict(lot) for lot in lots]


@router.get("/platforms", response_model=list[str])
def list_platforms(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Distinct platform labels used on the user's lots."""
    return LotService.get_platforms(db, user_id)


@router.post("", response_model=LotResponse, status_code=201)
def create_lot(
    lot_data: LotCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record a new purchase lot."""
    try:
        lot = LotService.create_lot(db, user_id, lot_data)
        db.commit()
        db.refresh(lot)
        return lot_response_dict(lot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{lot_id}", response_model=LotResponse)
def get_lot(
    lot_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get one of the user's lots."""
    lot = LotService.get_lot(db, user_id, lot_id)
    if lot is None:
        raise HTTPException(status_code=404, detail="Lot not found")
    return lot_response_dict(lot)


@router.put("/{lot_id}", response_model=LotResponse)
def update_lot(
    lot_id: str,
    lot_data: LotUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Edit a lot."""
    if LotService.get_lot(db, user_id, lot_id) is None:
        raise HTTPException(status_code=404, detail="Lot not found")
    try:
        lot = LotService.update_lot(db, user_id, lot_id, lot_data)
        db.commit()
        db.refresh(lot)
        return lot_response_dict(lot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{lot_id}", status_code=204)
def delete_lot(
    lot_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a lot together with its dividends."""
    if not LotService.delete_lot(db, user_id, lot_id):
        raise HTTPException(status_code=404, detail="Lot not found")
    db.commit()
