"""Asset catalog API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id
from database import get_db
from schemas.asset import AssetResponse, CustomAssetCreate
from services.asset_catalog_service import AssetCatalogService
from utils.asset_types import AssetType

router = APIRouter(prefix="/api/assets", tags=["assets"])


@router.get("", response_model=list[AssetResponse])
def search_assets(
    q: str | None = Query(default=None, description="Symbol or name substring"),
    asset_type: AssetType | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Search global assets and the user's custom assets."""
    return AssetCatalogService.search(
        db, user_id, query=q, asset_type=asset_type, include_inactive=include_inactive, limit=limit
    )


@router.post("/custom", response_model=AssetResponse, status_code=201)
def create_custom_asset(
    data: CustomAssetCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Define a custom asset owned by the user (priced manually)."""
    try:
        asset = AssetCatalogService.create_custom_asset(db, user_id, data)
        db.commit()
        db.refresh(asset)
        return asset
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{symbol}", response_model=AssetResponse)
def get_asset(
    symbol: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Look up one asset visible to the user."""
    asset = AssetCatalogService.get_visible_asset(db, user_id, symbol)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset '{symbol.upper()}' not found")
    return asset
