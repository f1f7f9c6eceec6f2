"""Portfolio snapshot API endpoints."""

import logging
import secrets
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id
from api.portfolio import get_portfolio_service
from config import settings
from database import get_db
from schemas.snapshot import SnapshotCaptureResponse, SnapshotResponse, SnapshotRunResponse
from services.portfolio_service import PortfolioService
from services.snapshot_service import SnapshotService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snapshots", tags=["snapshots"])


def get_snapshot_service(
    portfolio_service: PortfolioService = Depends(get_portfolio_service),
) -> SnapshotService:
    return SnapshotService(portfolio_service)


def require_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Check ``Authorization: Bearer <CRON_SECRET>``.

    Raises:
        HTTPException: 503 when no secret is configured, 401 on a mismatch.
    """
    if not settings.CRON_SECRET:
        raise HTTPException(status_code=503, detail="Scheduled snapshots are not configured")
    expected = f"Bearer {settings.CRON_SECRET}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.get("", response_model=list[SnapshotResponse])
def list_snapshots(
    start: date | None = Query(default=None, description="Start date (inclusive)"),
    end: date | None = Query(default=None, description="End date (inclusive)"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """The user's snapshot history in date order."""
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="start must be on or before end")
    return SnapshotService.list_snapshots(db, user_id, start=start, end=end)


@router.post("", response_model=SnapshotCaptureResponse)
def capture_snapshot(
    as_of: date | None = Query(default=None, description="Snapshot day (defaults to today)"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: SnapshotService = Depends(get_snapshot_service),
):
    """Capture (or overwrite) the user's snapshot for a day."""
    try:
        result = service.capture_snapshot(db, user_id, as_of)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"created": result.created, "snapshot": result.snapshot}


@router.post(
    "/run",
    response_model=SnapshotRunResponse,
    dependencies=[Depends(require_cron_secret)],
)
def run_scheduled_snapshots(
    db: Session = Depends(get_db),
    service: SnapshotService = Depends(get_snapshot_service),
):
    """Capture today's snapshot for every user with lots (scheduler entry point)."""
    result = service.capture_all(db)
    return {
        "snapshot_date": result.snapshot_date,
        "created": result.created,
        "updated": result.updated,
        "failed": result.failed,
        "errors": result.errors,
    }
