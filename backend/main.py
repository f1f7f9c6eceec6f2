"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import assets, dividends, exchange_rates, lots, portfolio, preferences, prices, snapshots
from database import get_session_local
from logging_config import setup_logging
from services.asset_catalog_service import AssetCatalogService

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the default asset catalog on startup."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        AssetCatalogService.seed_default_assets(db)
    except Exception:
        logger.warning("Asset seeding failed on startup", exc_info=True)
    finally:
        db.close()
    yield


app = FastAPI(
    title="Portfolio Valuator",
    description="Lot-based portfolio valuation with cached multi-source prices",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(assets.router)
app.include_router(dividends.router)
app.include_router(exchange_rates.router)
app.include_router(lots.router)
app.include_router(portfolio.router)
app.include_router(prices.router)
app.include_router(snapshots.router)
app.include_router(preferences.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
