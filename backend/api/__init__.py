"""API route handlers."""
from . import assets, dividends, exchange_rates, lots, portfolio, preferences, prices, snapshots

__all__ = [
    "assets",
    "dividends",
    "exchange_rates",
    "lots",
    "portfolio",
    "preferences",
    "prices",
    "snapshots",
]
