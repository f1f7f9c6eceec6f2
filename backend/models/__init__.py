"""SQLAlchemy ORM models."""

from .asset import Asset
from .dividend import Dividend
from .exchange_rate import ExchangeRate
from .lot import Lot
from .manual_price import ManualPrice
from .portfolio_snapshot import PortfolioSnapshot
from .user_preference import UserPreference
from .utils import generate_uuid

__all__ = ["Asset", "Dividend", "ExchangeRate", "Lot", "ManualPrice", "PortfolioSnapshot", "UserPreference", "generate_uuid"]
