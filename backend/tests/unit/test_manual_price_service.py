"""Tests for manual prices."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models import ManualPrice
from services.manual_price_service import DatabaseManualPriceSource, ManualPriceService
from utils.asset_types import AssetType
from tests.fixtures import OTHER_USER_ID, USER_ID, create_asset


@pytest.fixture
def art(db):
    return create_asset(db, "ART1", AssetType.CUSTOM, name="Painting", user_id=USER_ID)


class TestManualPriceService:
    def test_set_and_get_latest(self, db, art):
        ManualPriceService.set_price(db, USER_ID, "art1", Decimal("1000"))

        latest = ManualPriceService.get_latest(db, "ART1")

        assert latest.price == Decimal("1000")
        assert latest.entered_by == USER_ID

    def test_latest_wins(self, db, art):
        earlier = datetime(2025, 1, 1, tzinfo=timezone.utc)
        db.add(ManualPrice(asset_id=art.id, symbol="ART1", price=Decimal("900"), entered_at=earlier))
        db.add(
            ManualPrice(
                asset_id=art.id,
                symbol="ART1",
                price=Decimal("1200"),
                entered_at=earlier + timedelta(days=1),
            )
        )
        db.flush()

        assert ManualPriceService.get_latest(db, "ART1").price == Decimal("1200")
        assert [p.price for p in ManualPriceService.get_history(db, USER_ID, "ART1")] == [
            Decimal("1200"),
            Decimal("900"),
        ]

    def test_history_hidden_from_other_users(self, db, art):
        ManualPriceService.set_price(db, USER_ID, "ART1", Decimal("1000"))

        with pytest.raises(ValueError, match="Unknown asset symbol"):
            ManualPriceService.get_history(db, OTHER_USER_ID, "ART1")

    def test_zero_is_allowed(self, db, art):
        entry = ManualPriceService.set_price(db, USER_ID, "ART1", Decimal("0"))
        assert entry.price == Decimal("0")

    def test_negative_rejected(self, db, art):
        with pytest.raises(ValueError, match="zero or greater"):
            ManualPriceService.set_price(db, USER_ID, "ART1", Decimal("-1"))

    def test_invisible_asset_rejected(self, db, art):
        with pytest.raises(ValueError, match="Unknown asset symbol"):
            ManualPriceService.set_price(db, OTHER_USER_ID, "ART1", Decimal("10"))

    def test_global_assets_accept_manual_prices(self, db, aapl):
        entry = ManualPriceService.set_price(db, USER_ID, "AAPL", Decimal("199"))
        assert entry.symbol == "AAPL"


class TestDatabaseManualPriceSource:
    def test_latest_quote(self, db, art):
        ManualPriceService.set_price(db, USER_ID, "ART1", Decimal("1000"))

        quote = DatabaseManualPriceSource(db).latest_quote("ART1")

        assert quote.price == Decimal("1000")
        assert quote.source == "manual"
        assert quote.change_24h is None
        assert quote.fetched_at.tzinfo is not None
        assert not quote.is_stale

    def test_no_price(self, db, art):
        assert DatabaseManualPriceSource(db).latest_quote("ART1") is None
