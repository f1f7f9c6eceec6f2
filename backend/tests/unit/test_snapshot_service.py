"""Tests for daily portfolio snapshots."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from models import PortfolioSnapshot
from services.exchange_rate_service import ExchangeRateService
from services.portfolio_service import PortfolioService
from services.price_cache import PriceCache
from services.snapshot_service import SnapshotService, normalize_snapshot_date
from utils.asset_types import AssetType
from tests.fixtures import OTHER_USER_ID, USER_ID, create_asset, create_lot

SNAPSHOT_DAY = date(2025, 1, 10)


@pytest.fixture
def price_cache():
    return PriceCache()


@pytest.fixture
def snapshot_service(providers, price_cache):
    chains = {
        AssetType.CRYPTO: [providers["binance"], providers["coingecko"]],
        AssetType.STOCK: [providers["yahoo"], providers["alphavantage"]],
        AssetType.ETF: [providers["yahoo"], providers["alphavantage"]],
    }
    return SnapshotService(PortfolioService(chains=chains, cache=price_cache))


class TestNormalizeSnapshotDate:
    def test_datetime_reduced_to_day(self):
        assert normalize_snapshot_date(datetime(2025, 1, 10, 23, 59)) == SNAPSHOT_DAY

    def test_date_unchanged(self):
        assert normalize_snapshot_date(SNAPSHOT_DAY) == SNAPSHOT_DAY

    def test_none_is_today(self):
        assert normalize_snapshot_date(None) == date.today()


class TestCaptureSnapshot:
    def test_creates_snapshot(self, db, aapl, btc, snapshot_service):
        create_lot(db, aapl, "10", "150")
        create_lot(db, btc, "0.5", "40000")

        result = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        snap = result.snapshot
        assert result.created
        assert snap.snapshot_date == SNAPSHOT_DAY
        assert snap.currency == "USD"
        assert snap.total_value == Decimal("32000")
        assert snap.cost_basis == Decimal("21500")
        assert snap.stock_value == Decimal("2000")
        assert snap.crypto_value == Decimal("30000")
        assert snap.etf_value == Decimal("0")
        assert [h["symbol"] for h in snap.holdings] == ["AAPL", "BTC"]
        assert Decimal(snap.holdings[0]["value"]) == Decimal("2000")

    def test_same_day_capture_overwrites(self, db, aapl, providers, price_cache, snapshot_service):
        """$10,000 then $10,500 on the same day leaves one row at $10,500."""
        create_lot(db, aapl, "50", "150")

        first = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)
        assert first.snapshot.total_value == Decimal("10000")

        providers["yahoo"].prices["AAPL"] = Decimal("210")
        price_cache.clear()
        second = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        assert not second.created
        assert second.snapshot.id == first.snapshot.id
        assert second.snapshot.total_value == Decimal("10500")

        history = SnapshotService.list_snapshots(db, USER_ID)
        assert len(history) == 1
        assert history[0].snapshot_date == SNAPSHOT_DAY
        assert history[0].total_value == Decimal("10500")

    def test_unpriced_holding_counts_cost_not_value(self, db, snapshot_service):
        art = create_asset(db, "ART1", AssetType.CUSTOM, user_id=USER_ID)
        create_lot(db, art, "1", "5000")

        snap = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY).snapshot

        assert snap.total_value == Decimal("0")
        assert snap.cost_basis == Decimal("5000")
        assert snap.holdings[0]["value"] is None

    def test_empty_portfolio_still_snapshots(self, db, snapshot_service):
        result = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        assert result.created
        assert result.snapshot.total_value == Decimal("0")
        assert result.snapshot.holdings == []

    def test_mixed_currency_average_cost_in_snapshot_currency(self, db, aapl, snapshot_service):
        create_lot(db, aapl, "10", "100", currency="EUR")
        create_lot(db, aapl, "10", "15000", currency="JPY")
        ExchangeRateService.set_manual_rate(db, "EUR", "USD", Decimal("1.1"))
        ExchangeRateService.set_manual_rate(db, "JPY", "USD", Decimal("0.0067"))

        result = snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        summary = result.snapshot.holdings[0]
        # (10 * 100 * 1.1 + 10 * 15000 * 0.0067) / 20
        assert Decimal(summary["average_cost"]) == Decimal("105.25")
        assert Decimal(summary["cost_basis"]) == Decimal("2105")
        assert {c: Decimal(v) for c, v in summary["average_cost_by_currency"].items()} == {
            "EUR": Decimal("100"),
            "JPY": Decimal("15000"),
        }


class TestListSnapshots:
    def test_bounded_and_ordered(self, db, aapl, snapshot_service):
        create_lot(db, aapl, "10", "150")
        for day in (date(2025, 1, 12), date(2025, 1, 10), date(2025, 1, 11)):
            snapshot_service.capture_snapshot(db, USER_ID, day)

        rows = SnapshotService.list_snapshots(db, USER_ID, start=date(2025, 1, 11))

        assert [r.snapshot_date for r in rows] == [date(2025, 1, 11), date(2025, 1, 12)]

    def test_scoped_to_user(self, db, aapl, snapshot_service):
        create_lot(db, aapl, "10", "150")
        snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        assert SnapshotService.list_snapshots(db, OTHER_USER_ID) == []
        assert SnapshotService.get_snapshot(db, OTHER_USER_ID, SNAPSHOT_DAY) is None


class TestCaptureAll:
    def test_captures_every_user_with_lots(self, db, aapl, snapshot_service):
        create_lot(db, aapl, "10", "150", user_id=USER_ID)
        create_lot(db, aapl, "5", "150", user_id=OTHER_USER_ID)
        snapshot_service.capture_snapshot(db, USER_ID, SNAPSHOT_DAY)

        result = snapshot_service.capture_all(db, SNAPSHOT_DAY)

        assert result.created == 1
        assert result.updated == 1
        assert result.failed == 0
        assert db.query(PortfolioSnapshot).count() == 2

    def test_one_failure_does_not_stop_the_rest(self, db, aapl, snapshot_service, monkeypatch):
        create_lot(db, aapl, "10", "150", user_id=USER_ID)
        create_lot(db, aapl, "5", "150", user_id=OTHER_USER_ID)
        db.commit()
        real_capture = snapshot_service.capture_snapshot

        def flaky_capture(session, user_id, as_of=None):
            if user_id == USER_ID:
                raise RuntimeError("valuation exploded")
            return real_capture(session, user_id, as_of)

        monkeypatch.setattr(snapshot_service, "capture_snapshot", flaky_capture)

        result = snapshot_service.capture_all(db, SNAPSHOT_DAY)

        assert result.failed == 1
        assert result.created == 1
        assert "valuation exploded" in result.errors[0]
        assert SnapshotService.get_snapshot(db, OTHER_USER_ID, SNAPSHOT_DAY) is not None
