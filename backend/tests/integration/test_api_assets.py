"""Integration tests for asset catalog endpoints."""

from utils.asset_types import AssetType
from tests.fixtures import OTHER_USER_ID, create_asset


class TestAssets:
    def test_search(self, client, aapl, btc, spy):
        response = client.get("/api/assets", params={"q": "bit"})

        assert response.status_code == 200
        assert [a["symbol"] for a in response.json()] == ["BTC"]

    def test_filter_by_type(self, client, aapl, btc, spy):
        data = client.get("/api/assets", params={"asset_type": "etf"}).json()
        assert [a["symbol"] for a in data] == ["SPY"]

    def test_create_custom_asset(self, client):
        response = client.post(
            "/api/assets/custom", json={"symbol": "house1", "name": "Beach house", "precision": 0}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "HOUSE1"
        assert data["asset_type"] == "custom"
        assert data["is_global"] is False

    def test_duplicate_custom_asset(self, client, aapl):
        response = client.post("/api/assets/custom", json={"symbol": "AAPL", "name": "Mine"})
        assert response.status_code == 409

    def test_other_users_custom_asset_hidden(self, client, db):
        create_asset(db, "ART1", AssetType.CUSTOM, user_id=OTHER_USER_ID)
        db.commit()

        assert client.get("/api/assets/ART1").status_code == 404
        assert client.get("/api/assets").json() == []

    def test_get(self, client, aapl):
        data = client.get("/api/assets/aapl").json()
        assert data["name"] == "Apple Inc."
        assert data["precision"] == 2
