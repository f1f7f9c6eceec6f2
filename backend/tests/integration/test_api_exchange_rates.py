"""Integration tests for exchange rate endpoints."""

from decimal import Decimal


class TestExchangeRates:
    def test_refresh_stores_pairs(self, client):
        response = client.post("/api/exchange-rates/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["source"] == "mock-rates"
        assert data["pairs_written"] == 6

        rates = {(r["from_currency"], r["to_currency"]): r for r in client.get("/api/exchange-rates").json()}
        assert Decimal(rates[("USD", "GBP")]["rate"]) == Decimal("0.8")
        assert Decimal(rates[("GBP", "USD")]["rate"]) == Decimal("1.25")

    def test_refresh_failure_is_reported(self, client, rate_provider):
        rate_provider.should_fail = True

        data = client.post("/api/exchange-rates/refresh").json()

        assert data["success"] is False
        assert data["errors"]

    def test_manual_rate_survives_refresh(self, client):
        put = client.put(
            "/api/exchange-rates",
            json={"from_currency": "eur", "to_currency": "usd", "rate": "1.10"},
        )
        assert put.status_code == 200
        assert put.json()["source"] == "manual"

        data = client.post("/api/exchange-rates/refresh").json()

        assert data["pairs_pinned"] == 1
        rates = {(r["from_currency"], r["to_currency"]): r for r in client.get("/api/exchange-rates").json()}
        assert Decimal(rates[("EUR", "USD")]["rate"]) == Decimal("1.10")

    def test_same_currency_rejected(self, client):
        response = client.put(
            "/api/exchange-rates",
            json={"from_currency": "USD", "to_currency": "USD", "rate": "1"},
        )
        assert response.status_code == 400

    def test_delete(self, client):
        client.put(
            "/api/exchange-rates",
            json={"from_currency": "EUR", "to_currency": "USD", "rate": "1.1"},
        )

        assert client.delete("/api/exchange-rates/EUR/USD").status_code == 204
        assert client.delete("/api/exchange-rates/EUR/USD").status_code == 404
