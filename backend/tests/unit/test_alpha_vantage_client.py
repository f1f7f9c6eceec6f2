"""Unit tests for AlphaVantageClient (mocked httpx)."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from integrations.alpha_vantage_client import AlphaVantageClient
from integrations.exceptions import ProviderAPIError


@pytest.fixture
def client():
    return AlphaVantageClient(api_key="test-key")


def _response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def _global_quote(price: str, change: str = "0.5000%") -> dict:
    return {"Global Quote": {"01. symbol": "X", "05. price": price, "10. change percent": change}}


class TestGetQuotes:
    def test_one_request_per_symbol(self, client):
        responses = [_response(_global_quote("201.5000", "1.2500%")), _response(_global_quote("501.00"))]
        with patch.object(client._client, "request", side_effect=responses) as mock_request:
            quotes = client.get_quotes(["AAPL", "SPY"])

        assert quotes["AAPL"].price == Decimal("201.5000")
        assert quotes["AAPL"].change_24h == Decimal("1.2500")
        assert quotes["SPY"].source == "alphavantage"
        assert mock_request.call_count == 2
        assert mock_request.call_args.kwargs["params"]["apikey"] == "test-key"

    def test_empty_quote_omitted(self, client):
        with patch.object(client._client, "request", return_value=_response({"Global Quote": {}})):
            assert client.get_quotes(["FAKE"]) == {}

    def test_usage_limit_stops_loop(self, client):
        limit = _response({"Note": "Thank you for using Alpha Vantage! Our standard API rate limit..."})
        responses = [_response(_global_quote("201")), limit, _response(_global_quote("9"))]
        with patch.object(client._client, "request", side_effect=responses) as mock_request:
            quotes = client.get_quotes(["AAPL", "SPY", "MSFT"])

        assert list(quotes) == ["AAPL"]
        assert mock_request.call_count == 2

    def test_raises_when_nothing_priced(self, client):
        limit = _response({"Information": "API rate limit reached"})
        with patch.object(client._client, "request", return_value=limit):
            with pytest.raises(ProviderAPIError) as exc_info:
                client.get_quotes(["AAPL"])
        assert exc_info.value.status_code == 429

    def test_default_demo_key(self):
        assert AlphaVantageClient()._api_key == "demo"
