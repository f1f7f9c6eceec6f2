"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from api.exchange_rates import get_exchange_rate_service
from api.portfolio import get_portfolio_service
from services.exchange_rate_service import ExchangeRateService
from services.portfolio_service import PortfolioService
from services.price_cache import PriceCache
from utils.asset_types import AssetType
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import USER_ID, aapl, btc, spy  # noqa: F401
from tests.fixtures.mocks import MockQuoteProvider, MockRateProvider


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="providers")
def providers_fixture():
    """Mock primary/secondary quote providers for crypto and equities."""
    return {
        "binance": MockQuoteProvider("binance", {"BTC": "60000", "ETH": "3000"}),
        "coingecko": MockQuoteProvider("coingecko", {"BTC": "60100", "ETH": "3010"}),
        "yahoo": MockQuoteProvider("yahoo", {"AAPL": "200", "SPY": "500"}),
        "alphavantage": MockQuoteProvider("alphavantage", {"AAPL": "201", "SPY": "501"}),
    }


@pytest.fixture(name="portfolio_service")
def portfolio_service_fixture(providers):
    """PortfolioService wired to mock providers and a private cache."""
    chains = {
        AssetType.CRYPTO: [providers["binance"], providers["coingecko"]],
        AssetType.STOCK: [providers["yahoo"], providers["alphavantage"]],
        AssetType.ETF: [providers["yahoo"], providers["alphavantage"]],
    }
    return PortfolioService(chains=chains, cache=PriceCache())


@pytest.fixture(name="rate_provider")
def rate_provider_fixture():
    return MockRateProvider(rates={"EUR": "0.925925925926", "GBP": "0.8"})


@pytest.fixture(name="client")
def client_fixture(db, portfolio_service, rate_provider):
    """Create a test client with the test database and mock providers."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_portfolio_service():
        return portfolio_service

    def override_get_exchange_rate_service():
        return ExchangeRateService(providers=[rate_provider])

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_portfolio_service] = override_get_portfolio_service
    app.dependency_overrides[get_exchange_rate_service] = override_get_exchange_rate_service
    client = TestClient(app, headers={"X-User-Id": USER_ID})
    yield client
    app.dependency_overrides.clear()
