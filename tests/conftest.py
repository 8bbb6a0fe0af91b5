"""Shared test fixtures for the portfolio tracker."""

from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from coinfolio.config import AppSettings, DashboardSettings, RefreshSettings, SeedSettings
from coinfolio.models import CoinRecord, Holding


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (no dashboard, no auto refresh)."""
    return AppSettings(
        log_level="DEBUG",
        refresh=RefreshSettings(interval_seconds=60.0, auto_start=False),
        dashboard=DashboardSettings(enabled=False),
        seed=SeedSettings(sample_data=True, default_favorites=["ETH"]),
    )


@pytest.fixture
def make_coin() -> Callable[..., CoinRecord]:
    """Factory for CoinRecords whose id is the lower-cased symbol."""

    def _make(symbol: str, favorite: bool = False, price: str = "1") -> CoinRecord:
        return CoinRecord(
            id=symbol.lower(),
            symbol=symbol,
            name=symbol.title(),
            price=Decimal(price),
            is_favorite=favorite,
        )

    return _make


@pytest.fixture
def sample_catalog(make_coin) -> list[CoinRecord]:
    """[BTC, ETH*, SOL] -- only ETH is a favorite."""
    return [make_coin("BTC"), make_coin("ETH", favorite=True), make_coin("SOL")]


@pytest.fixture
def sample_holdings() -> list[Holding]:
    """BTC 1 @ 35000 and ETH 10 @ 1800 -- total value 53000."""
    purchased = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Holding(
            id="h-btc",
            coin_name="Bitcoin",
            coin_symbol="BTC",
            quantity=Decimal("1"),
            current_price=Decimal("35000"),
            cost_basis=Decimal("20000"),
            daily_change=Decimal("2"),
            purchase_date=purchased,
        ),
        Holding(
            id="h-eth",
            coin_name="Ethereum",
            coin_symbol="ETH",
            quantity=Decimal("10"),
            current_price=Decimal("1800"),
            cost_basis=Decimal("15000"),
            daily_change=Decimal("-1"),
            purchase_date=purchased,
        ),
    ]
