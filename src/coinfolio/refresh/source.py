"""Data sources that seed and refresh the catalog and ledger.

PortfolioState depends only on the PortfolioDataSource interface; where the
data comes from is the source's concern.
"""

from abc import ABC, abstractmethod
from copy import copy
from datetime import datetime, timezone
from decimal import Decimal

from coinfolio.models import CoinRecord, Holding


class PortfolioDataSource(ABC):
    """Abstract producer of full replacement coin and holding sets."""

    @abstractmethod
    async def fetch_coins(self) -> list[CoinRecord]:
        """Return the full current catalog as fresh records."""
        ...

    @abstractmethod
    async def fetch_holdings(self) -> list[Holding] | None:
        """Return fresh holdings, or None when this source does not supply them."""
        ...


class StaticDataSource(PortfolioDataSource):
    """Serves fixed records, handing out copies on every fetch.

    Used for sample data at startup and as a stand-in source in tests.
    Prices can be changed between fetches with set_price().
    """

    def __init__(
        self,
        coins: list[CoinRecord],
        holdings: list[Holding] | None = None,
    ) -> None:
        self._coins = list(coins)
        self._holdings = list(holdings) if holdings is not None else None

    async def fetch_coins(self) -> list[CoinRecord]:
        return [copy(coin) for coin in self._coins]

    async def fetch_holdings(self) -> list[Holding] | None:
        if self._holdings is None:
            return None
        return [copy(h) for h in self._holdings]

    def set_price(self, symbol: str, price: Decimal) -> None:
        """Update the price served for ``symbol`` in both coins and holdings."""
        for coin in self._coins:
            if coin.symbol == symbol:
                coin.price = price
        for h in self._holdings or []:
            if h.coin_symbol == symbol:
                h.current_price = price


def sample_data_source(favorite_symbols: list[str] | None = None) -> StaticDataSource:
    """Build a StaticDataSource with a small BTC/ETH/SOL sample portfolio.

    ``favorite_symbols`` only sets the flags served on the first load;
    later refreshes keep whatever flags the user has set.
    """
    favorites = set(favorite_symbols or [])
    purchased = datetime(2024, 1, 1, tzinfo=timezone.utc)

    rows = [
        ("bitcoin", "BTC", "Bitcoin", "35000", "2.1"),
        ("ethereum", "ETH", "Ethereum", "1800", "-1.2"),
        ("solana", "SOL", "Solana", "20", "3.5"),
    ]
    coins = [
        CoinRecord(
            id=coin_id,
            symbol=symbol,
            name=name,
            price=Decimal(price),
            daily_change=Decimal(change),
            is_favorite=symbol in favorites,
        )
        for coin_id, symbol, name, price, change in rows
    ]

    holdings = [
        Holding(
            id="holding-btc",
            coin_name="Bitcoin",
            coin_symbol="BTC",
            quantity=Decimal("1"),
            current_price=Decimal("35000"),
            cost_basis=Decimal("20000"),
            is_favorite=True,
            daily_change=Decimal("2.1"),
            purchase_date=purchased,
        ),
        Holding(
            id="holding-eth",
            coin_name="Ethereum",
            coin_symbol="ETH",
            quantity=Decimal("10"),
            current_price=Decimal("1800"),
            cost_basis=Decimal("15000"),
            daily_change=Decimal("-1.2"),
            purchase_date=purchased,
        ),
        Holding(
            id="holding-sol",
            coin_name="Solana",
            coin_symbol="SOL",
            quantity=Decimal("100"),
            current_price=Decimal("20"),
            cost_basis=Decimal("2000"),
            daily_change=Decimal("3.5"),
            purchase_date=purchased,
        ),
    ]
    return StaticDataSource(coins, holdings)
