"""Single-writer owner of the catalog, holdings ledger, and transaction log.

Every mutation is an async method that holds one asyncio.Lock while it
touches state, so the refresh scheduler and user commands (dashboard
requests) dispatched onto the same event loop never interleave their
writes. Reads hand out copies, so a reader never observes a half-applied
mutation and cannot mutate state behind the lock's back.

Refresh flow:
1. fetch from the data source with the lock released (slow, may suspend)
2. take the lock
3. merge the fetched data by id into the records as they are *now*

The merge only refreshes market data (prices, daily change, names). Favorite
flags, watchlist order, quantities and cost bases are read at write time
instead of from a snapshot taken before the fetch, so a command that lands
while a fetch is in flight survives. Coins and holdings the user added
locally are kept, and ones the user removed are not brought back.
"""

import asyncio
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from coinfolio.exceptions import RefreshFetchError
from coinfolio.logging import get_logger
from coinfolio.market.catalog import CoinCatalog
from coinfolio.models import CoinRecord, Holding, Transaction
from coinfolio.portfolio.ledger import HoldingsLedger
from coinfolio.portfolio.transactions import TransactionLog
from coinfolio.refresh.source import PortfolioDataSource

logger = get_logger(__name__)


class PortfolioState:
    """Owns all mutable portfolio state and serializes writes to it.

    Args:
        catalog: Coin catalog (empty if omitted).
        ledger: Holdings ledger (empty if omitted).
        transactions: Transaction log (empty if omitted).
    """

    def __init__(
        self,
        catalog: CoinCatalog | None = None,
        ledger: HoldingsLedger | None = None,
        transactions: TransactionLog | None = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else CoinCatalog()
        self._ledger = ledger if ledger is not None else HoldingsLedger()
        self._transactions = transactions if transactions is not None else TransactionLog()
        self._lock = asyncio.Lock()
        self._last_refresh_at: datetime | None = None

    # ------------------------------------------------------------------
    # Reads (snapshots)
    # ------------------------------------------------------------------

    def catalog(self) -> list[CoinRecord]:
        return self._catalog.coins()

    def watchlist(self) -> list[CoinRecord]:
        return self._catalog.favorites()

    def holdings(self) -> list[Holding]:
        return self._ledger.holdings()

    def transactions(self) -> list[Transaction]:
        return self._transactions.transactions()

    @property
    def total_value(self) -> Decimal:
        return self._ledger.total_value

    def get_portfolio_summary(self) -> dict:
        return self._ledger.get_portfolio_summary()

    @property
    def last_refresh_at(self) -> datetime | None:
        return self._last_refresh_at

    # ------------------------------------------------------------------
    # Catalog / watchlist commands
    # ------------------------------------------------------------------

    async def toggle_favorite(self, coin_id: str) -> bool:
        async with self._lock:
            return self._catalog.toggle_favorite(coin_id)

    async def remove_from_watchlist(self, coin_id: str) -> bool:
        async with self._lock:
            return self._catalog.remove_from_watchlist(coin_id)

    async def reorder_favorites(self, source_indices: Iterable[int], destination: int) -> None:
        """Raises IndexOutOfRangeError with state unchanged on bad indices."""
        async with self._lock:
            self._catalog.reorder_favorites(list(source_indices), destination)

    async def add_coin(self, coin: CoinRecord) -> None:
        async with self._lock:
            self._catalog.add_coin(coin)

    async def remove_coin(self, coin_id: str) -> bool:
        async with self._lock:
            return self._catalog.remove_coin(coin_id)

    # ------------------------------------------------------------------
    # Ledger / transaction commands
    # ------------------------------------------------------------------

    async def add_holding(self, **fields) -> Holding:
        """Add a holding. Accepts the keyword fields of HoldingsLedger.add_holding."""
        async with self._lock:
            return self._ledger.add_holding(**fields)

    async def remove_holdings(self, indices: Iterable[int]) -> list[Holding]:
        async with self._lock:
            return self._ledger.remove_holdings(list(indices))

    async def toggle_holding_favorite(self, holding_id: str) -> bool:
        async with self._lock:
            return self._ledger.toggle_favorite(holding_id)

    async def record_transaction(self, tx: Transaction) -> None:
        async with self._lock:
            self._transactions.append(tx)

    async def delete_manual_transaction(self, tx: Transaction) -> bool:
        async with self._lock:
            return self._transactions.delete_manual(tx)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, source: PortfolioDataSource) -> None:
        """Re-fetch coins and holdings from ``source`` and merge them in.

        Raises:
            RefreshFetchError: If the source fails. State is left untouched.
        """
        try:
            coins, holdings = await asyncio.gather(
                source.fetch_coins(),
                source.fetch_holdings(),
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("refresh_fetch_failed", error=str(exc))
            raise RefreshFetchError(f"data source fetch failed: {exc}") from exc

        async with self._lock:
            self._catalog.merge_from_fetch(coins)
            if holdings is not None:
                self._ledger.merge_from_fetch(holdings)
            self._last_refresh_at = datetime.now().astimezone()

        logger.info(
            "portfolio_refreshed",
            coins=len(coins),
            holdings=len(holdings) if holdings is not None else None,
        )
