"""Ordered, identity-unique store of coin records.

The catalog list is also the storage for watchlist order (see
coinfolio.watchlist.projection), so every mutation goes through the
projection helpers instead of writing to positions directly.
"""

from collections.abc import Iterable
from copy import copy

from coinfolio.exceptions import NotFoundError
from coinfolio.logging import get_logger
from coinfolio.models import CoinRecord
from coinfolio.watchlist import projection

logger = get_logger(__name__)


class CoinCatalog:
    """The full ordered collection of tracked coins.

    Not safe for concurrent mutation on its own; PortfolioState serializes
    access to it.
    """

    def __init__(self, coins: Iterable[CoinRecord] = ()) -> None:
        self._coins: list[CoinRecord] = []
        # Ids removed by the user; a later fetch must not bring them back.
        self._removed_ids: set[str] = set()
        for coin in coins:
            self.add_coin(coin)

    def __len__(self) -> int:
        return len(self._coins)

    def __contains__(self, coin_id: object) -> bool:
        return any(coin.id == coin_id for coin in self._coins)

    def coins(self) -> list[CoinRecord]:
        """Return copies of all records in stored order."""
        return [copy(coin) for coin in self._coins]

    def favorites(self) -> list[CoinRecord]:
        """Return copies of the watchlist in watchlist order."""
        return [copy(coin) for coin in projection.project(self._coins)]

    def non_favorites(self) -> list[CoinRecord]:
        return [copy(coin) for coin in projection.non_favorites(self._coins)]

    def get(self, coin_id: str) -> CoinRecord | None:
        """Return a copy of the record with ``coin_id``, or None."""
        for coin in self._coins:
            if coin.id == coin_id:
                return copy(coin)
        return None

    def require(self, coin_id: str) -> CoinRecord:
        """Like get(), but raise NotFoundError when the id is absent."""
        coin = self.get(coin_id)
        if coin is None:
            raise NotFoundError(f"coin {coin_id!r} is not in the catalog")
        return coin

    def add_coin(self, coin: CoinRecord) -> None:
        """Append a coin. A coin added as a favorite becomes last in the watchlist.

        Raises:
            ValueError: If a record with the same id already exists.
        """
        if coin.id in self:
            raise ValueError(f"duplicate coin id {coin.id!r}")
        self._coins.append(coin)
        self._removed_ids.discard(coin.id)
        logger.debug("coin_added", coin_id=coin.id, symbol=coin.symbol)

    def remove_coin(self, coin_id: str) -> bool:
        """Remove a coin by id. Returns False when it was not present."""
        for i, coin in enumerate(self._coins):
            if coin.id == coin_id:
                del self._coins[i]
                self._removed_ids.add(coin_id)
                logger.debug("coin_removed", coin_id=coin_id, symbol=coin.symbol)
                return True
        return False

    def toggle_favorite(self, coin_id: str) -> bool:
        return projection.toggle_favorite(self._coins, coin_id)

    def remove_from_watchlist(self, coin_id: str) -> bool:
        return projection.remove_from_watchlist(self._coins, coin_id)

    def reorder_favorites(self, source_indices: Iterable[int], destination: int) -> None:
        projection.reorder_favorites(self._coins, source_indices, destination)

    def merge_from_fetch(self, fresh: Iterable[CoinRecord]) -> None:
        """Merge fetched records by id.

        Known coins get fresh market data but keep their favorite flag and
        position. Coins missing from the fetch are kept, and coins removed
        with remove_coin() stay removed.
        """
        before = len(self._coins)
        self._coins = projection.merge_fetched(self._coins, list(fresh), self._removed_ids)
        logger.info(
            "catalog_refreshed",
            before=before,
            after=len(self._coins),
            favorites=sum(1 for coin in self._coins if coin.is_favorite),
        )
