"""Favorites projection over the coin catalog.

The watchlist has no order field of its own. Its order is the relative
order of favorite records inside the catalog list, so every function here
that rewrites the catalog must leave the non-favorite subsequence exactly
as it was and move favorites only as the operation asks.

Rules:
- a coin that becomes a favorite is moved to the end of the catalog, making
  it last in the watchlist; every other record keeps its relative position
- a coin that stops being a favorite stays where it is
- reordering rewrites the catalog as ``non_favorites + reordered_favorites``

All functions operate on a plain ``list[CoinRecord]`` and are safe to use
from any caller that already holds the state lock.
"""

from collections.abc import Collection, Iterable, Sequence
from dataclasses import replace
from typing import TypeVar

from coinfolio.exceptions import IndexOutOfRangeError
from coinfolio.logging import get_logger
from coinfolio.models import CoinRecord

logger = get_logger(__name__)

T = TypeVar("T")


def project(catalog: Sequence[CoinRecord]) -> list[CoinRecord]:
    """Return the favorites in their stored relative order."""
    return [coin for coin in catalog if coin.is_favorite]


def non_favorites(catalog: Sequence[CoinRecord]) -> list[CoinRecord]:
    """Return the non-favorite complement in its stored relative order."""
    return [coin for coin in catalog if not coin.is_favorite]


def _index_of(catalog: Sequence[CoinRecord], coin_id: str) -> int | None:
    for i, coin in enumerate(catalog):
        if coin.id == coin_id:
            return i
    return None


def toggle_favorite(catalog: list[CoinRecord], coin_id: str) -> bool:
    """Flip the favorite flag of the coin with ``coin_id``.

    Returns False (and does nothing) when the id is not in the catalog.
    """
    index = _index_of(catalog, coin_id)
    if index is None:
        logger.debug("toggle_favorite_unknown_coin", coin_id=coin_id)
        return False

    coin = catalog[index]
    coin.is_favorite = not coin.is_favorite
    if coin.is_favorite:
        # Last in the watchlist. Removing then appending one element keeps
        # the relative order of all other records.
        catalog.append(catalog.pop(index))

    logger.debug(
        "favorite_toggled",
        coin_id=coin_id,
        symbol=coin.symbol,
        is_favorite=coin.is_favorite,
    )
    return True


def remove_from_watchlist(catalog: list[CoinRecord], coin_id: str) -> bool:
    """Un-favorite a coin. Calling it on a non-favorite or unknown id is a no-op."""
    index = _index_of(catalog, coin_id)
    if index is None or not catalog[index].is_favorite:
        return False
    return toggle_favorite(catalog, coin_id)


def _validate_move(size: int, source_indices: Iterable[int], destination: int) -> list[int]:
    sources = sorted(set(source_indices))
    if not sources:
        raise IndexOutOfRangeError("no source indices given", [], size)
    bad = [i for i in sources if i < 0 or i >= size]
    if bad:
        raise IndexOutOfRangeError(
            f"source indices {bad} out of range for {size} items", bad, size
        )
    if destination < 0 or destination > size:
        raise IndexOutOfRangeError(
            f"destination {destination} out of range for {size} items",
            [destination],
            size,
        )
    return sources


def move_items(items: Sequence[T], source_indices: Iterable[int], destination: int) -> list[T]:
    """Return a copy of ``items`` with the selected elements moved.

    The elements at ``source_indices`` keep their relative order and are
    inserted just before the element that was at ``destination`` in the
    original list (``destination == len(items)`` appends). Positions are
    resolved against the list as it was before the move.

    Raises:
        IndexOutOfRangeError: If any index is outside the list bounds.
    """
    sources = _validate_move(len(items), source_indices, destination)
    selected = set(sources)

    moved = [items[i] for i in sources]
    remaining = [item for i, item in enumerate(items) if i not in selected]
    insert_at = destination - sum(1 for i in sources if i < destination)
    return remaining[:insert_at] + moved + remaining[insert_at:]


def reorder_favorites(
    catalog: list[CoinRecord],
    source_indices: Iterable[int],
    destination: int,
) -> None:
    """Move watchlist entries and merge the result back into the catalog.

    Indices address the favorites-only ordering. On success the catalog is
    rewritten in place as non-favorites (original order) followed by the
    reordered favorites. On an invalid index nothing is modified.

    Raises:
        IndexOutOfRangeError: If an index is outside the watchlist bounds.
    """
    favorites = project(catalog)
    reordered = move_items(favorites, source_indices, destination)
    catalog[:] = non_favorites(catalog) + reordered

    logger.debug(
        "watchlist_reordered",
        order=[coin.symbol for coin in reordered],
    )


_MARKET_FIELDS = ("symbol", "name", "price", "daily_change", "image_url")


def merge_fetched(
    current: Sequence[CoinRecord],
    fresh: Sequence[CoinRecord],
    excluded: Collection[str] = frozenset(),
) -> list[CoinRecord]:
    """Merge freshly fetched coin data into the current catalog.

    A fetched record whose id is already in the catalog only refreshes the
    market fields (symbol, name, price, daily change, image) of that record;
    its favorite flag and position stay as they are. Records the fetch does
    not mention are kept, so coins added locally survive a refresh.

    Ids the catalog has never seen are appended with the flag they were
    fetched with: new non-favorites after the current records, new
    favorites last. Ids in ``excluded`` (coins the user removed) are not
    brought back. Duplicate fetched ids count once, first one wins.

    Returns a new list; ``current`` and its records are not mutated.
    """
    fresh_by_id: dict[str, CoinRecord] = {}
    for coin in fresh:
        if coin.id not in excluded:
            fresh_by_id.setdefault(coin.id, coin)

    merged: list[CoinRecord] = []
    for old in current:
        new = fresh_by_id.pop(old.id, None)
        if new is None:
            merged.append(old)
            continue
        merged.append(replace(old, **{name: getattr(new, name) for name in _MARKET_FIELDS}))

    added = list(fresh_by_id.values())
    return merged + non_favorites(added) + project(added)
