"""Watchlist layer -- favorites projection and order-preserving merges."""

from coinfolio.watchlist.projection import (
    merge_fetched,
    move_items,
    non_favorites,
    project,
    remove_from_watchlist,
    reorder_favorites,
    toggle_favorite,
)

__all__ = [
    "merge_fetched",
    "move_items",
    "non_favorites",
    "project",
    "remove_from_watchlist",
    "reorder_favorites",
    "toggle_favorite",
]
