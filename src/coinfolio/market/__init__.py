"""Market layer -- the coin catalog."""

from coinfolio.market.catalog import CoinCatalog

__all__ = ["CoinCatalog"]
