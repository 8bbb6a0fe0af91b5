"""Coinfolio -- crypto watchlist and holdings tracker with periodic refresh."""

__version__ = "0.1.0"
