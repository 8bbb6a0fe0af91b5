"""Custom exceptions for the portfolio tracker.

Every error raised by the catalog, ledger, and refresh layers lives here
so the state owner and the dashboard can catch them without importing
each other.
"""


class CoinfolioError(Exception):
    """Base exception for all portfolio tracker errors."""


class NotFoundError(CoinfolioError, KeyError):
    """Raised by strict lookups when an id is absent from its collection."""


class IndexOutOfRangeError(CoinfolioError, IndexError):
    """Raised when positional arguments fall outside the addressed sequence.

    The operation that raises it has not modified any state.
    """

    def __init__(self, message: str, indices: list[int] | None = None, size: int = 0) -> None:
        super().__init__(message)
        self.indices = indices or []
        self.size = size


class RefreshFetchError(CoinfolioError):
    """Raised when the data source fails to produce fresh coin or holding data."""
