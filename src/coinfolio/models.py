"""Shared data models for the portfolio tracker.

All monetary values and quantities use Decimal so valuation sums are exact.
Records are mutable in place; their ``id`` never changes after creation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import uuid4


def new_id() -> str:
    """Return a fresh identifier. Ids are never reused."""
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TradeSide(str, Enum):
    """Transaction direction."""

    BUY = "buy"
    SELL = "sell"


@dataclass
class CoinRecord:
    """A tracked coin in the catalog with its live price fields."""

    id: str
    symbol: str
    name: str
    price: Decimal = Decimal("0")
    daily_change: Decimal = Decimal("0")  # percent
    image_url: str | None = None
    is_favorite: bool = False

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"price must be non-negative, got {self.price}")


@dataclass
class Holding:
    """An owned quantity of a coin with its cost basis."""

    coin_name: str
    coin_symbol: str
    quantity: Decimal
    current_price: Decimal
    cost_basis: Decimal  # total paid, not per unit
    image_url: str | None = None
    is_favorite: bool = False
    daily_change: Decimal = Decimal("0")
    purchase_date: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        for name in ("quantity", "current_price", "cost_basis"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    @property
    def current_value(self) -> Decimal:
        return self.quantity * self.current_price

    @property
    def profit_loss(self) -> Decimal:
        return self.current_value - self.cost_basis

    @property
    def profit_loss_pct(self) -> Decimal:
        """Profit or loss as a percentage of cost basis (0 when nothing was paid)."""
        if self.cost_basis == 0:
            return Decimal("0")
        return self.profit_loss / self.cost_basis * Decimal("100")


@dataclass
class Transaction:
    """A buy or sell entry in the transaction log.

    ``is_manual`` distinguishes user-entered rows from ones generated by
    trade actions; only manual rows can be deleted by the user.
    """

    coin_symbol: str
    side: TradeSide
    quantity: Decimal
    price_per_unit: Decimal
    is_manual: bool = False
    timestamp: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=new_id)

    @property
    def total_value(self) -> Decimal:
        return self.quantity * self.price_per_unit
