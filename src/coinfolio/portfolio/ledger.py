"""Holdings ledger and portfolio valuation.

Valuation is never cached: every read of ``total_value`` folds over the
current holdings, so a price or quantity change is visible immediately.

The ledger's favorite flag is independent of the catalog's. The catalog
models coins the user tracks; the ledger models coins the user owns.
"""

from collections.abc import Iterable
from copy import copy
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from coinfolio.exceptions import IndexOutOfRangeError
from coinfolio.logging import get_logger
from coinfolio.models import Holding

logger = get_logger(__name__)

_MARKET_FIELDS = ("coin_name", "current_price", "daily_change", "image_url")


class HoldingsLedger:
    """Ordered collection of holdings with derived valuation.

    Args:
        holdings: Initial holdings, kept in the given order.
    """

    def __init__(self, holdings: Iterable[Holding] = ()) -> None:
        self._holdings: list[Holding] = list(holdings)
        # Ids removed by the user; a later fetch must not bring them back.
        self._removed_ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._holdings)

    def holdings(self) -> list[Holding]:
        """Return copies of all holdings in ledger order."""
        return [copy(h) for h in self._holdings]

    def get(self, holding_id: str) -> Holding | None:
        for h in self._holdings:
            if h.id == holding_id:
                return copy(h)
        return None

    def add_holding(
        self,
        coin_name: str,
        coin_symbol: str,
        quantity: Decimal,
        current_price: Decimal,
        cost_basis: Decimal,
        image_url: str | None = None,
        purchase_date: datetime | None = None,
        is_favorite: bool = False,
        daily_change: Decimal = Decimal("0"),
    ) -> Holding:
        """Create a holding with a fresh id and append it to the ledger.

        Returns:
            A copy of the new holding.

        Raises:
            ValueError: If quantity, price, or cost basis is negative.
        """
        kwargs = {}
        if purchase_date is not None:
            kwargs["purchase_date"] = purchase_date
        holding = Holding(
            coin_name=coin_name,
            coin_symbol=coin_symbol,
            quantity=quantity,
            current_price=current_price,
            cost_basis=cost_basis,
            image_url=image_url,
            is_favorite=is_favorite,
            daily_change=daily_change,
            **kwargs,
        )
        self._holdings.append(holding)

        logger.info(
            "holding_added",
            holding_id=holding.id,
            symbol=coin_symbol,
            quantity=str(quantity),
            cost_basis=str(cost_basis),
        )
        return copy(holding)

    def remove_holdings(self, indices: Iterable[int]) -> list[Holding]:
        """Remove the holdings at ``indices`` in a single pass.

        Positions refer to the ledger as it is before the call, so removing
        {0, 2} from [A, B, C] leaves [B]. Repeated indices count once.

        Returns:
            The removed holdings, in ledger order.

        Raises:
            IndexOutOfRangeError: If any index is outside the ledger. Nothing
                is removed in that case.
        """
        targets = set(indices)
        size = len(self._holdings)
        bad = sorted(i for i in targets if i < 0 or i >= size)
        if bad:
            raise IndexOutOfRangeError(
                f"holding indices {bad} out of range for {size} holdings", bad, size
            )

        removed = [h for i, h in enumerate(self._holdings) if i in targets]
        self._holdings = [h for i, h in enumerate(self._holdings) if i not in targets]
        self._removed_ids.update(h.id for h in removed)

        if removed:
            logger.info(
                "holdings_removed",
                holding_ids=[h.id for h in removed],
                remaining=len(self._holdings),
            )
        return removed

    def remove_holding(self, holding_id: str) -> bool:
        """Remove one holding by id. Returns False when it was not present."""
        for i, h in enumerate(self._holdings):
            if h.id == holding_id:
                del self._holdings[i]
                self._removed_ids.add(holding_id)
                logger.info("holdings_removed", holding_ids=[holding_id], remaining=len(self._holdings))
                return True
        return False

    def toggle_favorite(self, holding_id: str) -> bool:
        """Flip a holding's favorite flag. Unknown ids are a silent no-op."""
        for h in self._holdings:
            if h.id == holding_id:
                h.is_favorite = not h.is_favorite
                logger.debug("holding_favorite_toggled", holding_id=holding_id, is_favorite=h.is_favorite)
                return True
        return False

    def merge_from_fetch(self, fresh: Iterable[Holding]) -> None:
        """Merge fetched holdings by id.

        A fetched holding with a known id only refreshes that holding's
        market data (name, price, daily change, image). Quantity, cost
        basis, purchase date and the favorite flag stay as the user left
        them. Holdings missing from the fetch are kept, so locally added
        holdings survive. Unknown ids are appended unless the user removed
        that holding earlier.
        """
        fresh_by_id: dict[str, Holding] = {}
        for h in fresh:
            if h.id not in self._removed_ids:
                fresh_by_id.setdefault(h.id, h)

        merged: list[Holding] = []
        updated = 0
        for old in self._holdings:
            new = fresh_by_id.pop(old.id, None)
            if new is None:
                merged.append(old)
                continue
            merged.append(replace(old, **{name: getattr(new, name) for name in _MARKET_FIELDS}))
            updated += 1

        added = list(fresh_by_id.values())
        self._holdings = merged + added
        logger.info(
            "ledger_refreshed",
            updated=updated,
            added=len(added),
            kept=len(merged) - updated,
        )

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    @property
    def total_value(self) -> Decimal:
        """Sum of quantity * current price over all holdings."""
        return sum((h.current_value for h in self._holdings), Decimal("0"))

    @property
    def total_cost_basis(self) -> Decimal:
        return sum((h.cost_basis for h in self._holdings), Decimal("0"))

    @property
    def total_profit_loss(self) -> Decimal:
        return self.total_value - self.total_cost_basis

    def get_portfolio_summary(self) -> dict:
        """Aggregate valuation across all holdings.

        Returns:
            Dict with keys: total_value, total_cost_basis, total_profit_loss,
            total_profit_loss_pct, daily_change_pct, holdings_count.
            ``daily_change_pct`` is the value-weighted mean of the holdings'
            daily change.
        """
        total_value = self.total_value
        total_cost = self.total_cost_basis
        profit_loss = total_value - total_cost

        if total_cost > 0:
            profit_loss_pct = profit_loss / total_cost * Decimal("100")
        else:
            profit_loss_pct = Decimal("0")

        if total_value > 0:
            daily_change_pct = sum(
                (h.current_value * h.daily_change for h in self._holdings),
                Decimal("0"),
            ) / total_value
        else:
            daily_change_pct = Decimal("0")

        return {
            "total_value": total_value,
            "total_cost_basis": total_cost,
            "total_profit_loss": profit_loss,
            "total_profit_loss_pct": profit_loss_pct,
            "daily_change_pct": daily_change_pct,
            "holdings_count": len(self._holdings),
        }
