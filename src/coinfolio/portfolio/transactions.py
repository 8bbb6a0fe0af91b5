"""Ordered transaction log.

Trade actions append system-generated rows; the user may add and delete
manual rows. Deletion through delete_manual() never touches a
system-generated row, even one that shares the id.
"""

from copy import copy

from coinfolio.logging import get_logger
from coinfolio.models import Transaction

logger = get_logger(__name__)


class TransactionLog:
    """Append-only log of transactions, except for manual deletions."""

    def __init__(self, transactions: list[Transaction] | None = None) -> None:
        self._transactions: list[Transaction] = list(transactions or [])

    def __len__(self) -> int:
        return len(self._transactions)

    def transactions(self) -> list[Transaction]:
        """Return copies of all transactions in log order."""
        return [copy(tx) for tx in self._transactions]

    def for_coin(self, coin_symbol: str) -> list[Transaction]:
        return [copy(tx) for tx in self._transactions if tx.coin_symbol == coin_symbol]

    def append(self, tx: Transaction) -> None:
        self._transactions.append(tx)
        logger.debug(
            "transaction_recorded",
            tx_id=tx.id,
            symbol=tx.coin_symbol,
            side=tx.side.value,
            is_manual=tx.is_manual,
        )

    def delete_manual(self, tx: Transaction) -> bool:
        """Remove the first manual transaction whose id matches ``tx.id``.

        Returns False when no manual row with that id exists.
        """
        for i, entry in enumerate(self._transactions):
            if entry.id == tx.id and entry.is_manual:
                del self._transactions[i]
                logger.info("manual_transaction_deleted", tx_id=tx.id)
                return True
        return False
