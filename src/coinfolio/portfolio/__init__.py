"""Portfolio layer -- holdings ledger, valuation, and the transaction log."""

from coinfolio.portfolio.ledger import HoldingsLedger
from coinfolio.portfolio.transactions import TransactionLog

__all__ = ["HoldingsLedger", "TransactionLog"]
