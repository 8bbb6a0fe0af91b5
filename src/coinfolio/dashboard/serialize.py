"""JSON conversion for portfolio records."""

from dataclasses import asdict, is_dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from coinfolio.models import Holding, Transaction


def to_jsonable(obj: Any) -> Any:
    """Recursively convert Decimals to strings and datetimes to ISO strings."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return obj


def holding_to_dict(holding: Holding) -> dict:
    data = to_jsonable(holding)
    data["current_value"] = str(holding.current_value)
    data["profit_loss"] = str(holding.profit_loss)
    data["profit_loss_pct"] = str(holding.profit_loss_pct)
    return data


def transaction_to_dict(tx: Transaction) -> dict:
    data = to_jsonable(tx)
    data["total_value"] = str(tx.total_value)
    return data
