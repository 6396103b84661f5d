"""Database model exports."""

from .portfolio import (
    HOLDING_TYPES,
    TRANSACTION_ACTIONS,
    Contribution,
    ExchangeRate,
    Holding,
    PriceCache,
    Snapshot,
    Transaction,
)

__all__ = [
    "Holding",
    "Transaction",
    "Snapshot",
    "Contribution",
    "PriceCache",
    "ExchangeRate",
    "HOLDING_TYPES",
    "TRANSACTION_ACTIONS",
]
