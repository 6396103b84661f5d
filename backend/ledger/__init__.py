"""Core ledger math for the net worth engine."""

from .errors import (
    CurrencyError,
    MissingExchangeRateError,
    UnknownHoldingError,
    UnsupportedCurrencyPairError,
    ValuationError,
)
from .fx import ExchangeRates, convert
from .models import (
    CachedPrice,
    Contribution,
    CostBasis,
    Holding,
    HoldingType,
    Lot,
    Snapshot,
    StaleReason,
    Transaction,
    TransactionAction,
)
from .replay import replay_lots, replay_quantity

__all__ = [
    "CachedPrice",
    "Contribution",
    "CostBasis",
    "Holding",
    "HoldingType",
    "Lot",
    "Snapshot",
    "StaleReason",
    "Transaction",
    "TransactionAction",
    "ExchangeRates",
    "convert",
    "replay_lots",
    "replay_quantity",
    "ValuationError",
    "CurrencyError",
    "UnsupportedCurrencyPairError",
    "MissingExchangeRateError",
    "UnknownHoldingError",
]
