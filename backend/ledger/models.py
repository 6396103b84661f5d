"""Domain models used by the valuation engine."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


class HoldingType(str, enum.Enum):
    STOCK = "stock"
    ETF = "etf"
    CRYPTO = "crypto"
    SUPER = "super"
    CASH = "cash"
    DEBT = "debt"


class TransactionAction(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    SPLIT = "SPLIT"


class StaleReason(str, enum.Enum):
    PRICE_EXPIRED = "price_expired"
    NO_PRICE = "no_price"
    SNAPSHOT_OLD = "snapshot_old"
    NO_SNAPSHOT = "no_snapshot"


TRADEABLE_TYPES = (HoldingType.STOCK, HoldingType.ETF, HoldingType.CRYPTO)
SNAPSHOT_TYPES = (HoldingType.SUPER, HoldingType.CASH, HoldingType.DEBT)
ASSET_TYPE_ORDER = (
    HoldingType.STOCK,
    HoldingType.ETF,
    HoldingType.CRYPTO,
    HoldingType.SUPER,
    HoldingType.CASH,
)

HOLDING_TYPE_LABELS = {
    HoldingType.STOCK: "Stocks",
    HoldingType.ETF: "ETFs",
    HoldingType.CRYPTO: "Crypto",
    HoldingType.SUPER: "Superannuation",
    HoldingType.CASH: "Cash",
    HoldingType.DEBT: "Debt",
}


@dataclass(frozen=True)
class Holding:
    """A named financial position owned by a user."""

    id: str
    user_id: str
    name: str
    type: HoldingType
    currency: str
    symbol: Optional[str] = None
    is_active: bool = True
    deleted_at: Optional[datetime] = None

    @property
    def is_tradeable(self) -> bool:
        return HoldingType(self.type) in TRADEABLE_TYPES

    @property
    def is_debt(self) -> bool:
        return HoldingType(self.type) is HoldingType.DEBT


@dataclass(frozen=True)
class Transaction:
    """A ledger entry; for SPLIT the quantity holds the split ratio."""

    date: date
    action: TransactionAction
    quantity: Decimal
    unit_price: Decimal = Decimal("0")
    fees: Decimal = Decimal("0")

    def normalized_action(self) -> TransactionAction:
        """Return the action as an enum member regardless of how it was stored."""

        return TransactionAction(str(getattr(self.action, "value", self.action)).upper())


@dataclass
class Lot:
    """One BUY tranche, tracked while FIFO sells consume it."""

    date: date
    quantity: Decimal
    unit_price: Decimal
    remaining_quantity: Decimal

    @property
    def remaining_cost(self) -> Decimal:
        return self.remaining_quantity * self.unit_price


@dataclass
class CostBasis:
    """Result of a FIFO lot replay."""

    cost_basis: Decimal
    quantity: Decimal
    lots: List[Lot] = field(default_factory=list)
    unmatched_sell_quantity: Decimal = Decimal("0")


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time balance for super, cash and debt holdings."""

    date: date
    balance: Decimal
    currency: str


@dataclass(frozen=True)
class CachedPrice:
    """Last known market price for a symbol."""

    symbol: str
    price: Decimal
    currency: str
    fetched_at: datetime
    change_percent: Optional[Decimal] = None
    change_absolute: Optional[Decimal] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class Contribution:
    """Super fund contributions recorded for a month."""

    date: date
    employer_contrib: Decimal = Decimal("0")
    employee_contrib: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.employer_contrib + self.employee_contrib


__all__ = [
    "HoldingType",
    "TransactionAction",
    "StaleReason",
    "TRADEABLE_TYPES",
    "SNAPSHOT_TYPES",
    "ASSET_TYPE_ORDER",
    "HOLDING_TYPE_LABELS",
    "Holding",
    "Transaction",
    "Lot",
    "CostBasis",
    "Snapshot",
    "CachedPrice",
    "Contribution",
]
