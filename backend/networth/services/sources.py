"""Gateway contracts consumed by the valuation services.

The engine never talks to storage, price caches or rate providers directly;
it calls a :class:`PortfolioSource`. :class:`InMemoryPortfolioSource` backs
tests and scripts, while :mod:`networth.services.storage` reads the SQL
tables.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Awaitable, Dict, List, Protocol, TypeVar

from ledger.errors import MissingExchangeRateError
from ledger.fx import pair_key
from ledger.models import CachedPrice, Contribution, Holding, Snapshot, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PortfolioSource(Protocol):
    """Ledger, snapshot, price and rate lookups for one deployment."""

    async def list_active_holdings(self, user_id: str) -> list[Holding]:
        ...

    async def get_holding(self, holding_id: str) -> Holding | None:
        ...

    async def list_transactions(
        self, holding_id: str, as_of: date | None = None
    ) -> list[Transaction]:
        """Return non-deleted transactions ordered by date, then insertion order."""
        ...

    async def latest_snapshot(
        self, holding_id: str, as_of: date | None = None
    ) -> Snapshot | None:
        ...

    async def get_contribution(self, holding_id: str, month: date) -> Contribution | None:
        ...

    async def get_cached_price(self, symbol: str) -> CachedPrice | None:
        ...

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        ...


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC; naive values are taken to be UTC already."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


async def with_timeout(call: Awaitable[T], timeout: float, *, what: str) -> T | None:
    """Await a gateway call, returning ``None`` if it does not finish in time.

    Only timeouts are absorbed; any other gateway error propagates.
    """

    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Timed out after %.1fs waiting for %s", timeout, what)
        return None


@dataclass
class InMemoryPortfolioSource:
    """Dictionary-backed source for tests and examples.

    Transactions and snapshots are kept in insertion order per holding;
    rows can be soft-deleted through ``deleted_transactions`` and
    ``deleted_snapshots`` index sets.
    """

    holdings: Dict[str, Holding] = field(default_factory=dict)
    transactions: Dict[str, List[Transaction]] = field(default_factory=dict)
    snapshots: Dict[str, List[Snapshot]] = field(default_factory=dict)
    contributions: Dict[str, List[Contribution]] = field(default_factory=dict)
    prices: Dict[str, CachedPrice] = field(default_factory=dict)
    rates: Dict[str, Decimal] = field(default_factory=dict)
    deleted_transactions: Dict[str, set] = field(default_factory=dict)
    deleted_snapshots: Dict[str, set] = field(default_factory=dict)

    def add_holding(self, holding: Holding) -> Holding:
        if holding.id in self.holdings:
            raise ValueError(f"Holding {holding.id} already exists")
        self.holdings[holding.id] = holding
        return holding

    def add_transaction(self, holding_id: str, transaction: Transaction) -> int:
        rows = self.transactions.setdefault(holding_id, [])
        rows.append(transaction)
        return len(rows) - 1

    def delete_transaction(self, holding_id: str, index: int) -> None:
        self.deleted_transactions.setdefault(holding_id, set()).add(index)

    def add_snapshot(self, holding_id: str, snapshot: Snapshot) -> int:
        rows = self.snapshots.setdefault(holding_id, [])
        live = self._live_snapshots(holding_id)
        if any(existing.date == snapshot.date for existing in live):
            raise ValueError(f"Snapshot for {holding_id} on {snapshot.date} already exists")
        rows.append(snapshot)
        return len(rows) - 1

    def delete_snapshot(self, holding_id: str, index: int) -> None:
        self.deleted_snapshots.setdefault(holding_id, set()).add(index)

    def add_contribution(self, holding_id: str, contribution: Contribution) -> None:
        self.contributions.setdefault(holding_id, []).append(contribution)

    def set_price(self, price: CachedPrice) -> None:
        self.prices[price.symbol] = price

    def set_rate(self, from_currency: str, to_currency: str, rate: Decimal | str) -> None:
        self.rates[pair_key(from_currency, to_currency)] = Decimal(str(rate))

    def _live_snapshots(self, holding_id: str) -> list[Snapshot]:
        deleted = self.deleted_snapshots.get(holding_id, set())
        return [
            snap for idx, snap in enumerate(self.snapshots.get(holding_id, [])) if idx not in deleted
        ]

    async def list_active_holdings(self, user_id: str) -> list[Holding]:
        return [
            h
            for h in self.holdings.values()
            if h.user_id == user_id and h.is_active and h.deleted_at is None
        ]

    async def get_holding(self, holding_id: str) -> Holding | None:
        holding = self.holdings.get(holding_id)
        if holding is None or holding.deleted_at is not None:
            return None
        return holding

    async def list_transactions(
        self, holding_id: str, as_of: date | None = None
    ) -> list[Transaction]:
        deleted = self.deleted_transactions.get(holding_id, set())
        rows = [
            tx
            for idx, tx in enumerate(self.transactions.get(holding_id, []))
            if idx not in deleted and (as_of is None or tx.date <= as_of)
        ]
        return sorted(rows, key=lambda tx: tx.date)

    async def latest_snapshot(
        self, holding_id: str, as_of: date | None = None
    ) -> Snapshot | None:
        candidates = [
            snap for snap in self._live_snapshots(holding_id) if as_of is None or snap.date <= as_of
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda snap: snap.date)

    async def get_contribution(self, holding_id: str, month: date) -> Contribution | None:
        for contribution in self.contributions.get(holding_id, []):
            if contribution.date == month:
                return contribution
        return None

    async def get_cached_price(self, symbol: str) -> CachedPrice | None:
        return self.prices.get(symbol)

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        if from_currency.upper() == to_currency.upper():
            return Decimal("1")
        key = pair_key(from_currency, to_currency)
        if key not in self.rates:
            raise MissingExchangeRateError(from_currency.upper(), to_currency.upper())
        return self.rates[key]


__all__ = ["PortfolioSource", "InMemoryPortfolioSource", "with_timeout", "as_utc"]
