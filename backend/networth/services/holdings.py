"""Holding-level ledger operations."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger.errors import UnknownHoldingError
from ledger.models import CostBasis
from ledger.replay import replay_lots, replay_quantity

from .sources import PortfolioSource


async def _load_ledger(source: PortfolioSource, holding_id: str, as_of: date | None):
    holding = await source.get_holding(holding_id)
    if holding is None:
        raise UnknownHoldingError(f"Holding {holding_id} not found")
    return await source.list_transactions(holding_id, as_of)


async def calculate_quantity_held(
    holding_id: str,
    source: PortfolioSource,
    as_of: date | None = None,
) -> Decimal:
    """Return units held, replaying transactions up to ``as_of`` when given."""

    transactions = await _load_ledger(source, holding_id, as_of)
    return replay_quantity(transactions, as_of)


async def calculate_cost_basis(
    holding_id: str,
    source: PortfolioSource,
    as_of: date | None = None,
) -> CostBasis:
    """Return the FIFO cost basis, open quantity and open lots for a holding."""

    transactions = await _load_ledger(source, holding_id, as_of)
    return replay_lots(transactions, as_of)


__all__ = ["calculate_quantity_held", "calculate_cost_basis"]
