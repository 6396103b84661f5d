"""Chronological ledger replay: quantity held and FIFO cost basis."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, getcontext
from typing import Iterable, List, Sequence

from .models import CostBasis, Lot, Transaction, TransactionAction

getcontext().prec = 28

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _ordered(transactions: Iterable[Transaction], as_of: date | None) -> List[Transaction]:
    # sorted() is stable, so same-day rows keep their stored order
    selected = [tx for tx in transactions if as_of is None or tx.date <= as_of]
    return sorted(selected, key=lambda tx: tx.date)


def replay_quantity(transactions: Sequence[Transaction], as_of: date | None = None) -> Decimal:
    """Fold a ledger into the number of units held.

    BUY adds, SELL subtracts, SPLIT multiplies the running total by the ratio
    stored in ``quantity`` and DIVIDEND leaves it untouched. A zero split ratio
    is ignored, as in :func:`replay_lots`. A SELL larger than the position is
    accepted and may leave the total negative.
    """

    quantity = ZERO
    for tx in _ordered(transactions, as_of):
        action = tx.normalized_action()
        if action is TransactionAction.BUY:
            quantity += tx.quantity
        elif action is TransactionAction.SELL:
            quantity -= tx.quantity
            if quantity < 0:
                logger.warning("SELL on %s leaves a negative position of %s", tx.date, quantity)
        elif action is TransactionAction.SPLIT:
            if tx.quantity == 0:
                logger.warning("Ignoring SPLIT on %s with a zero ratio", tx.date)
                continue
            quantity *= tx.quantity
    return quantity


def _consume_fifo(lots: List[Lot], quantity: Decimal) -> Decimal:
    """Consume ``quantity`` from the oldest lots; return what could not be matched."""

    remaining = quantity
    for lot in lots:
        if remaining <= 0:
            break
        if lot.remaining_quantity <= 0:
            continue
        consumed = min(lot.remaining_quantity, remaining)
        lot.remaining_quantity -= consumed
        remaining -= consumed
    return max(remaining, ZERO)


def _apply_split(lots: List[Lot], ratio: Decimal) -> None:
    if ratio == 0:
        logger.warning("Ignoring SPLIT with a zero ratio")
        return
    for lot in lots:
        lot.quantity *= ratio
        lot.remaining_quantity *= ratio
        lot.unit_price /= ratio


def replay_lots(transactions: Sequence[Transaction], as_of: date | None = None) -> CostBasis:
    """Replay a ledger into FIFO lots and return the remaining cost basis.

    Splits restate every lot seen so far, consumed or not, so quantity and
    unit price move inversely and each lot keeps its total value. A SELL
    that exceeds the open lots consumes what exists; the shortfall is
    reported in ``unmatched_sell_quantity`` instead of raising.
    """

    lots: List[Lot] = []
    unmatched = ZERO
    for tx in _ordered(transactions, as_of):
        action = tx.normalized_action()
        if action is TransactionAction.BUY:
            lots.append(
                Lot(
                    date=tx.date,
                    quantity=tx.quantity,
                    unit_price=tx.unit_price,
                    remaining_quantity=tx.quantity,
                )
            )
        elif action is TransactionAction.SELL:
            shortfall = _consume_fifo(lots, tx.quantity)
            if shortfall > 0:
                logger.warning(
                    "SELL on %s exceeds open lots by %s units; cost basis may be understated",
                    tx.date,
                    shortfall,
                )
                unmatched += shortfall
        elif action is TransactionAction.SPLIT:
            _apply_split(lots, tx.quantity)

    open_lots = [lot for lot in lots if lot.remaining_quantity > 0]
    return CostBasis(
        cost_basis=sum((lot.remaining_cost for lot in open_lots), ZERO),
        quantity=sum((lot.remaining_quantity for lot in open_lots), ZERO),
        lots=open_lots,
        unmatched_sell_quantity=unmatched,
    )


__all__ = ["replay_quantity", "replay_lots"]
