"""Super fund investment returns.

Investment returns separate market growth from money paid in::

    returns = (new_balance - old_balance) - employer_contrib - employee_contrib
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger.models import HoldingType

from .sources import PortfolioSource


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def previous_month(day: date) -> date:
    start = first_of_month(day)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


async def calculate_investment_returns(
    holding_id: str,
    user_id: str,
    from_date: date,
    to_date: date,
    source: PortfolioSource,
) -> Decimal | None:
    """Return investment returns between two monthly snapshots.

    ``None`` means the figure cannot be computed: the holding is unknown, not
    owned by ``user_id``, not a super fund, or a snapshot is missing on either
    date. A month without a contribution record counts as zero contributions.
    """

    holding = await source.get_holding(holding_id)
    if holding is None or holding.user_id != user_id:
        return None
    if HoldingType(holding.type) is not HoldingType.SUPER:
        return None

    from_month = first_of_month(from_date)
    to_month = first_of_month(to_date)
    old = await source.latest_snapshot(holding_id, from_month)
    if old is None or old.date != from_month:
        return None
    new = await source.latest_snapshot(holding_id, to_month)
    if new is None or new.date != to_month:
        return None

    contribution = await source.get_contribution(holding_id, to_month)
    contributed = contribution.total if contribution is not None else Decimal("0")
    return new.balance - old.balance - contributed


async def calculate_monthly_investment_returns(
    holding_id: str,
    user_id: str,
    month: date,
    source: PortfolioSource,
) -> Decimal | None:
    """Investment returns for ``month`` compared with the month before."""

    return await calculate_investment_returns(
        holding_id, user_id, previous_month(month), first_of_month(month), source
    )


__all__ = [
    "calculate_investment_returns",
    "calculate_monthly_investment_returns",
    "first_of_month",
    "previous_month",
]
