"""Pydantic schemas for the monthly net worth history."""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from decimal import Decimal

from .base import CamelModel


class HistoryPoint(CamelModel):
    date: dt.date
    net_worth: Decimal
    total_assets: Decimal
    total_debt: Decimal


class HistoricalNetWorthResult(CamelModel):
    history: list[HistoryPoint]
    display_currency: str
    # Tradeable values use today's price against each month's quantity.
    is_approximate: bool = True
    generated_at: datetime


__all__ = ["HistoryPoint", "HistoricalNetWorthResult"]
