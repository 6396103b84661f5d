"""Pydantic schemas for gain/loss rankings."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ledger.models import HoldingType

from .base import CamelModel


class Performer(CamelModel):
    holding_id: str
    name: str
    symbol: str
    type: HoldingType
    gain_loss: Decimal
    gain_loss_percent: Decimal
    current_value: Decimal
    cost_basis: Decimal


class TopPerformersResult(CamelModel):
    gainers: list[Performer]
    losers: list[Performer]
    display_currency: str
    calculated_at: datetime


__all__ = ["Performer", "TopPerformersResult"]
