"""Pydantic schemas for current net worth, breakdown and exposure."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ledger.models import HoldingType, StaleReason

from .base import CamelModel


class HoldingValue(CamelModel):
    id: str
    name: str
    symbol: str | None = None
    value: Decimal = Field(..., description="Value in the display currency")
    currency: str = Field(..., description="Native currency of the value")
    value_native: Decimal
    quantity: Decimal | None = None
    price: Decimal | None = None


class AssetTypeBreakdown(CamelModel):
    type: HoldingType
    label: str
    total_value: Decimal
    count: int
    holdings: list[HoldingValue]


class StaleHolding(CamelModel):
    holding_id: str
    name: str
    type: HoldingType
    last_updated: datetime | date | None = None
    reason: StaleReason


class NetWorthResult(CamelModel):
    net_worth: Decimal
    total_assets: Decimal
    total_debt: Decimal
    breakdown: list[AssetTypeBreakdown]
    debt_breakdown: list[HoldingValue]
    stale_holdings: list[StaleHolding]
    has_stale_data: bool
    display_currency: str
    rates_used: dict[str, Decimal]
    calculated_at: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "netWorth": "295",
                "totalAssets": "300",
                "totalDebt": "5",
                "breakdown": [
                    {
                        "type": "stock",
                        "label": "Stocks",
                        "totalValue": "300",
                        "count": 1,
                        "holdings": [],
                    }
                ],
                "debtBreakdown": [],
                "staleHoldings": [],
                "hasStaleData": False,
                "displayCurrency": "AUD",
                "ratesUsed": {"USD/AUD": "1.53"},
                "calculatedAt": "2024-09-10T10:00:00+00:00",
            }
        }


class HoldingShare(HoldingValue):
    percentage: Decimal = Field(..., description="Share of the category total, 0-100")


class AssetCategory(CamelModel):
    type: HoldingType
    label: str
    total_value: Decimal
    percentage: Decimal
    count: int
    holdings: list[HoldingShare]


class AssetBreakdownResult(CamelModel):
    assets: list[AssetCategory]
    debt: Optional[AssetCategory] = None
    total_assets: Decimal
    total_debt: Decimal
    display_currency: str
    rates_used: dict[str, Decimal]
    calculated_at: datetime


class CurrencyExposureItem(CamelModel):
    currency: str
    value: Decimal
    value_native: Decimal
    percentage: Decimal
    count: int


class CurrencyExposureResult(CamelModel):
    exposure: list[CurrencyExposureItem]
    total_assets: Decimal
    display_currency: str
    rates_used: dict[str, Decimal]
    calculated_at: datetime


__all__ = [
    "HoldingValue",
    "AssetTypeBreakdown",
    "StaleHolding",
    "NetWorthResult",
    "HoldingShare",
    "AssetCategory",
    "AssetBreakdownResult",
    "CurrencyExposureItem",
    "CurrencyExposureResult",
]
