"""Pydantic schema exports."""

from .history import HistoricalNetWorthResult, HistoryPoint
from .net_worth import (
    AssetBreakdownResult,
    AssetCategory,
    AssetTypeBreakdown,
    CurrencyExposureItem,
    CurrencyExposureResult,
    HoldingShare,
    HoldingValue,
    NetWorthResult,
    StaleHolding,
)
from .performance import Performer, TopPerformersResult

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
    "Performer",
    "TopPerformersResult",
    "HistoryPoint",
    "HistoricalNetWorthResult",
]
