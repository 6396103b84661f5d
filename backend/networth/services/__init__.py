"""Valuation services."""

from .history import calculate_historical_net_worth
from .holdings import calculate_cost_basis, calculate_quantity_held
from .net_worth import (
    calculate_asset_breakdown,
    calculate_currency_exposure,
    calculate_net_worth,
)
from .performers import get_top_performers
from .sources import InMemoryPortfolioSource, PortfolioSource
from .super_returns import calculate_investment_returns, calculate_monthly_investment_returns

__all__ = [
    "PortfolioSource",
    "InMemoryPortfolioSource",
    "calculate_quantity_held",
    "calculate_cost_basis",
    "calculate_net_worth",
    "calculate_asset_breakdown",
    "calculate_currency_exposure",
    "get_top_performers",
    "calculate_historical_net_worth",
    "calculate_investment_returns",
    "calculate_monthly_investment_returns",
]
