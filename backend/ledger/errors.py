"""Exceptions raised by the valuation engine."""

from __future__ import annotations


class ValuationError(Exception):
    """Base class for engine errors."""


class CurrencyError(ValuationError, ValueError):
    """Raised for currency configuration problems."""


class UnsupportedCurrencyPairError(CurrencyError):
    """Raised when no rate is configured between two currencies."""

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"Unsupported currency pair: {from_currency}/{to_currency}")


class MissingExchangeRateError(CurrencyError):
    """Raised when a rate source has no rate stored for a supported pair."""

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"Missing exchange rate for {from_currency}->{to_currency}")


class UnknownHoldingError(ValuationError, LookupError):
    """Raised when a holding id cannot be resolved."""


__all__ = [
    "ValuationError",
    "CurrencyError",
    "UnsupportedCurrencyPairError",
    "MissingExchangeRateError",
    "UnknownHoldingError",
]
