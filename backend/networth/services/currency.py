"""Display-currency resolution and per-request rate tables."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from ledger.errors import UnsupportedCurrencyPairError
from ledger.fx import ExchangeRates

from networth.config import AppSettings

from .sources import PortfolioSource

logger = logging.getLogger(__name__)


def resolve_display_currency(settings: AppSettings, display_currency: str | None) -> str:
    """Return the normalised display currency, rejecting unsupported codes."""

    currency = (display_currency or settings.display_currency).strip().upper()
    supported = {code.upper() for code in settings.supported_currencies}
    if currency not in supported:
        raise UnsupportedCurrencyPairError(currency, currency)
    return currency


async def load_rates(
    source: PortfolioSource,
    currencies: Iterable[str],
    display_currency: str,
    settings: AppSettings,
) -> ExchangeRates:
    """Fetch each ``X/display`` rate needed for one computation, once.

    Unsupported currencies and missing rates are configuration errors and
    propagate to the caller.
    """

    target = display_currency.upper()
    supported = {code.upper() for code in settings.supported_currencies}
    needed = sorted({c.strip().upper() for c in currencies if c} - {target})
    for code in needed:
        if code not in supported:
            raise UnsupportedCurrencyPairError(code, target)

    fetched = await asyncio.gather(*(source.get_exchange_rate(code, target) for code in needed))
    rates = ExchangeRates()
    for code, rate in zip(needed, fetched):
        rates.set(code, target, rate)
    if needed:
        logger.debug("Loaded %d exchange rates into %s", len(needed), target)
    return rates


__all__ = ["resolve_display_currency", "load_rates"]
