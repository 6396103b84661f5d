"""Monthly net worth history for charting.

Each point is the state at a month end. Snapshot holdings carry their most
recent balance forward. Tradeable holdings use the quantity held at that month
end multiplied by *today's* cached price, because historical prices are not
retained. Tradeable history is therefore an estimate of past value, not a
record of it, and results are flagged ``is_approximate``.
"""

from __future__ import annotations

import asyncio
import calendar
import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from opentelemetry import trace

from ledger.fx import convert
from ledger.models import CachedPrice, Holding, Snapshot, Transaction
from ledger.replay import replay_quantity

from networth.config import AppSettings, get_settings
from networth.schemas import HistoricalNetWorthResult, HistoryPoint

from .currency import load_rates, resolve_display_currency
from .sources import PortfolioSource, as_utc, with_timeout

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ZERO = Decimal("0")


def month_ends(today: date, months: int) -> list[date]:
    """Return the last calendar day of each of the last ``months`` months, oldest first."""

    ends: list[date] = []
    for offset in range(months - 1, -1, -1):
        year, month_index = divmod(today.year * 12 + today.month - 1 - offset, 12)
        month = month_index + 1
        ends.append(date(year, month, calendar.monthrange(year, month)[1]))
    return ends


def clamp_months(months: int | None, settings: AppSettings) -> int:
    if months is None:
        return settings.history_default_months
    if months < 1:
        raise ValueError("months must be a positive integer")
    return min(months, settings.history_max_months)


async def _prefetch_prices(
    holdings: list[Holding],
    source: PortfolioSource,
    settings: AppSettings,
) -> dict[str, CachedPrice | None]:
    symbols = sorted({h.symbol for h in holdings if h.symbol})
    prices = await asyncio.gather(
        *(
            with_timeout(
                source.get_cached_price(symbol),
                settings.gateway_timeout_seconds,
                what=f"price of {symbol}",
            )
            for symbol in symbols
        )
    )
    return dict(zip(symbols, prices))


async def _snapshot_series(
    holding: Holding,
    ends: list[date],
    source: PortfolioSource,
    settings: AppSettings,
) -> list[Snapshot | None]:
    return list(
        await asyncio.gather(
            *(
                with_timeout(
                    source.latest_snapshot(holding.id, end),
                    settings.gateway_timeout_seconds,
                    what=f"snapshot of holding {holding.id} as of {end}",
                )
                for end in ends
            )
        )
    )


async def calculate_historical_net_worth(
    user_id: str,
    source: PortfolioSource,
    months: int | None = None,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> HistoricalNetWorthResult:
    """Calculate month-end net worth for the last ``months`` months."""

    settings = settings or get_settings()
    months = clamp_months(months, settings)
    display = resolve_display_currency(settings, display_currency)
    generated_at = as_utc(now or datetime.now(timezone.utc))
    ends = month_ends(generated_at.date(), months)

    with tracer.start_as_current_span("networth.calculate_historical_net_worth") as span:
        span.set_attribute("networth.months", months)
        holdings = await source.list_active_holdings(user_id)
        tradeable = [h for h in holdings if h.is_tradeable]
        balances = [h for h in holdings if not h.is_tradeable]

        ledgers: list[list[Transaction]] = list(
            await asyncio.gather(*(source.list_transactions(h.id) for h in tradeable))
        )
        prices = await _prefetch_prices(tradeable, source, settings)
        series: list[list[Snapshot | None]] = list(
            await asyncio.gather(*(_snapshot_series(h, ends, source, settings) for h in balances))
        )

        currencies = {p.currency for p in prices.values() if p is not None}
        currencies |= {snap.currency for row in series for snap in row if snap is not None}
        rates = await load_rates(source, currencies, display, settings)

        history: list[HistoryPoint] = []
        for index, end in enumerate(ends):
            total_assets = ZERO
            total_debt = ZERO
            for holding, transactions in zip(tradeable, ledgers):
                price = prices.get(holding.symbol) if holding.symbol else None
                if price is None:
                    continue
                quantity = replay_quantity(transactions, as_of=end)
                if quantity == 0:
                    continue
                total_assets += convert(quantity * price.price, price.currency, display, rates)
            for holding, snapshots in zip(balances, series):
                snapshot = snapshots[index]
                if snapshot is None:
                    continue
                value = convert(snapshot.balance, snapshot.currency, display, rates)
                if holding.is_debt:
                    total_debt += value
                else:
                    total_assets += value
            history.append(
                HistoryPoint(
                    date=end,
                    net_worth=total_assets - total_debt,
                    total_assets=total_assets,
                    total_debt=total_debt,
                )
            )

        return HistoricalNetWorthResult(
            history=history,
            display_currency=display,
            is_approximate=True,
            generated_at=generated_at,
        )


__all__ = ["calculate_historical_net_worth", "month_ends", "clamp_months"]
