"""Top performers: unrealized gain/loss rankings for tradeable holdings.

``gain_loss = current_value - cost_basis`` and
``gain_loss_percent = gain_loss / cost_basis * 100``, both in the display
currency. Holdings without a position, a usable price or a cost basis are
not rankable and are left out silently.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from opentelemetry import trace

from ledger.fx import convert
from ledger.models import CachedPrice, CostBasis, Holding
from ledger.replay import replay_lots, replay_quantity

from networth.config import AppSettings, get_settings
from networth.schemas import Performer, TopPerformersResult

from .currency import load_rates, resolve_display_currency
from .sources import PortfolioSource, as_utc, with_timeout

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

HUNDRED = Decimal("100")


@dataclass
class _Position:
    holding: Holding
    quantity: Decimal
    cost: CostBasis
    price: CachedPrice


async def _load_position(
    holding: Holding,
    source: PortfolioSource,
    settings: AppSettings,
) -> _Position | None:
    if not holding.symbol:
        return None
    transactions = await source.list_transactions(holding.id)
    quantity = replay_quantity(transactions)
    if quantity == 0:
        return None
    price = await with_timeout(
        source.get_cached_price(holding.symbol),
        settings.gateway_timeout_seconds,
        what=f"price of {holding.symbol}",
    )
    if price is None or price.price == 0:
        return None
    return _Position(holding=holding, quantity=quantity, cost=replay_lots(transactions), price=price)


def clamp_limit(limit: int | None, settings: AppSettings) -> int:
    if limit is None:
        return settings.performers_default_limit
    if limit < 1:
        raise ValueError("limit must be a positive integer")
    return min(limit, settings.performers_max_limit)


async def get_top_performers(
    user_id: str,
    source: PortfolioSource,
    limit: int | None = None,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> TopPerformersResult:
    """Return the top ``limit`` gainers and losers by unrealized gain/loss."""

    settings = settings or get_settings()
    limit = clamp_limit(limit, settings)
    display = resolve_display_currency(settings, display_currency)
    calculated_at = as_utc(now or datetime.now(timezone.utc))

    with tracer.start_as_current_span("networth.get_top_performers") as span:
        holdings = [h for h in await source.list_active_holdings(user_id) if h.is_tradeable]
        loaded = await asyncio.gather(*(_load_position(h, source, settings) for h in holdings))
        positions = [p for p in loaded if p is not None]

        currencies = {p.price.currency for p in positions} | {p.holding.currency for p in positions}
        rates = await load_rates(source, currencies, display, settings)

        performers: list[Performer] = []
        for position in positions:
            # Cost basis is recorded in the holding's currency, prices in the quote currency.
            cost_basis = convert(position.cost.cost_basis, position.holding.currency, display, rates)
            if cost_basis == 0:
                continue
            current_value = convert(
                position.quantity * position.price.price, position.price.currency, display, rates
            )
            gain_loss = current_value - cost_basis
            performers.append(
                Performer(
                    holding_id=position.holding.id,
                    name=position.holding.name,
                    symbol=position.holding.symbol or "",
                    type=position.holding.type,
                    gain_loss=gain_loss,
                    gain_loss_percent=gain_loss / cost_basis * HUNDRED,
                    current_value=current_value,
                    cost_basis=cost_basis,
                )
            )

        gainers = sorted((p for p in performers if p.gain_loss > 0), key=lambda p: p.gain_loss, reverse=True)
        losers = sorted((p for p in performers if p.gain_loss < 0), key=lambda p: p.gain_loss)
        span.set_attribute("networth.rankable_holdings", len(performers))

        return TopPerformersResult(
            gainers=gainers[:limit],
            losers=losers[:limit],
            display_currency=display,
            calculated_at=calculated_at,
        )


__all__ = ["get_top_performers", "clamp_limit"]
