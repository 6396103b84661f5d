"""Net worth valuation services.

Current value of every active holding, in one display currency:

* tradeable holdings (stock, etf, crypto): replayed quantity x cached price
* snapshot holdings (super, cash): latest balance snapshot
* debt: latest balance snapshot, subtracted from assets

Missing or expired external data never aborts the computation. Each gap is
reported as a :class:`~networth.schemas.StaleHolding` next to a best-effort
value, so dashboards always have something to render.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from opentelemetry import metrics, trace

from ledger.fx import ExchangeRates, convert
from ledger.models import (
    ASSET_TYPE_ORDER,
    HOLDING_TYPE_LABELS,
    CachedPrice,
    Holding,
    HoldingType,
    Snapshot,
    StaleReason,
)
from ledger.replay import replay_quantity

from networth.config import AppSettings, get_settings
from networth.schemas import (
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

from .currency import load_rates, resolve_display_currency
from .sources import PortfolioSource, as_utc, with_timeout

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)
_stale_counter = meter.create_counter(
    "networth.stale_holdings",
    description="Holdings valued from expired or missing external data",
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass
class _Observation:
    """Raw gateway data gathered for one holding."""

    holding: Holding
    quantity: Decimal = ZERO
    price: CachedPrice | None = None
    snapshot: Snapshot | None = None

    def native_currency(self) -> str | None:
        if self.price is not None:
            return self.price.currency
        if self.snapshot is not None:
            return self.snapshot.currency
        return None


@dataclass
class _Valuation:
    holding: Holding
    value: HoldingValue | None = None
    stale: StaleHolding | None = None


@dataclass
class PortfolioValuation:
    """Per-holding valuations for one user at one instant."""

    valuations: list[_Valuation]
    rates: ExchangeRates
    display_currency: str
    calculated_at: datetime
    assets: dict[HoldingType, list[HoldingValue]] = field(default_factory=dict)
    debts: list[HoldingValue] = field(default_factory=list)

    @property
    def stale_holdings(self) -> list[StaleHolding]:
        return [v.stale for v in self.valuations if v.stale is not None]


def is_price_expired(price: CachedPrice, now: datetime, ttl_minutes: int) -> bool:
    """Return True when the cached price is at least ``ttl_minutes`` old."""

    return as_utc(now) - as_utc(price.fetched_at) >= timedelta(minutes=ttl_minutes)


def is_snapshot_old(snapshot: Snapshot, now: datetime, stale_after_days: int) -> bool:
    taken = datetime.combine(snapshot.date, time.min, tzinfo=timezone.utc)
    return as_utc(now) - taken > timedelta(days=stale_after_days)


def _stale(holding: Holding, reason: StaleReason, last_updated=None) -> StaleHolding:
    _stale_counter.add(1, {"reason": reason.value, "type": HoldingType(holding.type).value})
    return StaleHolding(
        holding_id=holding.id,
        name=holding.name,
        type=holding.type,
        last_updated=last_updated,
        reason=reason,
    )


async def _observe(
    holding: Holding,
    source: PortfolioSource,
    settings: AppSettings,
    now: datetime,
) -> _Observation:
    observation = _Observation(holding=holding)
    timeout = settings.gateway_timeout_seconds
    if holding.is_tradeable:
        transactions = await source.list_transactions(holding.id)
        observation.quantity = replay_quantity(transactions)
        if observation.quantity == 0 or not holding.symbol:
            return observation
        observation.price = await with_timeout(
            source.get_cached_price(holding.symbol), timeout, what=f"price of {holding.symbol}"
        )
    else:
        observation.snapshot = await with_timeout(
            source.latest_snapshot(holding.id, as_utc(now).date()),
            timeout,
            what=f"snapshot of holding {holding.id}",
        )
    return observation


def _value_tradeable(
    obs: _Observation,
    rates: ExchangeRates,
    display_currency: str,
    now: datetime,
    settings: AppSettings,
) -> _Valuation:
    holding = obs.holding
    if obs.quantity == 0 or not holding.symbol:
        # No position is not staleness.
        return _Valuation(holding=holding)

    price = obs.price
    if price is None:
        return _Valuation(
            holding=holding,
            value=HoldingValue(
                id=holding.id,
                name=holding.name,
                symbol=holding.symbol,
                value=ZERO,
                currency=holding.currency,
                value_native=ZERO,
                quantity=obs.quantity,
                price=ZERO,
            ),
            stale=_stale(holding, StaleReason.NO_PRICE),
        )

    value_native = obs.quantity * price.price
    stale = None
    if is_price_expired(price, now, settings.price_cache_ttl_minutes):
        stale = _stale(holding, StaleReason.PRICE_EXPIRED, price.fetched_at)
    return _Valuation(
        holding=holding,
        value=HoldingValue(
            id=holding.id,
            name=holding.name,
            symbol=holding.symbol,
            value=convert(value_native, price.currency, display_currency, rates),
            currency=price.currency,
            value_native=value_native,
            quantity=obs.quantity,
            price=price.price,
        ),
        stale=stale,
    )


def _value_snapshot(
    obs: _Observation,
    rates: ExchangeRates,
    display_currency: str,
    now: datetime,
    settings: AppSettings,
) -> _Valuation:
    holding = obs.holding
    snapshot = obs.snapshot
    if snapshot is None:
        return _Valuation(holding=holding, stale=_stale(holding, StaleReason.NO_SNAPSHOT))

    stale = None
    if is_snapshot_old(snapshot, now, settings.snapshot_stale_after_days):
        stale = _stale(holding, StaleReason.SNAPSHOT_OLD, snapshot.date)
    return _Valuation(
        holding=holding,
        value=HoldingValue(
            id=holding.id,
            name=holding.name,
            symbol=holding.symbol,
            value=convert(snapshot.balance, snapshot.currency, display_currency, rates),
            currency=snapshot.currency,
            value_native=snapshot.balance,
        ),
        stale=stale,
    )


async def value_portfolio(
    user_id: str,
    source: PortfolioSource,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> PortfolioValuation:
    """Gather gateway data for every active holding and value it.

    Holdings are observed concurrently; rates are fetched once afterwards
    for the distinct native currencies actually seen.
    """

    settings = settings or get_settings()
    display = resolve_display_currency(settings, display_currency)
    calculated_at = as_utc(now or datetime.now(timezone.utc))

    holdings = await source.list_active_holdings(user_id)
    observations = await asyncio.gather(
        *(_observe(h, source, settings, calculated_at) for h in holdings)
    )
    rates = await load_rates(
        source,
        (obs.native_currency() for obs in observations if obs.native_currency()),
        display,
        settings,
    )

    portfolio = PortfolioValuation(
        valuations=[],
        rates=rates,
        display_currency=display,
        calculated_at=calculated_at,
    )
    for obs in observations:
        if obs.holding.is_tradeable:
            valuation = _value_tradeable(obs, rates, display, calculated_at, settings)
        else:
            valuation = _value_snapshot(obs, rates, display, calculated_at, settings)
        portfolio.valuations.append(valuation)
        if valuation.value is None:
            continue
        if obs.holding.is_debt:
            portfolio.debts.append(valuation.value)
        else:
            portfolio.assets.setdefault(HoldingType(obs.holding.type), []).append(valuation.value)
    return portfolio


def _total(values: Iterable[HoldingValue]) -> Decimal:
    return sum((v.value for v in values), ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


async def calculate_net_worth(
    user_id: str,
    source: PortfolioSource,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> NetWorthResult:
    """Calculate net worth (assets minus debt) with a staleness report."""

    with tracer.start_as_current_span("networth.calculate_net_worth") as span:
        portfolio = await value_portfolio(
            user_id, source, display_currency=display_currency, now=now, settings=settings
        )
        breakdown = [
            AssetTypeBreakdown(
                type=holding_type,
                label=HOLDING_TYPE_LABELS[holding_type],
                total_value=_total(portfolio.assets[holding_type]),
                count=len(portfolio.assets[holding_type]),
                holdings=portfolio.assets[holding_type],
            )
            for holding_type in ASSET_TYPE_ORDER
            if portfolio.assets.get(holding_type)
        ]
        total_assets = sum((group.total_value for group in breakdown), ZERO)
        total_debt = _total(portfolio.debts)
        stale_holdings = portfolio.stale_holdings

        span.set_attribute("networth.holdings", len(portfolio.valuations))
        span.set_attribute("networth.stale_holdings", len(stale_holdings))
        if stale_holdings:
            logger.info(
                "Net worth for user %s uses stale data for %d holding(s)",
                user_id,
                len(stale_holdings),
            )

        return NetWorthResult(
            net_worth=total_assets - total_debt,
            total_assets=total_assets,
            total_debt=total_debt,
            breakdown=breakdown,
            debt_breakdown=portfolio.debts,
            stale_holdings=stale_holdings,
            has_stale_data=bool(stale_holdings),
            display_currency=portfolio.display_currency,
            rates_used=portfolio.rates.as_dict(),
            calculated_at=portfolio.calculated_at,
        )


def _category(
    holding_type: HoldingType,
    values: Sequence[HoldingValue],
    percentage: Decimal,
) -> AssetCategory:
    total = _total(values)
    return AssetCategory(
        type=holding_type,
        label=HOLDING_TYPE_LABELS[holding_type],
        total_value=total,
        percentage=percentage,
        count=len(values),
        holdings=[
            HoldingShare(**value.model_dump(), percentage=_percentage(value.value, total))
            for value in values
        ],
    )


async def calculate_asset_breakdown(
    user_id: str,
    source: PortfolioSource,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> AssetBreakdownResult:
    """Allocation by asset type, with debt reported as its own category."""

    with tracer.start_as_current_span("networth.calculate_asset_breakdown"):
        result = await calculate_net_worth(
            user_id, source, display_currency=display_currency, now=now, settings=settings
        )
        assets = [
            _category(
                HoldingType(group.type),
                group.holdings,
                _percentage(group.total_value, result.total_assets),
            )
            for group in result.breakdown
        ]
        assets.sort(key=lambda category: category.total_value, reverse=True)
        debt = None
        if result.debt_breakdown:
            debt = _category(HoldingType.DEBT, result.debt_breakdown, HUNDRED)

        return AssetBreakdownResult(
            assets=assets,
            debt=debt,
            total_assets=result.total_assets,
            total_debt=result.total_debt,
            display_currency=result.display_currency,
            rates_used=result.rates_used,
            calculated_at=result.calculated_at,
        )


async def calculate_currency_exposure(
    user_id: str,
    source: PortfolioSource,
    *,
    display_currency: str | None = None,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> CurrencyExposureResult:
    """Split assets (debt excluded) by the currency they are natively held in."""

    with tracer.start_as_current_span("networth.calculate_currency_exposure"):
        portfolio = await value_portfolio(
            user_id, source, display_currency=display_currency, now=now, settings=settings
        )
        by_currency: dict[str, list[HoldingValue]] = {}
        for values in portfolio.assets.values():
            for value in values:
                by_currency.setdefault(value.currency, []).append(value)
        total_assets = sum((_total(values) for values in by_currency.values()), ZERO)

        exposure = [
            CurrencyExposureItem(
                currency=currency,
                value=_total(values),
                value_native=sum((v.value_native for v in values), ZERO),
                percentage=_percentage(_total(values), total_assets),
                count=len(values),
            )
            for currency, values in by_currency.items()
        ]
        exposure.sort(key=lambda item: item.value, reverse=True)

        return CurrencyExposureResult(
            exposure=exposure,
            total_assets=total_assets,
            display_currency=portfolio.display_currency,
            rates_used=portfolio.rates.as_dict(),
            calculated_at=portfolio.calculated_at,
        )


__all__ = [
    "PortfolioValuation",
    "value_portfolio",
    "is_price_expired",
    "is_snapshot_old",
    "calculate_net_worth",
    "calculate_asset_breakdown",
    "calculate_currency_exposure",
]
