"""SQL-backed :class:`~networth.services.sources.PortfolioSource`."""

from __future__ import annotations

import logging
from datetime import date, timezone
from decimal import Decimal

from sqlalchemy import select

from ledger.errors import MissingExchangeRateError
from ledger.models import (
    CachedPrice,
    Contribution,
    Holding,
    HoldingType,
    Snapshot,
    Transaction,
    TransactionAction,
)

from networth.db import Database
from networth import models

logger = logging.getLogger(__name__)


def _decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _to_holding(row: models.Holding) -> Holding:
    return Holding(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=HoldingType(row.type),
        currency=row.currency,
        symbol=row.symbol,
        is_active=row.is_active,
        deleted_at=row.deleted_at,
    )


class SqlPortfolioSource:
    """Read ledger, snapshot, price and rate rows through SQLAlchemy."""

    def __init__(self, database: Database):
        self._database = database

    async def list_active_holdings(self, user_id: str) -> list[Holding]:
        stmt = (
            select(models.Holding)
            .where(
                models.Holding.user_id == user_id,
                models.Holding.is_active.is_(True),
                models.Holding.deleted_at.is_(None),
            )
            .order_by(models.Holding.name)
        )
        async with self._database.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_holding(row) for row in rows]

    async def get_holding(self, holding_id: str) -> Holding | None:
        async with self._database.session() as session:
            row = await session.get(models.Holding, holding_id)
        if row is None or row.deleted_at is not None:
            return None
        return _to_holding(row)

    async def list_transactions(
        self, holding_id: str, as_of: date | None = None
    ) -> list[Transaction]:
        stmt = select(models.Transaction).where(
            models.Transaction.holding_id == holding_id,
            models.Transaction.deleted_at.is_(None),
        )
        if as_of is not None:
            stmt = stmt.where(models.Transaction.date <= as_of)
        stmt = stmt.order_by(models.Transaction.date, models.Transaction.id)
        async with self._database.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            Transaction(
                date=row.date,
                action=TransactionAction(row.action),
                quantity=_decimal(row.quantity),
                unit_price=_decimal(row.unit_price),
                fees=_decimal(row.fees),
            )
            for row in rows
        ]

    async def latest_snapshot(
        self, holding_id: str, as_of: date | None = None
    ) -> Snapshot | None:
        stmt = select(models.Snapshot).where(
            models.Snapshot.holding_id == holding_id,
            models.Snapshot.deleted_at.is_(None),
        )
        if as_of is not None:
            stmt = stmt.where(models.Snapshot.date <= as_of)
        stmt = stmt.order_by(models.Snapshot.date.desc()).limit(1)
        async with self._database.session() as session:
            row = (await session.execute(stmt)).scalars().first()
        if row is None:
            return None
        return Snapshot(date=row.date, balance=_decimal(row.balance), currency=row.currency)

    async def get_contribution(self, holding_id: str, month: date) -> Contribution | None:
        stmt = select(models.Contribution).where(
            models.Contribution.holding_id == holding_id,
            models.Contribution.date == month,
            models.Contribution.deleted_at.is_(None),
        )
        async with self._database.session() as session:
            row = (await session.execute(stmt)).scalars().first()
        if row is None:
            return None
        return Contribution(
            date=row.date,
            employer_contrib=_decimal(row.employer_contrib),
            employee_contrib=_decimal(row.employee_contrib),
        )

    async def get_cached_price(self, symbol: str) -> CachedPrice | None:
        stmt = select(models.PriceCache).where(models.PriceCache.symbol == symbol)
        async with self._database.session() as session:
            row = (await session.execute(stmt)).scalars().first()
        if row is None:
            return None
        fetched_at = row.fetched_at
        if fetched_at.tzinfo is None:
            # SQLite drops the offset; values are written in UTC.
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        return CachedPrice(
            symbol=row.symbol,
            price=_decimal(row.price),
            currency=row.currency,
            fetched_at=fetched_at,
            change_percent=_decimal(row.change_percent) if row.change_percent is not None else None,
            change_absolute=_decimal(row.change_absolute) if row.change_absolute is not None else None,
            source=row.source,
        )

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        source = from_currency.strip().upper()
        target = to_currency.strip().upper()
        if source == target:
            return Decimal("1")
        stmt = select(models.ExchangeRate).where(
            models.ExchangeRate.from_currency == source,
            models.ExchangeRate.to_currency == target,
        )
        async with self._database.session() as session:
            row = (await session.execute(stmt)).scalars().first()
        if row is None:
            logger.error("No stored exchange rate for %s/%s", source, target)
            raise MissingExchangeRateError(source, target)
        return _decimal(row.rate)


__all__ = ["SqlPortfolioSource"]
