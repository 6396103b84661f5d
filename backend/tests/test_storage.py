"""SQL gateway against a throwaway SQLite database."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from ledger.errors import MissingExchangeRateError
from networth import models
from networth.db import Database
from networth.services import calculate_net_worth
from networth.services.storage import SqlPortfolioSource

USER = "user-1"


async def _database(tmp_path: Path) -> Database:
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'networth.db'}")
    await database.create_all()
    return database


async def _seed(database: Database, now) -> None:
    async with database.session() as session:
        session.add_all(
            [
                models.Holding(id="vas", user_id=USER, type="etf", symbol="VAS", name="VAS", currency="AUD"),
                models.Holding(id="spy", user_id=USER, type="stock", symbol="SPY", name="SPY", currency="USD"),
                models.Holding(id="cash", user_id=USER, type="cash", name="Cash", currency="AUD"),
                models.Holding(
                    id="closed", user_id=USER, type="cash", name="Closed", currency="AUD", is_active=False
                ),
            ]
        )
        await session.flush()
        session.add_all(
            [
                models.Transaction(
                    holding_id="vas",
                    date=date(2024, 1, 1),
                    action="BUY",
                    quantity=Decimal("10"),
                    unit_price=Decimal("5"),
                    currency="AUD",
                ),
                models.Transaction(
                    holding_id="vas",
                    date=date(2024, 1, 1),
                    action="BUY",
                    quantity=Decimal("10"),
                    unit_price=Decimal("9"),
                    currency="AUD",
                ),
                models.Transaction(
                    holding_id="vas",
                    date=date(2024, 2, 1),
                    action="SELL",
                    quantity=Decimal("5"),
                    currency="AUD",
                    deleted_at=now,
                ),
                models.Transaction(
                    holding_id="spy",
                    date=date(2024, 1, 1),
                    action="BUY",
                    quantity=Decimal("2"),
                    unit_price=Decimal("400"),
                    currency="USD",
                ),
                models.Snapshot(holding_id="cash", date=date(2024, 5, 1), balance=Decimal("100"), currency="AUD"),
                models.Snapshot(
                    holding_id="cash",
                    date=date(2024, 6, 1),
                    balance=Decimal("999"),
                    currency="AUD",
                    deleted_at=now,
                ),
                models.PriceCache(symbol="VAS", price=Decimal("10"), currency="AUD", fetched_at=now),
                models.PriceCache(
                    symbol="SPY",
                    price=Decimal("500"),
                    currency="USD",
                    fetched_at=now - timedelta(hours=1),
                ),
                models.ExchangeRate(from_currency="USD", to_currency="AUD", rate=Decimal("1.5")),
            ]
        )
        await session.commit()


async def test_active_holdings_exclude_inactive(tmp_path, now):
    database = await _database(tmp_path)
    await _seed(database, now)
    source = SqlPortfolioSource(database)

    holdings = await source.list_active_holdings(USER)

    assert sorted(h.id for h in holdings) == ["cash", "spy", "vas"]
    assert await source.get_holding("closed") is not None
    assert await source.get_holding("missing") is None
    await database.dispose()


async def test_transactions_skip_deleted_and_keep_insertion_order(tmp_path, now):
    database = await _database(tmp_path)
    await _seed(database, now)
    source = SqlPortfolioSource(database)

    transactions = await source.list_transactions("vas")

    assert [tx.unit_price for tx in transactions] == [Decimal("5"), Decimal("9")]
    assert await source.list_transactions("vas", as_of=date(2023, 12, 31)) == []
    await database.dispose()


async def test_latest_snapshot_skips_deleted_rows(tmp_path, now):
    database = await _database(tmp_path)
    await _seed(database, now)
    source = SqlPortfolioSource(database)

    snapshot = await source.latest_snapshot("cash")

    assert snapshot is not None
    assert snapshot.date == date(2024, 5, 1)
    assert snapshot.balance == Decimal("100")
    assert await source.latest_snapshot("cash", as_of=date(2024, 4, 30)) is None
    await database.dispose()


async def test_prices_are_returned_in_utc(tmp_path, now):
    database = await _database(tmp_path)
    await _seed(database, now)
    source = SqlPortfolioSource(database)

    price = await source.get_cached_price("VAS")

    assert price is not None
    assert price.fetched_at == now
    assert await source.get_cached_price("NOPE") is None
    await database.dispose()


async def test_exchange_rates(tmp_path, now):
    database = await _database(tmp_path)
    await _seed(database, now)
    source = SqlPortfolioSource(database)

    assert await source.get_exchange_rate("usd", "aud") == Decimal("1.5")
    assert await source.get_exchange_rate("AUD", "AUD") == Decimal("1")
    with pytest.raises(MissingExchangeRateError):
        await source.get_exchange_rate("NZD", "AUD")
    await database.dispose()


async def test_net_worth_over_sql_source(tmp_path, now, settings):
    database = await _database(tmp_path)
    await _seed(database, now)

    result = await calculate_net_worth(USER, SqlPortfolioSource(database), now=now, settings=settings)

    # VAS 20 x 10 + SPY 2 x 500 x 1.5 + cash 100
    assert result.net_worth == Decimal("1800")
    assert [s.holding_id for s in result.stale_holdings] == ["spy"]
    assert result.stale_holdings[0].reason == "price_expired"
    await database.dispose()
