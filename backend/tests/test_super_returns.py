from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger.models import Contribution, Holding, HoldingType, Snapshot
from networth.services import calculate_investment_returns, calculate_monthly_investment_returns

USER = "user-1"


def seed(source):
    source.add_holding(Holding(id="fund", user_id=USER, name="Fund", type=HoldingType.SUPER, currency="AUD"))
    source.add_snapshot("fund", Snapshot(date(2024, 4, 1), Decimal("50000"), "AUD"))
    source.add_snapshot("fund", Snapshot(date(2024, 5, 1), Decimal("52000"), "AUD"))
    source.add_contribution(
        "fund", Contribution(date(2024, 5, 1), Decimal("1200"), Decimal("300"))
    )


async def test_returns_exclude_contributions(source):
    seed(source)

    returns = await calculate_investment_returns(
        "fund", USER, date(2024, 4, 1), date(2024, 5, 1), source
    )

    assert returns == Decimal("500")


async def test_monthly_returns_compare_with_previous_month(source):
    seed(source)

    assert await calculate_monthly_investment_returns("fund", USER, date(2024, 5, 20), source) == Decimal(
        "500"
    )


async def test_missing_contribution_counts_as_zero(source):
    seed(source)
    source.add_snapshot("fund", Snapshot(date(2024, 6, 1), Decimal("51000"), "AUD"))

    assert await calculate_monthly_investment_returns("fund", USER, date(2024, 6, 1), source) == Decimal(
        "-1000"
    )


async def test_missing_snapshot_returns_none(source):
    seed(source)

    assert await calculate_monthly_investment_returns("fund", USER, date(2024, 4, 1), source) is None
    assert await calculate_monthly_investment_returns("fund", USER, date(2024, 7, 1), source) is None


async def test_other_users_and_non_super_holdings_return_none(source):
    seed(source)
    source.add_holding(Holding(id="cash", user_id=USER, name="Cash", type=HoldingType.CASH, currency="AUD"))
    source.add_snapshot("cash", Snapshot(date(2024, 4, 1), Decimal("1"), "AUD"))
    source.add_snapshot("cash", Snapshot(date(2024, 5, 1), Decimal("2"), "AUD"))

    assert await calculate_monthly_investment_returns("fund", "someone-else", date(2024, 5, 1), source) is None
    assert await calculate_monthly_investment_returns("cash", USER, date(2024, 5, 1), source) is None
    assert await calculate_monthly_investment_returns("missing", USER, date(2024, 5, 1), source) is None


async def test_january_compares_with_december(source):
    source.add_holding(Holding(id="fund", user_id=USER, name="Fund", type=HoldingType.SUPER, currency="AUD"))
    source.add_snapshot("fund", Snapshot(date(2023, 12, 1), Decimal("100"), "AUD"))
    source.add_snapshot("fund", Snapshot(date(2024, 1, 1), Decimal("130"), "AUD"))

    assert await calculate_monthly_investment_returns("fund", USER, date(2024, 1, 31), source) == Decimal("30")
