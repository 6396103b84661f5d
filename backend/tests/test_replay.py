"""Ledger replay: quantity fold and FIFO lots."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger.models import Transaction, TransactionAction
from ledger.replay import replay_lots, replay_quantity


def buy(day: date, quantity: str, price: str) -> Transaction:
    return Transaction(day, TransactionAction.BUY, Decimal(quantity), Decimal(price))


def sell(day: date, quantity: str, price: str = "0") -> Transaction:
    return Transaction(day, TransactionAction.SELL, Decimal(quantity), Decimal(price))


def split(day: date, ratio: str) -> Transaction:
    return Transaction(day, TransactionAction.SPLIT, Decimal(ratio))


def test_fifo_sell_consumes_oldest_lot_first():
    ledger = [
        buy(date(2024, 1, 1), "10", "5"),
        buy(date(2024, 2, 1), "10", "7"),
        sell(date(2024, 3, 1), "12", "9"),
    ]

    result = replay_lots(ledger)

    assert result.quantity == Decimal("8")
    assert result.cost_basis == Decimal("56")
    assert len(result.lots) == 1
    assert result.lots[0].unit_price == Decimal("7")
    assert result.unmatched_sell_quantity == 0
    assert replay_quantity(ledger) == Decimal("8")


def test_split_restates_lot_quantity_and_price():
    ledger = [buy(date(2024, 1, 1), "100", "10"), split(date(2024, 6, 1), "2")]

    result = replay_lots(ledger)

    assert result.quantity == Decimal("200")
    assert result.cost_basis == Decimal("1000")
    assert result.lots[0].quantity == Decimal("200")
    assert result.lots[0].unit_price == Decimal("5")
    assert replay_quantity(ledger) == Decimal("200")


def test_split_between_sells_applies_to_partially_consumed_lots():
    ledger = [
        buy(date(2024, 1, 1), "10", "20"),
        sell(date(2024, 2, 1), "4"),
        split(date(2024, 3, 1), "3"),
        sell(date(2024, 4, 1), "6"),
    ]

    result = replay_lots(ledger)

    # 6 units left before the split, 18 after, 12 after the second sell.
    assert result.quantity == Decimal("12")
    assert result.lots[0].remaining_quantity == Decimal("12")
    assert result.cost_basis.quantize(Decimal("0.01")) == Decimal("80.00")
    assert replay_quantity(ledger) == Decimal("12")


def test_oversell_reports_unmatched_quantity():
    ledger = [buy(date(2024, 1, 1), "5", "10"), sell(date(2024, 2, 1), "8")]

    result = replay_lots(ledger)

    assert result.quantity == 0
    assert result.cost_basis == 0
    assert result.lots == []
    assert result.unmatched_sell_quantity == Decimal("3")
    assert replay_quantity(ledger) == Decimal("-3")


def test_dividend_does_not_change_position():
    ledger = [
        buy(date(2024, 1, 1), "10", "5"),
        Transaction(date(2024, 2, 1), TransactionAction.DIVIDEND, Decimal("0"), Decimal("1.25")),
    ]

    assert replay_quantity(ledger) == Decimal("10")
    assert replay_lots(ledger).cost_basis == Decimal("50")


def test_as_of_ignores_later_transactions():
    ledger = [
        buy(date(2024, 1, 1), "10", "5"),
        buy(date(2024, 3, 1), "10", "6"),
        split(date(2024, 5, 1), "2"),
    ]

    assert replay_quantity(ledger, as_of=date(2024, 2, 29)) == Decimal("10")
    assert replay_quantity(ledger, as_of=date(2024, 3, 1)) == Decimal("20")
    assert replay_lots(ledger, as_of=date(2024, 4, 30)).cost_basis == Decimal("110")


def test_transactions_are_replayed_by_date_not_list_order():
    ledger = [sell(date(2024, 2, 1), "5"), buy(date(2024, 1, 1), "10", "4")]

    result = replay_lots(ledger)

    assert result.quantity == Decimal("5")
    assert result.unmatched_sell_quantity == 0


def test_same_day_transactions_keep_stored_order():
    day = date(2024, 1, 1)
    ledger = [buy(day, "10", "5"), buy(day, "10", "9"), sell(day, "10")]

    result = replay_lots(ledger)

    assert result.cost_basis == Decimal("90")


def test_lowercase_actions_are_accepted():
    ledger = [Transaction(date(2024, 1, 1), "buy", Decimal("3"), Decimal("2"))]

    assert replay_quantity(ledger) == Decimal("3")


def test_empty_ledger_is_zero():
    assert replay_quantity([]) == 0
    result = replay_lots([])
    assert result.cost_basis == 0
    assert result.quantity == 0


def test_zero_ratio_split_is_ignored_by_both_folds():
    ledger = [buy(date(2024, 1, 1), "10", "5"), split(date(2024, 2, 1), "0")]

    result = replay_lots(ledger)

    assert replay_quantity(ledger) == Decimal("10")
    assert result.quantity == Decimal("10")
    assert result.cost_basis == Decimal("50")
