"""Holding, ledger, snapshot and market data tables."""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from networth.db.base import Base

HOLDING_TYPES = ("stock", "etf", "crypto", "super", "cash", "debt")
TRANSACTION_ACTIONS = ("BUY", "SELL", "DIVIDEND", "SPLIT")


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Holding(Base):
    __tablename__ = "holdings"
    __table_args__ = (Index("ix_holdings_user_active", "user_id", "is_active"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    type: Mapped[str] = mapped_column(Enum(*HOLDING_TYPES, name="holding_type"))
    symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    name: Mapped[str] = mapped_column(String(128))
    currency: Mapped[str] = mapped_column(String(3))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="holding", cascade="all, delete-orphan"
    )
    snapshots: Mapped[list["Snapshot"]] = relationship(
        back_populates="holding", cascade="all, delete-orphan"
    )


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_holding_date", "holding_id", "date"),)

    # Autoincrement id doubles as insertion order for same-day rows.
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    holding_id: Mapped[str] = mapped_column(ForeignKey("holdings.id", ondelete="CASCADE"))
    date: Mapped[dt.date] = mapped_column(Date)
    action: Mapped[str] = mapped_column(Enum(*TRANSACTION_ACTIONS, name="transaction_action"))
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))
    fees: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    holding: Mapped[Holding] = relationship(back_populates="transactions")


class Snapshot(Base):
    __tablename__ = "snapshots"
    __table_args__ = (Index("ix_snapshots_holding_date", "holding_id", "date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    holding_id: Mapped[str] = mapped_column(ForeignKey("holdings.id", ondelete="CASCADE"))
    date: Mapped[dt.date] = mapped_column(Date)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    currency: Mapped[str] = mapped_column(String(3))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    holding: Mapped[Holding] = relationship(back_populates="snapshots")


class Contribution(Base):
    __tablename__ = "contributions"
    __table_args__ = (Index("ix_contributions_holding_date", "holding_id", "date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    holding_id: Mapped[str] = mapped_column(ForeignKey("holdings.id", ondelete="CASCADE"))
    date: Mapped[dt.date] = mapped_column(Date)
    employer_contrib: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"))
    employee_contrib: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PriceCache(Base):
    __tablename__ = "price_cache"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    symbol: Mapped[str] = mapped_column(String(32), unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(20, 8))
    currency: Mapped[str] = mapped_column(String(3))
    change_percent: Mapped[Decimal | None] = mapped_column(Numeric(10, 4), nullable=True)
    change_absolute: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    source: Mapped[str | None] = mapped_column(String(16), nullable=True)


class ExchangeRate(Base):
    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", name="uq_exchange_rate_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    from_currency: Mapped[str] = mapped_column(String(3))
    to_currency: Mapped[str] = mapped_column(String(3))
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


__all__ = [
    "Holding",
    "Transaction",
    "Snapshot",
    "Contribution",
    "PriceCache",
    "ExchangeRate",
    "HOLDING_TYPES",
    "TRANSACTION_ACTIONS",
]
