"""SQLAlchemy base metadata and declarative registry."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base shared by the ledger and market data tables."""

    pass
