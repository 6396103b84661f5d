"""Currency conversion helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping

from .errors import UnsupportedCurrencyPairError


def pair_key(from_currency: str, to_currency: str) -> str:
    """Return the ``FROM/TO`` key used by rate tables."""

    return f"{from_currency.strip().upper()}/{to_currency.strip().upper()}"


@dataclass
class ExchangeRates:
    """Rate table keyed by ordered currency pairs such as ``"USD/AUD"``.

    A rate of ``1.53`` under ``"USD/AUD"`` means one US dollar buys 1.53
    Australian dollars. Tables are built by the caller; nothing here fetches.
    """

    rates: Dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, rates: Mapping[str, Decimal | str | float | int]) -> "ExchangeRates":
        normalized: Dict[str, Decimal] = {}
        for key, value in rates.items():
            from_currency, _, to_currency = key.partition("/")
            normalized[pair_key(from_currency, to_currency)] = Decimal(str(value))
        return cls(rates=normalized)

    def set(self, from_currency: str, to_currency: str, rate: Decimal) -> None:
        self.rates[pair_key(from_currency, to_currency)] = Decimal(rate)

    def rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Return the multiplier converting ``from_currency`` into ``to_currency``."""

        source = from_currency.strip().upper()
        target = to_currency.strip().upper()
        if source == target:
            return Decimal("1")
        direct = self.rates.get(pair_key(source, target))
        if direct is not None:
            return direct
        inverse = self.rates.get(pair_key(target, source))
        if inverse:
            return Decimal("1") / inverse
        raise UnsupportedCurrencyPairError(source, target)

    def as_dict(self) -> Dict[str, Decimal]:
        return dict(self.rates)


def convert(
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates,
) -> Decimal:
    """Convert ``amount`` between currencies using a caller-supplied rate table."""

    if from_currency.strip().upper() == to_currency.strip().upper():
        return amount
    return amount * rates.rate(from_currency, to_currency)


__all__ = ["ExchangeRates", "convert", "pair_key"]
