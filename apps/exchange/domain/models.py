"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional
from uuid import uuid4, UUID


class Currency(str, Enum):
    """Closed set of currencies an order can be priced, paid or displayed in."""

    BS = "Bs"
    USD = "USD"
    EUR = "EUR"

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]

    @property
    def is_canonical(self) -> bool:
        return self is CANONICAL_CURRENCY


CANONICAL_CURRENCY = Currency.BS
FOREIGN_CURRENCIES = (Currency.USD, Currency.EUR)

CURRENCY_SYMBOLS = {
    Currency.BS: "Bs.",
    Currency.USD: "$",
    Currency.EUR: "€",
}


@dataclass(frozen=True)
class ExchangeRate:
    """
    A recorded rate: units of the canonical currency per 1 unit of `currency`.
    """

    currency: Currency
    rate: Decimal
    effective_date: date
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        if self.currency is CANONICAL_CURRENCY:
            raise ValueError("The canonical currency has no exchange rate")
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")


@dataclass(frozen=True)
class SnapshotRate:

    rate: Decimal
    effective_date: date

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    """
    Rates frozen at order-creation time.

    A currency missing from `rates` is unavailable: conversions involving it
    return None and are never approximated as 1:1.
    """

    rates: Mapping[Currency, SnapshotRate] = field(default_factory=dict)

    def __post_init__(self):
        if CANONICAL_CURRENCY in self.rates:
            raise ValueError("The canonical currency cannot carry a snapshot rate")
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_for(self, currency: Currency) -> Optional[Decimal]:
        if currency is CANONICAL_CURRENCY:
            return Decimal("1")
        entry = self.rates.get(currency)
        return entry.rate if entry else None

    def is_available(self, currency: Currency) -> bool:
        return self.rate_for(currency) is not None

    def available_currencies(self) -> list[Currency]:
        return [c for c in Currency if self.is_available(c)]

    def to_canonical(self, amount: Decimal, currency: Currency) -> Optional[Decimal]:
        rate = self.rate_for(currency)
        if rate is None:
            return None
        return amount * rate

    def from_canonical(self, amount: Decimal, currency: Currency) -> Optional[Decimal]:
        rate = self.rate_for(currency)
        if rate is None:
            return None
        return amount / rate

    def to_dict(self) -> dict:
        return {
            currency.value: {
                "rate": str(entry.rate),
                "effective_date": entry.effective_date.isoformat(),
            }
            for currency, entry in self.rates.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ExchangeRateSnapshot":
        return cls(rates={
            Currency(code): SnapshotRate(
                rate=Decimal(str(entry["rate"])),
                effective_date=date.fromisoformat(str(entry["effective_date"])),
            )
            for code, entry in data.items()
        })
