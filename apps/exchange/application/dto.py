"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from apps.exchange.domain.models import Currency, ExchangeRateSnapshot


@dataclass
class ExchangeRateDTO:
    """Exchange rate data transfer object."""
    currency: str
    rate: Decimal
    effective_date: date
    is_active: bool = True
    id: Optional[str] = None


@dataclass
class SnapshotRateDTO:
    """Single currency entry of a resolved snapshot."""
    currency: str
    rate: Optional[Decimal]
    effective_date: Optional[date]
    available: bool


@dataclass
class SnapshotDTO:
    """Resolved snapshot for a date, one entry per foreign currency."""
    as_of: date
    rates: List[SnapshotRateDTO]

    @classmethod
    def from_snapshot(cls, as_of: date, snapshot: ExchangeRateSnapshot) -> "SnapshotDTO":
        entries = []
        for currency in (c for c in Currency if not c.is_canonical):
            entry = snapshot.rates.get(currency)
            entries.append(SnapshotRateDTO(
                currency=currency.value,
                rate=entry.rate if entry else None,
                effective_date=entry.effective_date if entry else None,
                available=entry is not None,
            ))
        return cls(as_of=as_of, rates=entries)


@dataclass
class RateSyncResultDTO:
    """Result DTO for rate synchronization task."""
    success: bool
    rates_synced: int
    currencies_processed: List[str]
    errors: List[str] = field(default_factory=list)
    providers_used: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "rates_synced": self.rates_synced,
            "currencies_processed": self.currencies_processed,
            "errors": self.errors,
            "providers_used": self.providers_used,
        }
