"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db import DatabaseError, transaction

from apps.exchange.domain.models import (
    CANONICAL_CURRENCY,
    Currency,
    ExchangeRate as DomainExchangeRate,
)
from apps.exchange.infrastructure.persistence.models import ExchangeRate

logger = logging.getLogger(__name__)


class ExchangeRateRepository:
    """Repository for ExchangeRate aggregate."""

    @staticmethod
    def to_domain(model: ExchangeRate) -> DomainExchangeRate:
        """Map an ORM row to the domain entity."""
        return DomainExchangeRate(
            id=model.id,
            currency=Currency(model.currency),
            rate=Decimal(model.rate),
            effective_date=model.effective_date,
            is_active=model.is_active,
        )

    @staticmethod
    def exists_for_date(currency: Currency, effective_date: date) -> bool:
        """Check if an active rate is already recorded for that day."""
        return ExchangeRate.objects.filter(
            currency=currency.value,
            effective_date=effective_date,
            is_active=True,
        ).exists()

    @staticmethod
    @transaction.atomic
    def set_rate(
        currency: Currency,
        rate: Decimal,
        effective_date: Optional[date] = None
    ) -> ExchangeRate:
        """
        Record a new rate and deactivate the previous active ones for the currency.

        Raises:
            ValueError: if the rate is not positive or the currency is canonical
        """
        if currency is CANONICAL_CURRENCY:
            raise ValueError("The canonical currency has no exchange rate")
        if rate <= 0:
            raise ValueError("The exchange rate must be greater than zero")

        deactivated = ExchangeRate.objects.filter(
            currency=currency.value,
            is_active=True,
        ).update(is_active=False)
        if deactivated:
            logger.info("Deactivated %d previous %s rate(s)", deactivated, currency.value)

        return ExchangeRate.objects.create(
            currency=currency.value,
            rate=rate,
            effective_date=effective_date or date.today(),
            is_active=True,
        )

    @staticmethod
    def load_domain_rates() -> List[DomainExchangeRate]:
        """
        Read every recorded rate as domain entities.

        A failed read is treated as "no rates": the caller then prices with
        an empty snapshot instead of crashing.
        """
        try:
            rows = list(ExchangeRate.objects.all())
        except DatabaseError as e:
            logger.error("Failed to read exchange rates: %s", e)
            return []
        return [ExchangeRateRepository.to_domain(row) for row in rows]
