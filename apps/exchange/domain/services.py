"""
Domain services - Core business logic.
Resolves the rate snapshot an order is priced with and implements the
fallback chain pattern for exchange rate providers.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import (
    FOREIGN_CURRENCIES,
    Currency,
    ExchangeRate,
    ExchangeRateSnapshot,
    SnapshotRate,
)

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """
    Domain service that turns recorded rates into an order snapshot.

    Resolution strategy, per foreign currency:
    1. An existing snapshot on the order wins; live rates never override it
    2. Otherwise pick the most recent active rate effective on or before `as_of`
    3. If there is none, fall back to the latest active rate ever recorded
    4. If there is still none, the currency stays out of the snapshot
    """

    @staticmethod
    def select_rate(
        currency: Currency,
        recorded_rates: Iterable[ExchangeRate],
        as_of: date
    ) -> Optional[ExchangeRate]:
        """
        Pick the rate that applies to `currency` on `as_of`.

        Args:
            currency: Foreign currency to resolve
            recorded_rates: Every rate known to the store (active or not)
            as_of: Date the order is created on

        Returns:
            The applicable ExchangeRate, or None if none was ever recorded

        Example:
            >>> rate = ExchangeRateService.select_rate(Currency.USD, rates, date(2024, 5, 21))
            >>> rate.rate if rate else None
            Decimal('36.50')
        """
        candidates = [
            r for r in recorded_rates
            if r.currency is currency and r.is_active
        ]
        if not candidates:
            return None

        effective = [r for r in candidates if r.effective_date <= as_of]
        if effective:
            return max(effective, key=lambda r: r.effective_date)

        return max(candidates, key=lambda r: r.effective_date)

    @staticmethod
    def resolve_rates(
        as_of: date,
        recorded_rates: Iterable[ExchangeRate],
        snapshot: Optional[ExchangeRateSnapshot] = None
    ) -> ExchangeRateSnapshot:
        """
        Build the snapshot an order is priced with.

        Args:
            as_of: Order creation date
            recorded_rates: Rates read from the store (may be empty if the read failed)
            snapshot: Snapshot already captured on the order, if any

        Returns:
            ExchangeRateSnapshot; currencies without any rate are left out
        """
        if snapshot is not None:
            return snapshot

        recorded_rates = list(recorded_rates)
        resolved = {}

        for currency in FOREIGN_CURRENCIES:
            selected = ExchangeRateService.select_rate(currency, recorded_rates, as_of)
            if selected is None:
                logger.warning("No active %s rate recorded; currency unavailable", currency.value)
                continue
            resolved[currency] = SnapshotRate(
                rate=selected.rate,
                effective_date=selected.effective_date,
            )

        return ExchangeRateSnapshot(rates=resolved)

    @staticmethod
    def fetch_rate(
        providers: Sequence[BaseExchangeRateProvider],
        currency: Currency,
        valuation_date: date
    ) -> tuple[Optional[Decimal], Optional[str]]:
        """
        Query providers in priority order until one returns a rate.

        Returns:
            (rate, provider_name), or (None, None) if all providers fail
        """
        if not providers:
            logger.warning("No exchange rate providers configured")
            return None, None

        for provider in providers:
            provider_name = provider.__class__.__name__
            logger.info("Trying %s for %s on %s", provider_name, currency.value, valuation_date)

            rate_value = provider.get_exchange_rate_data(currency, valuation_date)

            if rate_value is not None and rate_value > 0:
                logger.info("%s returned rate %s for %s", provider_name, rate_value, currency.value)
                return rate_value, provider_name

            logger.warning("%s failed for %s, trying next...", provider_name, currency.value)

        logger.error("All providers failed for %s on %s", currency.value, valuation_date)
        return None, None
