"""
Celery tasks for background processing.
"""

import logging
from datetime import date
from typing import Dict, Optional

from celery import shared_task

from apps.exchange.application.dto import RateSyncResultDTO
from apps.exchange.domain.models import FOREIGN_CURRENCIES
from apps.exchange.domain.services import ExchangeRateService
from apps.exchange.infrastructure.persistence.repositories import ExchangeRateRepository
from apps.exchange.infrastructure.providers.registry import get_configured_providers

logger = logging.getLogger(__name__)


@shared_task(name="sync_exchange_rates")
def sync_exchange_rates(valuation_date_str: Optional[str] = None, force: bool = False) -> Dict:
    """
    Record the day's rate for every foreign currency.

    Providers are tried in the configured order. A successful fetch is stored
    through ExchangeRateRepository.set_rate, which deactivates the previous
    rate of that currency. Snapshots already captured on orders are not
    affected. Providers without rate history (DolarApi) only answer for
    today, so a past date falls through to the next provider.

    Args:
        valuation_date_str: Date in YYYY-MM-DD format (defaults to today)
        force: Record a new rate even if one is already active for that day

    Returns:
        Dict with operation results
    """
    try:
        valuation_date = (
            date.fromisoformat(valuation_date_str) if valuation_date_str else date.today()
        )
    except ValueError as e:
        return {
            "success": False,
            "message": f"Invalid date format: {str(e)}",
            "rates_synced": 0
        }

    providers = get_configured_providers()
    if not providers:
        return {
            "success": False,
            "message": "No active providers configured. Check EXCHANGE_RATE_PROVIDERS.",
            "rates_synced": 0
        }

    result = RateSyncResultDTO(success=True, rates_synced=0, currencies_processed=[])

    for currency in FOREIGN_CURRENCIES:
        result.currencies_processed.append(currency.value)

        if not force and ExchangeRateRepository.exists_for_date(currency, valuation_date):
            logger.info("%s rate for %s already recorded, skipping", currency.value, valuation_date)
            continue

        rate, provider_name = ExchangeRateService.fetch_rate(providers, currency, valuation_date)
        if rate is None:
            result.errors.append(f"No rate fetched for {currency.value} on {valuation_date}")
            continue

        ExchangeRateRepository.set_rate(currency, rate, valuation_date)
        result.rates_synced += 1
        if provider_name not in result.providers_used:
            result.providers_used.append(provider_name)
        logger.info("Recorded %s rate %s (from %s)", currency.value, rate, provider_name)

    if result.errors and result.rates_synced == 0:
        result.success = False

    return result.to_dict()
