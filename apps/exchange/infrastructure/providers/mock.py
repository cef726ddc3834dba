"""
Mock provider for testing and fallback.
Generates random but realistic exchange rates.
"""

import logging
import random
from decimal import Decimal
from datetime import date

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import Currency

logger = logging.getLogger(__name__)


class MockProvider(BaseExchangeRateProvider):
    """
    Mock provider that generates random exchange rates.
    Useful for:
    - Testing without external API calls
    - Fallback when all real providers fail
    - Development without network access
    """

    # Approximate Bs per unit of each foreign currency
    BASE_RATES = {
        Currency.USD: Decimal("36.50"),
        Currency.EUR: Decimal("39.60"),
    }

    def get_exchange_rate_data(
        self,
        currency: Currency,
        date: date
    ) -> Decimal | None:
        """
        Generate a mock exchange rate with small random variation.

        Args:
            currency: Foreign currency code
            date: Date for the rate (used for seeding randomness)

        Returns:
            Mock exchange rate as Decimal
        """
        base_rate = self.BASE_RATES.get(currency)

        if base_rate is None:
            logger.warning("MockProvider: unsupported currency %s", currency)
            return None

        # Add small random variation (±2%)
        # Use date as seed for reproducibility
        rng = random.Random(f"{currency.value}{date}")
        variation = Decimal(str(rng.uniform(0.98, 1.02)))
        mock_rate = base_rate * variation

        # Round to 6 decimal places
        return mock_rate.quantize(Decimal("0.000001"))
