from abc import ABC, abstractmethod
from decimal import Decimal
from datetime import date

from apps.exchange.domain.models import Currency


class BaseExchangeRateProvider(ABC):
    @abstractmethod
    def get_exchange_rate_data(self, currency: Currency, date: date) -> Decimal | None:
        """Return units of the canonical currency per 1 unit of `currency`."""
        pass
