import logging
import requests
from decimal import Decimal, InvalidOperation
from datetime import date

from django.conf import settings

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import Currency

logger = logging.getLogger(__name__)


class DolarApiProvider(BaseExchangeRateProvider):
    """
    DolarApi provider for the official Bs rates.
    Uses the /dolares/oficial and /euros/oficial endpoints, which only
    publish the current rate.
    """

    ENDPOINTS = {
        Currency.USD: "dolares/oficial",
        Currency.EUR: "euros/oficial",
    }

    def get_exchange_rate_data(
        self,
        currency: Currency,
        valuation_date: date
    ) -> Decimal | None:
        """
        Fetch the official Bs rate for a foreign currency.

        Args:
            currency: Foreign currency code (USD or EUR)
            valuation_date: Requested date; only today is served

        Returns:
            Bs per unit as Decimal, or None for a past date or if error occurs
        """
        if valuation_date != date.today():
            logger.info("DolarApi has no rate history; skipping %s on %s", currency.value, valuation_date)
            return None

        endpoint = self.ENDPOINTS.get(currency)
        if endpoint is None:
            logger.warning("DolarApi: unsupported currency %s", currency)
            return None

        base_url = getattr(settings, "DOLAR_API_URL", "")
        if not base_url:
            logger.warning("DOLAR_API_URL is not configured. Cannot fetch exchange rates.")
            return None

        # Format: https://ve.dolarapi.com/v1/dolares/oficial
        url = f"{base_url.rstrip('/')}/{endpoint}"
        timeout = getattr(settings, "EXCHANGE_RATE_TIMEOUT", 10)

        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            data = response.json()

            # Response format: {"fuente": "oficial", "promedio": 36.5, "fechaActualizacion": "..."}
            rate = Decimal(str(data["promedio"]))
            if rate <= 0:
                logger.warning("DolarApi returned a non-positive rate for %s: %s", currency.value, rate)
                return None
            return rate

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling DolarApi for %s on %s", currency.value, valuation_date)
            return None
        except requests.exceptions.HTTPError as e:
            logger.warning("HTTP error from DolarApi: %s", e)
            return None
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning("Invalid response from DolarApi: %s", e)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("Unexpected error calling DolarApi: %s", e)
            return None
