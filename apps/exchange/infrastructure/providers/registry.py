"""
Provider Registry - Maps provider names to adapter classes.
The fallback order comes from settings.EXCHANGE_RATE_PROVIDERS.
"""

import logging

from django.conf import settings

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.infrastructure.providers.dolar_api import DolarApiProvider
from apps.exchange.infrastructure.providers.mock import MockProvider

logger = logging.getLogger(__name__)


# Registry: Maps provider name to the corresponding adapter class
PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    "dolar_api": DolarApiProvider,
    "mock": MockProvider,
}


def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider | None:
    """
    Get an instance of a provider by its name.

    Args:
        provider_name: Key of PROVIDER_REGISTRY

    Returns:
        Instance of the provider adapter, or None if not found
    """
    provider_class = PROVIDER_REGISTRY.get(provider_name)

    if provider_class is None:
        logger.warning("Provider '%s' not found in registry", provider_name)
        return None

    return provider_class()


def get_configured_providers() -> list[BaseExchangeRateProvider]:
    """
    Instantiate the providers listed in settings, in fallback order.

    Unknown names are skipped.
    """
    provider_instances = []
    for provider_name in getattr(settings, "EXCHANGE_RATE_PROVIDERS", []):
        instance = get_provider_instance(provider_name)
        if instance is not None:
            provider_instances.append(instance)

    return provider_instances
